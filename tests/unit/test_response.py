"""
Unit tests for HTTP response writing.
"""

import pytest

from rhs.http.response import HTTPResponse, error_response, write_response
from rhs.http.status_codes import HTTPStatus

from conftest import split_response


class RecordingConnection:
    """Collects everything sent; optionally fails after N sends."""

    def __init__(self, fail_after=None):
        self.sent = []
        self.fail_after = fail_after

    def send(self, data: bytes) -> None:
        if self.fail_after is not None and len(self.sent) >= self.fail_after:
            raise BrokenPipeError("peer went away")
        self.sent.append(data)

    @property
    def data(self) -> bytes:
        return b"".join(self.sent)


class TestHTTPStatus:

    def test_status_lines(self):
        assert HTTPStatus.OK.line == "200 OK"
        assert HTTPStatus.BAD_REQUEST.line == "400 Bad Request"
        assert HTTPStatus.NOT_FOUND.line == "404 Not Found"
        assert HTTPStatus.NOT_IMPLEMENTED.line == "501 Not Implemented"

    def test_error_body(self):
        assert HTTPStatus.NOT_FOUND.error_body == b"404 Not Found\nrhs/0.1"
        assert HTTPStatus.NOT_IMPLEMENTED.error_body == b"501 Not Implemented\nrhs/0.1"


class TestHTTPResponse:
    """Tests for HTTPResponse serialisation."""

    def test_status_line(self):
        response = HTTPResponse(status="404 Not Found")
        assert response.status_line == "HTTP/1.1 404 Not Found"

    def test_to_bytes_exact(self):
        response = HTTPResponse(status="200 OK", headers={"X": "1"}, body=b"hi")
        assert response.to_bytes() == b"HTTP/1.1 200 OK\r\nX: 1\r\n\r\nhi"

    def test_no_headers(self):
        response = HTTPResponse(status="200 OK", body=b"x")
        assert response.to_bytes() == b"HTTP/1.1 200 OK\r\n\r\nx"

    def test_no_content_length_added(self):
        response = HTTPResponse(body=b"hello world")
        assert b"Content-Length" not in response.to_bytes()

    def test_body_has_no_trailing_terminator(self):
        response = HTTPResponse(body=b"end")
        assert response.to_bytes().endswith(b"\r\n\r\nend")

    def test_error_response(self):
        response = error_response(HTTPStatus.NOT_IMPLEMENTED)

        assert response.status == "501 Not Implemented"
        assert response.headers == {"Server": "rhs/0.1"}
        assert response.body == b"501 Not Implemented\nrhs/0.1"


class TestWriteResponse:
    """Tests for write_response()."""

    def test_round_trip(self):
        """What a client reads back is what was written."""
        conn = RecordingConnection()
        write_response(conn, HTTPResponse(status="200 OK", headers={"X": "1"}, body=b"hi"))

        status, headers, body = split_response(conn.data)

        assert status == "200 OK"
        assert headers == {"X": "1"}
        assert body == b"hi"

    def test_headers_in_mapping_order(self):
        conn = RecordingConnection()
        write_response(conn, HTTPResponse(headers={"B": "2", "A": "1"}))

        assert conn.data.index(b"B: 2") < conn.data.index(b"A: 1")

    def test_binary_body_written_as_is(self):
        conn = RecordingConnection()
        payload = bytes(range(256))
        write_response(conn, HTTPResponse(body=payload))

        assert conn.data.endswith(payload)

    def test_write_failure_propagates(self):
        conn = RecordingConnection(fail_after=0)

        with pytest.raises(BrokenPipeError):
            write_response(conn, HTTPResponse(body=b"never sent"))

    def test_failure_aborts_remaining_output(self):
        """If the body send fails, nothing after it is attempted."""
        conn = RecordingConnection(fail_after=1)

        with pytest.raises(BrokenPipeError):
            write_response(conn, HTTPResponse(body=b"lost"))

        assert conn.data == b"HTTP/1.1 200 OK\r\n\r\n"
