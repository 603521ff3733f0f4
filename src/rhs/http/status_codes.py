"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The server only ever answers with a handful of statuses:

    200 OK                 The file was read.
    400 Bad Request        The request line or a header line was malformed.
    404 Not Found          Neither the path nor <path>/index.html was readable.
    501 Not Implemented    Any method other than GET.

Error bodies are the status text plus the server name on a second line:

    404 Not Found
    rhs/0.1

=============================================================================
"""

from enum import IntEnum

from ..config import SERVER_NAME


class HTTPStatus(IntEnum):
    """
    HTTP status codes used by the server.

        >>> HTTPStatus.NOT_FOUND.line
        '404 Not Found'
    """

    OK = 200
    BAD_REQUEST = 400
    NOT_FOUND = 404
    NOT_IMPLEMENTED = 501

    @property
    def phrase(self) -> str:
        """Reason phrase, e.g. "Not Found"."""
        return _STATUS_PHRASES[self]

    @property
    def line(self) -> str:
        """
        Code and phrase as they appear after the version in a status line:

            HTTP/1.1 404 Not Found
                     ─────────────
        """
        return f"{self.value} {self.phrase}"

    @property
    def error_body(self) -> bytes:
        """Plain body sent with error statuses."""
        return f"{self.line}\n{SERVER_NAME}".encode("utf-8")


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.NOT_IMPLEMENTED: "Not Implemented",
}
