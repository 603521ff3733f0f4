"""
=============================================================================
HTTP RESPONSE WRITING
=============================================================================

Serialises a response onto the client socket.

=============================================================================
WIRE FORMAT
=============================================================================

    HTTP/1.1 200 OK\r\n             ← Status line
    Server: rhs/0.1\r\n             ← One line per header, mapping order
    Host example.com\r\n
    \r\n                            ← Blank line
    <body bytes>                    ← Raw, no trailing terminator

No Content-Length is computed or sent, and there is no chunking. The end of
the body is the end of the connection: the server closes it after every
response.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Dict

from ..config import SERVER_NAME
from .status_codes import HTTPStatus


@dataclass
class HTTPResponse:
    """
    Represents an HTTP response to be sent to the client.

    Attributes:
        status: Code and phrase, e.g. "200 OK".
        headers: Written in iteration order as "key: value".
        body: Raw bytes written as-is.
    """

    status: str = HTTPStatus.OK.line
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        return f"{self.version} {self.status}"

    def head_bytes(self) -> bytes:
        """Status line, header lines and the blank line."""
        lines = [self.status_line]
        for name, value in self.headers.items():
            lines.append(f"{name}: {value}")
        lines.append("")
        # Header values came off the wire as Latin-1; send them back the same way.
        return ("\r\n".join(lines) + "\r\n").encode("iso-8859-1", errors="replace")

    def to_bytes(self) -> bytes:
        """The complete response exactly as it goes on the wire."""
        return self.head_bytes() + self.body


def error_response(status: HTTPStatus) -> HTTPResponse:
    """
    Plain error response: "<code> <phrase>\\nrhs/0.1" with a Server header.
    """
    return HTTPResponse(
        status=status.line,
        headers={"Server": SERVER_NAME},
        body=status.error_body,
    )


def write_response(connection, response: HTTPResponse) -> None:
    """
    Write a response to a connection.

    Head first, then body, each with sendall(). If the head fails to send,
    the body is never attempted.

    Args:
        connection: Anything with send(bytes), normally a Connection.
        response: The response to write.

    Raises:
        OSError: Broken pipe, reset, timeout. Propagated as-is.
    """
    connection.send(response.head_bytes())
    if response.body:
        connection.send(response.body)
