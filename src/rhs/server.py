"""
=============================================================================
HTTP SERVER
=============================================================================

Ties the pieces together. One connection at a time:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   SocketServer.accept()                                              │
    │        │                                                             │
    │        ▼                                                             │
    │   HTTPServer.handle_connection(conn)                                 │
    │        │                                                             │
    │        ├──► RequestParser.parse(conn)        lines → request         │
    │        │                                                             │
    │        ├──► GetRequest:                                              │
    │        │       StaticFileHandler.resolve()   path → status, body     │
    │        │    UnsupportedRequest:                                      │
    │        │       501 Not Implemented                                   │
    │        │    HTTPParseError:                                          │
    │        │       400 Bad Request                                       │
    │        │                                                             │
    │        ├──► write_response(conn, response)                           │
    │        │                                                             │
    │        └──► conn.close()                                             │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

A GET response echoes the request's own header mapping back, plus the
Server header every response carries.

A failing connection (reset, timeout, broken pipe) is logged and dropped.
The accept loop carries on with the next client.

=============================================================================
"""

import logging
from typing import Optional

from .config import SERVER_NAME, ServerConfig
from .core import Connection, SocketServer
from .handlers import StaticFileHandler
from .http import (
    GetRequest,
    HTTPParseError,
    HTTPResponse,
    HTTPStatus,
    RequestParser,
    error_response,
    write_response,
)
from .log import ConsoleLog, Log


logger = logging.getLogger(__name__)


class HTTPServer:
    """
    Single-threaded static file server.

    Usage:
        config = ServerConfig.from_args("./public", 8080)
        server = HTTPServer(config)
        server.run()   # Blocks until Ctrl+C

    Args:
        config: Served directory and port.
        log: Logging collaborator; console output by default.
    """

    def __init__(self, config: ServerConfig, log: Optional[Log] = None):
        self.config = config
        self.log = log or ConsoleLog()

        self._parser = RequestParser()
        self._files = StaticFileHandler(config.directory)
        self._socket_server = SocketServer(config, self.log)

    @property
    def socket_server(self) -> SocketServer:
        return self._socket_server

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def run(self) -> bool:
        """
        Start serving (blocking).

        Returns:
            False if the port could not be bound, True after shutdown().
        """
        logger.debug(f"Starting on {self.config.host}:{self.config.port}")
        return self._socket_server.start(self.handle_connection)

    def shutdown(self):
        """Stop the accept loop; safe from any thread."""
        self._socket_server.shutdown()

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def handle_connection(self, conn: Connection):
        """
        Serve one request on `conn`, then close it.

        Errors on this connection stay on this connection: socket failures
        are logged and the connection is dropped.
        """
        with conn:
            self.log.info(f"got connection from {conn.peer}")
            try:
                response = self.build_response(conn)
                write_response(conn, response)
            except OSError as e:
                self.log.error(f"connection from {conn.peer} failed: {e}")

    def build_response(self, conn: Connection) -> HTTPResponse:
        """
        Parse the request on `conn` and produce its response.

        Raises:
            OSError: Reading the request failed.
        """
        try:
            request = self._parser.parse(conn)
        except HTTPParseError as e:
            self.log.error(f"bad request from {conn.peer}: {e.message}")
            return error_response(HTTPStatus(e.status_code))

        if not isinstance(request, GetRequest):
            return error_response(HTTPStatus.NOT_IMPLEMENTED)

        status, body = self._files.resolve(request.path)

        headers = dict(request.headers)
        headers["Server"] = SERVER_NAME
        return HTTPResponse(status=status, headers=headers, body=body)
