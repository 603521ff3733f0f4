"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

This module wraps one accepted client socket with the small API the HTTP
layer needs: read a line, send bytes, close.

=============================================================================
TCP IS A BYTE STREAM, NOT A MESSAGE PROTOCOL!
=============================================================================

TCP does not preserve message boundaries. A request line may arrive in one
recv() or in five:

    First recv():  "GET /ind"
    Second recv(): "ex.html HTTP/1.1\r\nHo"
    Third recv():  "st example.com\r\n\r\n"

HTTP/1.1 frames its head with line terminators, so the simplest correct
reader is one that pulls bytes ONE AT A TIME until it sees a line feed:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        read_line() Flow                              │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   buffer = empty                                                     │
    │   loop:                                                              │
    │       recv(1)                                                        │
    │         ├── b""   → peer closed mid-line → ConnectionError          │
    │         ├── "\n"  → return buffer                                    │
    │         ├── "\r"  → drop it (wherever it appears)                    │
    │         └── other → append to buffer                                 │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Reading a byte at a time never over-reads into the next line, so there is
no leftover buffer to carry between calls. The price is one syscall per
byte, which is fine for a request head of a few hundred bytes.

There is no line-length cap. With no timeout configured, a client that
never sends "\n" blocks read_line() forever.

=============================================================================
"""

import socket
import time
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Callable, Optional
import uuid


logger = logging.getLogger(__name__)

# Request heads are Latin-1 on the wire: one byte is one character.
WIRE_ENCODING = "iso-8859-1"

# Leftover input discarded on close, bounded in time and size
DRAIN_TIMEOUT = 0.5
DRAIN_LIMIT = 64 * 1024


def read_line(recv: Callable[[int], bytes]) -> str:
    """
    Pull bytes from `recv` one at a time until a line feed.

    `recv` is anything shaped like socket.recv: called with 1, it returns
    one byte, or b"" at end of stream.

    Raises:
        ConnectionError: End of stream before the line feed.
    """
    buffer = bytearray()

    while True:
        byte = recv(1)
        if not byte:
            raise ConnectionError("stream closed before end of line")
        if byte == b"\n":
            return buffer.decode(WIRE_ENCODING)
        if byte != b"\r":
            buffer += byte


class ConnectionState(Enum):
    """Connection lifecycle states, tracked for logging and cleanup."""
    NEW = "new"              # Just accepted, nothing read yet
    READING = "reading"      # Reading the request head
    WRITING = "writing"      # Sending the response
    CLOSED = "closed"        # Socket released


@dataclass
class Connection:
    """
    Represents a client connection.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short identifier used in debug logs.
        state: Current connection state.
        created_at: Timestamp when connection was accepted.
        timeout: Read timeout in seconds; None blocks indefinitely.
    """

    socket: socket.socket
    address: tuple

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)
    timeout: Optional[float] = None

    def __post_init__(self):
        # The listening socket polls with a timeout; accepted sockets may
        # inherit it on some platforms, so set ours explicitly.
        self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def client_port(self) -> int:
        return self.address[1]

    @property
    def peer(self) -> str:
        """Client address as "ip:port"."""
        return f"{self.client_ip}:{self.client_port}"

    @property
    def age(self) -> float:
        """Get connection age in seconds."""
        return time.time() - self.created_at

    # =========================================================================
    # READING
    # =========================================================================

    def read_line(self) -> str:
        """
        Read one line from the socket.

        Reads a byte at a time until a line feed. Carriage returns are
        discarded wherever they occur, not only before the line feed. The
        terminator is not part of the result.

        Returns:
            The line, decoded as ISO-8859-1. len() of it is the number of
            characters accumulated.

        Raises:
            ConnectionError: If the peer closes before a line feed arrives.
            OSError: If recv() fails (reset, timeout). Never retried.
        """
        self.state = ConnectionState.READING
        return read_line(self.socket.recv)

    # =========================================================================
    # WRITING
    # =========================================================================

    def send(self, data: bytes) -> None:
        """
        Send data to the client.

        Uses sendall() so a partial write is never mistaken for success.

        Raises:
            OSError: Broken pipe, reset, etc. The caller decides what to do.
        """
        self.state = ConnectionState.WRITING
        self.socket.sendall(data)

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection.

        1. shutdown(SHUT_WR): send FIN so the client sees end-of-body
           (responses carry no Content-Length).
        2. Drain what the client sent that we never read. Closing with
           unread data makes the kernel send RST, which can destroy the
           response before the client reads it.
        3. close(): release the descriptor.

        Safe to call more than once.
        """
        if self.state == ConnectionState.CLOSED:
            return

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        try:
            self.socket.settimeout(DRAIN_TIMEOUT)
            drained = 0
            while drained < DRAIN_LIMIT:
                chunk = self.socket.recv(4096)
                if not chunk:
                    break
                drained += len(chunk)
        except OSError:
            pass  # Timeout or reset; we're closing anyway

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    def interrupt(self):
        """
        Shut down both directions without releasing the descriptor.

        A recv() blocked on this socket (in this thread after a signal, or
        in another thread) returns end-of-stream, so the owner unwinds and
        calls close() itself.
        """
        if self.state == ConnectionState.CLOSED:
            return
        try:
            self.socket.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass  # Already shut down or peer gone

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
