"""
=============================================================================
CORE SERVER COMPONENTS
=============================================================================

The networking plumbing under the HTTP layer:

    ┌─────────────────────────────────────────────────────────────────────┐
    │  SOCKET SERVER                                                       │
    │  • Binds 127.0.0.1:PORT and runs the accept() loop                  │
    │  • Hands each client to the connection handler, one at a time       │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │  CONNECTION                                                          │
    │  • Wraps a client socket                                            │
    │  • Line reader (byte at a time, CR stripped, LF terminated)         │
    │  • sendall() writes and an explicit close                           │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .connection import Connection, ConnectionState, read_line
from .socket_server import SocketServer

__all__ = [
    "Connection",
    "ConnectionState",
    "SocketServer",
    "read_line",
]
