"""
=============================================================================
RHS - A MINIMAL STATIC FILE SERVER
=============================================================================

Serves files from one directory over HTTP/1.1, one connection at a time,
using nothing but raw sockets.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    rhs/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m rhs)
    ├── server.py            # HTTPServer: the per-connection pipeline
    ├── config.py            # ServerConfig dataclass
    ├── log.py               # Console logging collaborator
    ├── core/
    │   ├── socket_server.py # Accept loop
    │   └── connection.py    # Client socket wrapper, line reader
    ├── http/
    │   ├── request.py       # Request parsing
    │   ├── response.py      # Response writing
    │   └── status_codes.py  # The four statuses we send
    └── handlers/
        └── static.py        # Path resolution with index.html fallback

=============================================================================
QUICK START
=============================================================================

    from rhs import HTTPServer, ServerConfig

    server = HTTPServer(ServerConfig.from_args("./public", 8080))
    server.run()

=============================================================================
"""

__version__ = "0.1.0"

from .server import HTTPServer
from .config import ServerConfig

__all__ = ["HTTPServer", "ServerConfig", "__version__"]
