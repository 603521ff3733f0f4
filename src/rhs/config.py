"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

The configuration collaborator: one immutable value created at startup and
shared, read-only, by the accept loop and the connection handler.

=============================================================================
WHAT THE CORE NEEDS
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         ServerConfig                                │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   directory   Absolute, resolved root to serve.                     │
    │               Request paths are appended to it verbatim.            │
    │                                                                      │
    │   port        TCP port to listen on (0 = let the OS pick one).      │
    │                                                                      │
    │   Everything else has a default and only tunes the edges:           │
    │   host, backlog, read timeout.                                      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The directory is resolved ONCE, here, before the server starts. Nothing
downstream re-validates it per request.

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional


SERVER_NAME = "rhs/0.1"


@dataclass(frozen=True)
class ServerConfig:
    """
    Configuration for the static file server.

    Frozen: no component may mutate it after startup.

    Usage:
        config = ServerConfig.from_args("./public", 8080)
        config.validate()
    """

    directory: str
    """Absolute, filesystem-resolved root directory."""

    port: int = 80
    """Port to listen on. 0 lets the OS choose (handy in tests)."""

    host: str = "127.0.0.1"
    """Loopback only."""

    backlog: int = 128
    """Maximum number of queued connections."""

    timeout: Optional[float] = None
    """
    Per-connection read timeout in seconds.
    None = block forever, so one silent client holds up everyone else.
    """

    @classmethod
    def from_args(cls, directory: str, port: int, **kwargs) -> "ServerConfig":
        """Build a config, canonicalising the directory first."""
        return cls(directory=os.path.realpath(directory), port=port, **kwargs)

    def validate(self) -> None:
        """
        Validate configuration values.

        Called once at startup so a bad value fails before anything binds.

        Raises:
            ValueError: If any value is out of range.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if not os.path.isabs(self.directory):
            raise ValueError(f"directory must be absolute: {self.directory}")

        if not os.path.isdir(self.directory):
            raise ValueError(f"directory does not exist: {self.directory}")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")
