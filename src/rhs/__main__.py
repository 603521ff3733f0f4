"""
=============================================================================
RHS CLI ENTRY POINT
=============================================================================

    rhs <directory> <port>    Serve <directory> on <port>
    rhs <port>                Serve the current directory on <port>
    rhs <directory>           Serve <directory> on port 80

A single argument that parses as a port number is taken as the port; pass
both arguments to serve a directory whose name is a number.

    python -m rhs ./public 8080
    python -m rhs 8080 --timeout 5

=============================================================================
"""

import argparse
import sys
from typing import Optional, Sequence, Tuple

from . import __version__
from .config import ServerConfig
from .log import ConsoleLog, setup_logging
from .server import HTTPServer


DEFAULT_DIRECTORY = "."
DEFAULT_PORT = 80


class UsageError(Exception):
    pass


def parse_port(value: str) -> Optional[int]:
    """Return `value` as a port number, or None if it isn't one."""
    # ASCII digits only: isdigit() alone also accepts "²" and "１２３".
    if not (value.isascii() and value.isdigit()):
        return None
    port = int(value)
    return port if port < 65536 else None


def resolve_target(positionals: Sequence[str], log) -> Tuple[str, int]:
    """
    Apply the positional argument rules.

    Raises:
        UsageError: Not one or two arguments, or an invalid port in the
                    two-argument form.
    """
    if len(positionals) not in (1, 2):
        raise UsageError("Usage: rhs [directory] [port]")

    if len(positionals) == 2:
        directory, value = positionals
        port = parse_port(value)
        if port is None:
            raise UsageError(f"Invalid port number: {value}")
        return directory, port

    first = positionals[0]
    port = parse_port(first)
    if port is not None:
        log.info(
            f"assuming `{port}` is a port. "
            "Pass both <dir> and <port> if you meant it as the directory"
        )
        return DEFAULT_DIRECTORY, port

    return first, DEFAULT_PORT


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rhs",
        description="Minimal single-threaded static file server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  rhs ./public 8080       # Serve ./public on port 8080
  rhs 8080                # Serve the current directory on port 8080
  rhs ./public            # Serve ./public on port 80
        """,
    )

    # Counted by resolve_target() so a wrong count gets the usage line.
    parser.add_argument(
        "positionals",
        nargs="*",
        metavar="target",
        help="[directory] [port], see the examples below",
    )

    parser.add_argument(
        "--timeout", "-t",
        type=float,
        default=None,
        help="Per-connection read timeout in seconds (default: wait forever)",
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)",
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"rhs {__version__}",
    )

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Run the server from the command line.

    Returns:
        Process exit status: 0 after a clean shutdown, 1 on bad arguments,
        a bad directory, or a port that could not be bound.
    """
    args = build_parser().parse_args(argv)

    setup_logging(args.log_level)
    log = ConsoleLog()

    try:
        directory, port = resolve_target(args.positionals, log)
        config = ServerConfig.from_args(directory, port, timeout=args.timeout)
        config.validate()
    except (UsageError, ValueError) as e:
        log.error(str(e))
        return 1

    server = HTTPServer(config, log)
    return 0 if server.run() else 1


if __name__ == "__main__":
    sys.exit(main())
