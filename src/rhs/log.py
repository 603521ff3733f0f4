"""
=============================================================================
CONSOLE LOGGING
=============================================================================

The server core never prints. It talks to a small logging collaborator with
three operations:

    info(message)    Something happened (a connection arrived).
    error(message)   Something failed (bind, accept, a broken client).
    done(message)    A milestone was reached (the server is ready).

ConsoleLog implements that interface on top of the standard `logging`
module, and ColorFormatter renders records the way the terminal output has
always looked:

    [INFO] got connection from 127.0.0.1:51234        (blue)
    [ERR!] could not bind to 127.0.0.1:80             (red)
    [DONE] serving `/srv/www` on port `8080`          (green)

Tests inject their own recorder instead, so nothing reaches the console.

=============================================================================
"""

import logging
import sys
from typing import IO, Optional, Protocol


# Between INFO (20) and WARNING (30): a success worth showing at INFO level.
DONE = 25
logging.addLevelName(DONE, "DONE")

RESET = "\x1b[0m"


class Log(Protocol):
    """What the server core needs from a logger."""

    def info(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def done(self, message: str) -> None: ...


class ColorFormatter(logging.Formatter):
    """
    Formatter that wraps each record in an ANSI color and a short tag.

    Levels without an entry fall back to a plain "[LEVELNAME] message".
    """

    STYLES = {
        logging.INFO: ("\x1b[34m", "INFO"),
        logging.ERROR: ("\x1b[31m", "ERR!"),
        DONE: ("\x1b[32m", "DONE"),
    }

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        style = self.STYLES.get(record.levelno)
        if style is None:
            return f"[{record.levelname}] {message}"
        color, tag = style
        return f"{color}[{tag}] {message}{RESET}"


class ConsoleLog:
    """
    Log collaborator backed by a `logging.Logger`.

    Args:
        logger: Target logger. Defaults to the "rhs" package logger.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger("rhs")

    def info(self, message: str) -> None:
        self.logger.info(message)

    def error(self, message: str) -> None:
        self.logger.error(message)

    def done(self, message: str) -> None:
        self.logger.log(DONE, message)


def setup_logging(level: str = "INFO", stream: Optional[IO[str]] = None) -> logging.Logger:
    """
    Configure the "rhs" logger for console output.

    Installs a single StreamHandler with ColorFormatter. Calling it again
    replaces the handler instead of stacking a second one.

    Args:
        level: Level name (DEBUG, INFO, WARNING, ERROR).
        stream: Output stream, stdout by default.

    Returns:
        The configured logger.
    """
    logger = logging.getLogger("rhs")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    for handler in list(logger.handlers):
        if getattr(handler, "_rhs_console", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(ColorFormatter())
    handler._rhs_console = True
    logger.addHandler(handler)

    # Our handler already prints; don't echo through the root logger too.
    logger.propagate = False
    return logger
