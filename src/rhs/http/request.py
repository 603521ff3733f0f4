"""
=============================================================================
HTTP REQUEST PARSING
=============================================================================

Turns the lines of a request head into a structured request.

=============================================================================
WHAT A REQUEST LOOKS LIKE HERE
=============================================================================

    GET /docs/index.html HTTP/1.1\r\n        ← Request line
    Host example.com\r\n                     ← Header lines
    Accept */*\r\n
    \r\n                                     ← Empty line: head is over

Every line is split on whitespace and only the first two tokens are kept:

    request line   "GET /docs/index.html HTTP/1.1"  → method, path
    header line    "Host example.com"               → name, value

Header lines are read as `Name Value`, NOT `Name: Value`. A standard
`Host: example.com` line therefore yields the name "Host:" (colon included),
and a value with spaces in it ("Mozilla/5.0 (X11; Linux)") is cut at the
first space. Both are part of the wire behaviour clients already see.

=============================================================================
PARSER STATES
=============================================================================

    ┌──────────────┐  request line   ┌──────────────┐
    │ READ_INITIAL │ ──────────────► │ READ_HEADERS │ ──┐ header line
    └──────────────┘                 └──────────────┘ ◄─┘
                                            │
                                            │ empty line
                                            ▼
                                         return

There is no explicit "done" state: the parser returns the moment it reads an
empty line while in READ_HEADERS.

=============================================================================
CLASSIFICATION
=============================================================================

    method == "GET"  (exact, case-sensitive)  → GetRequest(path, headers)
    anything else                             → UnsupportedRequest()

A line with fewer than two tokens raises HTTPParseError (400). The request
head is always read to the empty line first, so a bad line is only reported
once parsing reaches it.

=============================================================================
"""

import io
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Protocol, Tuple, Union

from ..core.connection import read_line
from .status_codes import HTTPStatus


logger = logging.getLogger(__name__)


class HTTPParseError(Exception):
    """
    Raised when a request cannot be parsed.

    Carries the status code the client should receive.
    """

    def __init__(self, message: str, status_code: int = HTTPStatus.BAD_REQUEST):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class LineReader(Protocol):
    """Anything that yields request lines; Connection is the real one."""

    def read_line(self) -> str: ...


@dataclass(frozen=True)
class GetRequest:
    """
    A GET request.

    Attributes:
        path: The request-target exactly as received (no decoding, no
              normalisation, query string included).
        headers: Header name → value; the last duplicate wins.
    """

    path: str
    headers: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class UnsupportedRequest:
    """Any request whose method is not GET. Headers are not kept."""


Request = Union[GetRequest, UnsupportedRequest]


class ParseState(Enum):
    READ_INITIAL = "read_initial"
    READ_HEADERS = "read_headers"


def _first_two_tokens(line: str, what: str) -> Tuple[str, str]:
    parts = line.split(maxsplit=2)
    if len(parts) < 2:
        raise HTTPParseError(f"Malformed {what}: {line!r}")
    return parts[0], parts[1]


class RequestParser:
    """
    Line-driven request parser.

    Usage:
        parser = RequestParser()
        request = parser.parse(connection)

        if isinstance(request, GetRequest):
            ...
    """

    def parse(self, reader: LineReader) -> Request:
        """
        Read and classify one request.

        Args:
            reader: Source of lines, typically the client Connection.

        Returns:
            GetRequest or UnsupportedRequest.

        Raises:
            HTTPParseError: A line is missing its second token.
            OSError: Reading from the reader failed.
        """
        method = ""
        path = ""
        headers: Dict[str, str] = {}
        state = ParseState.READ_INITIAL

        while True:
            line = reader.read_line()

            if state is ParseState.READ_INITIAL:
                method, path = _first_two_tokens(line, "request line")
                state = ParseState.READ_HEADERS
                continue

            if not line:
                break

            name, value = _first_two_tokens(line, "header line")
            headers[name] = value

        logger.debug(f"Parsed {method} {path} with {len(headers)} headers")

        if method == "GET":
            return GetRequest(path=path, headers=headers)
        return UnsupportedRequest()


class _BytesLineReader:
    """Feeds an in-memory request to the parser."""

    def __init__(self, data: bytes):
        self._stream = io.BytesIO(data)

    def read_line(self) -> str:
        return read_line(self._stream.read)


def parse_request(data: bytes) -> Request:
    """
    Parse a complete request head held in memory.

    Args:
        data: Raw request bytes, up to and including the empty line.

    Raises:
        HTTPParseError: Malformed or truncated request.
    """
    try:
        return RequestParser().parse(_BytesLineReader(data))
    except ConnectionError:
        raise HTTPParseError("Incomplete request: missing empty line")
