"""
HTTP protocol layer: request parsing, response writing, status codes.

    from rhs.http import RequestParser, GetRequest, HTTPResponse, write_response
"""

from .status_codes import HTTPStatus
from .request import (
    GetRequest,
    HTTPParseError,
    ParseState,
    Request,
    RequestParser,
    UnsupportedRequest,
    parse_request,
)
from .response import HTTPResponse, error_response, write_response

__all__ = [
    "HTTPStatus",
    "GetRequest",
    "HTTPParseError",
    "ParseState",
    "Request",
    "RequestParser",
    "UnsupportedRequest",
    "parse_request",
    "HTTPResponse",
    "error_response",
    "write_response",
]
