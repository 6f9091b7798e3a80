"""
=============================================================================
HTTP PROTOCOL IMPLEMENTATION
=============================================================================

The HTTP/1.1 layer the hx directives ride on.

    ┌─────────────────────────────────────────────────────────────────────┐
    │ REQUEST PARSER (request.py)                                         │
    │   b"GET /cart HTTP/1.1\r\nHX-Request: true\r\n\r\n"                  │
    │       → HTTPRequest(method="GET", path="/cart", headers={...})      │
    ├─────────────────────────────────────────────────────────────────────┤
    │ RESPONSE (response.py)                                              │
    │   HTTPResponse value objects, ResponseBuilder, ok()/html()/...     │
    ├─────────────────────────────────────────────────────────────────────┤
    │ WRITER (writer.py)                                                  │
    │   Commits status line + headers, then streams the body              │
    ├─────────────────────────────────────────────────────────────────────┤
    │ STATUS CODES (status_codes.py)                                      │
    │   HTTPStatus enum with reason phrases                               │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .request import HTTPRequest, RequestParser, HTTPParseError, parse_request
from .response import (
    HTTPResponse,
    ResponseBuilder,
    format_http_date,
    ok,
    html,
    no_content,
    bad_request,
    not_found,
    internal_error,
)
from .status_codes import HTTPStatus
from .writer import BaseResponseWriter, ResponseWriter

__all__ = [
    # Request parsing
    "HTTPRequest",
    "RequestParser",
    "HTTPParseError",
    "parse_request",

    # Response building
    "HTTPResponse",
    "ResponseBuilder",
    "format_http_date",
    "ok",
    "html",
    "no_content",
    "bad_request",
    "not_found",
    "internal_error",

    # Transport
    "BaseResponseWriter",
    "ResponseWriter",

    # Status codes
    "HTTPStatus",
]
