"""
=============================================================================
HTTP RESPONSE BUILDER
=============================================================================

Response objects returned by handlers, plus a fluent builder.

=============================================================================
RESPONSE LIFECYCLE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   Handler returns        Middleware may         Server hands it     │
    │   HTTPResponse   ─────►  modify headers  ─────► to the writer       │
    │                                                  (http/writer.py)   │
    │                                                        │            │
    │                                                        ▼            │
    │                                         status line + headers       │
    │                                         + body on the socket        │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

An HTTPResponse is only a value. Nothing reaches the client until the
writer commits it, which is also the moment hx response headers are
flushed (see hxserver.htmx.middleware).

Handlers that want to stream instead write to `request.writer` directly
and return None.

=============================================================================
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Dict, Any, Union
import json

from .status_codes import HTTPStatus


@dataclass
class HTTPResponse:
    """
    Represents an HTTP response to be sent to the client.

    Use ResponseBuilder or the convenience functions at the bottom of this
    module for a more convenient way to construct responses.
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""


class ResponseBuilder:
    """
    Fluent builder for constructing HTTP responses.

    Usage:
        response = (ResponseBuilder()
            .status(HTTPStatus.OK)
            .header("X-Custom", "value")
            .html("<li>item</li>")
            .build())
    """

    def __init__(self):
        self._status = HTTPStatus.OK
        self._headers: Dict[str, str] = {}
        self._body = b""

    def status(self, status: HTTPStatus) -> "ResponseBuilder":
        self._status = status
        return self

    def header(self, name: str, value: str) -> "ResponseBuilder":
        self._headers[name] = value
        return self

    def headers(self, headers: Dict[str, str]) -> "ResponseBuilder":
        self._headers.update(headers)
        return self

    def body(self, body: Union[str, bytes]) -> "ResponseBuilder":
        if isinstance(body, str):
            self._body = body.encode("utf-8")
        else:
            self._body = body
        return self

    def text(self, text: str, content_type: str = "text/plain; charset=utf-8") -> "ResponseBuilder":
        self._body = text.encode("utf-8")
        self._headers["Content-Type"] = content_type
        return self

    def html(self, html: str) -> "ResponseBuilder":
        """
        Set an HTML response body.

        hx clients swap HTML fragments into the page, so this is the body
        type most handlers in an hx application return.
        """
        self._body = html.encode("utf-8")
        self._headers["Content-Type"] = "text/html; charset=utf-8"
        return self

    def json(self, data: Any, pretty: bool = False) -> "ResponseBuilder":
        indent = 2 if pretty else None
        self._body = json.dumps(data, indent=indent, ensure_ascii=False).encode("utf-8")
        self._headers["Content-Type"] = "application/json; charset=utf-8"
        return self

    def close_connection(self) -> "ResponseBuilder":
        self._headers["Connection"] = "close"
        return self

    def build(self) -> HTTPResponse:
        """Build and return the HTTPResponse object."""
        return HTTPResponse(
            status=self._status,
            headers=dict(self._headers),
            body=self._body,
        )


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================

def format_http_date(dt: datetime) -> str:
    """
    Format a datetime as an HTTP-date (RFC 7231).

    Format: Day, DD Mon YYYY HH:MM:SS GMT
    Example: Wed, 01 Jan 2026 12:00:00 GMT

    HTTP dates are always in GMT, never local time.
    """
    days = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    months = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

    return (
        f"{days[dt.weekday()]}, "
        f"{dt.day:02d} {months[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def ok(body: Union[str, bytes, dict, list] = "", content_type: Optional[str] = None) -> HTTPResponse:
    """
    Create a 200 OK response.

    dicts and lists are sent as JSON, strings as plain text unless
    content_type says otherwise.
    """
    builder = ResponseBuilder().status(HTTPStatus.OK)

    if isinstance(body, (dict, list)):
        builder.json(body)
    elif isinstance(body, str):
        builder.text(body, content_type or "text/plain; charset=utf-8")
    else:
        builder.body(body)
        if content_type:
            builder.header("Content-Type", content_type)

    return builder.build()


def html(markup: str, status: HTTPStatus = HTTPStatus.OK) -> HTTPResponse:
    """Create an HTML response, the usual reply to an hx request."""
    return ResponseBuilder().status(status).html(markup).build()


def no_content() -> HTTPResponse:
    """
    Create a 204 No Content response.

    Common for hx requests that only carry response headers, e.g. a
    delete that answers with HX-Trigger and nothing to swap.
    """
    return HTTPResponse(status=HTTPStatus.NO_CONTENT)


def bad_request(message: str = "Bad Request") -> HTTPResponse:
    return (ResponseBuilder()
        .status(HTTPStatus.BAD_REQUEST)
        .json({"error": message})
        .build())


def not_found(message: str = "Not Found") -> HTTPResponse:
    return (ResponseBuilder()
        .status(HTTPStatus.NOT_FOUND)
        .json({"error": message})
        .build())


def internal_error(message: str = "Internal Server Error") -> HTTPResponse:
    """
    Create a 500 Internal Server Error response.

    Never put exception details in the message; they are logged instead.
    """
    return (ResponseBuilder()
        .status(HTTPStatus.INTERNAL_SERVER_ERROR)
        .json({"error": message})
        .build())
