"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Parses raw HTTP/1.1 request bytes into structured HTTPRequest objects.

=============================================================================
WHAT AN HX REQUEST LOOKS LIKE ON THE WIRE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │  POST /cart/items HTTP/1.1\r\n              ← request line          │
    │  Host: shop.example\r\n                                             │
    │  HX-Request: true\r\n                       ← sent by the hx client │
    │  HX-Current-Url: https://shop.example/\r\n                          │
    │  HX-Target: cart\r\n                                                │
    │  HX-Trigger: add-btn\r\n                                            │
    │  Content-Type: application/x-www-form-urlencoded\r\n                │
    │  Content-Length: 9\r\n                                              │
    │  \r\n                                       ← header/body separator │
    │  sku=12345                                  ← body                  │
    └─────────────────────────────────────────────────────────────────────┘

Header names are case-insensitive, so the parser stores them lower-cased:
"HX-Request" is read back as request.get_header("HX-Request") or
request.headers["hx-request"].

=============================================================================
REQUEST-SCOPED STATE
=============================================================================

Every parsed request gets its own `context` dict. Middleware uses it to
attach per-request objects (the hx response header record, cached
snapshots) without any process-wide state: two requests served at the
same time on two worker threads hold two different HTTPRequest objects
and therefore two different context dicts.

The `writer` slot holds the transport the response will be written to.
The server fills it in before the middleware pipeline runs; middleware
may replace it with a wrapper.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Optional, Dict, Any, TYPE_CHECKING
from urllib.parse import parse_qs, urlparse, unquote
import re
import json

if TYPE_CHECKING:
    from .writer import BaseResponseWriter


class HTTPParseError(Exception):
    """
    Raised when HTTP request parsing fails.

    Carries the HTTP status code that should be returned to the client:

        400 Bad Request                 - Malformed request syntax
        405 Method Not Allowed          - Unknown/unsupported method
        413 Payload Too Large           - Request exceeds size limit
        505 HTTP Version Not Supported  - Unknown HTTP version
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class HTTPRequest:
    """
    Represents a parsed HTTP request.

    Attributes:
        method:         HTTP method (GET, POST, ...)
        path:           Request path without query string
        version:        "HTTP/1.1" or "HTTP/1.0"
        headers:        Header dict with LOWERCASE keys
        query_params:   "?a=1&a=2" → {"a": ["1", "2"]}
        body:           Raw body bytes
        client_address: (ip, port) of the client
        context:        Request-scoped storage for middleware
        writer:         Response transport, set by the server
    """

    method: str
    path: str
    version: str = "HTTP/1.1"

    headers: Dict[str, str] = field(default_factory=dict)
    query_params: Dict[str, list[str]] = field(default_factory=dict)
    body: bytes = b""

    client_address: tuple[str, int] = ("", 0)

    context: Dict[Any, Any] = field(default_factory=dict, repr=False)
    writer: Optional["BaseResponseWriter"] = field(default=None, repr=False)

    _body_json: Optional[Any] = field(default=None, repr=False)

    @property
    def content_type(self) -> Optional[str]:
        """Content-Type without parameters ("text/html; charset=utf-8" → "text/html")."""
        ct = self.headers.get("content-type", "")
        return ct.split(";")[0].strip().lower() or None

    @property
    def content_length(self) -> int:
        try:
            return int(self.headers.get("content-length", 0))
        except ValueError:
            return 0

    @property
    def user_agent(self) -> str:
        return self.headers.get("user-agent", "")

    @property
    def json(self) -> Any:
        """
        Parse the request body as JSON (cached after first access).

        Raises:
            HTTPParseError: If body is not valid JSON.
        """
        if self._body_json is None and self.body:
            try:
                self._body_json = json.loads(self.body.decode("utf-8"))
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                raise HTTPParseError(f"Invalid JSON body: {e}")
        return self._body_json

    def get_header(self, name: str, default: str = "") -> str:
        """
        Get a header value (case-insensitive lookup).

        Example:
            request.get_header("HX-Target")  # same as headers["hx-target"]
        """
        return self.headers.get(name.lower(), default)

    def get_query(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Get the first value of a query parameter."""
        values = self.query_params.get(name, [])
        return values[0] if values else default


class RequestParser:
    """
    Parses raw HTTP request bytes into HTTPRequest objects.

        Raw bytes
            │
            ├── 1. size check            → 413
            ├── 2. split at \\r\\n\\r\\n     → 400 if missing
            ├── 3. request line          → 400 / 405 / 505
            ├── 4. headers (lower-cased)
            ├── 5. body by Content-Length
            ▼
        HTTPRequest
    """

    VALID_METHODS = {
        "GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS",
    }

    REQUEST_LINE_PATTERN = re.compile(r"^([A-Z]+) ([^ ]+) (HTTP/\d\.\d)$")
    HEADER_PATTERN = re.compile(r"^([^:]+):\s*(.*)$")

    def __init__(self, max_request_size: int = 10 * 1024 * 1024):
        self.max_request_size = max_request_size

    def parse(
        self,
        data: bytes,
        client_address: tuple[str, int] = ("", 0)
    ) -> HTTPRequest:
        """
        Parse raw HTTP request data into an HTTPRequest object.

        Args:
            data: Raw HTTP request bytes.
            client_address: Client's (ip, port) tuple for logging.

        Raises:
            HTTPParseError: If the request is malformed.
        """
        if len(data) > self.max_request_size:
            raise HTTPParseError(
                f"Request too large: {len(data)} bytes",
                status_code=413,
            )

        header_end = data.find(b"\r\n\r\n")
        if header_end == -1:
            raise HTTPParseError("Incomplete request: no header terminator")

        header_section = data[:header_end].decode("utf-8", errors="replace")
        body = data[header_end + 4:]

        lines = header_section.split("\r\n")
        method, path, query_params, version = self._parse_request_line(lines[0])
        headers = self._parse_headers(lines[1:])

        try:
            content_length = int(headers.get("content-length", 0))
        except ValueError:
            raise HTTPParseError("Invalid Content-Length")
        if content_length < 0:
            raise HTTPParseError("Invalid Content-Length")
        if len(body) < content_length:
            raise HTTPParseError(
                f"Incomplete body: expected {content_length} bytes, got {len(body)}"
            )

        return HTTPRequest(
            method=method,
            path=path,
            version=version,
            headers=headers,
            query_params=query_params,
            body=body[:content_length],
            client_address=client_address,
        )

    def _parse_request_line(
        self,
        line: str
    ) -> tuple[str, str, Dict[str, list[str]], str]:
        """
        Parse "METHOD SP REQUEST-URI SP HTTP-VERSION".

        Returns:
            Tuple of (method, path, query_params, version)
        """
        match = self.REQUEST_LINE_PATTERN.match(line)
        if not match:
            raise HTTPParseError(f"Invalid request line: {line}")

        method, uri, version = match.groups()

        if method not in self.VALID_METHODS:
            raise HTTPParseError(f"Invalid method: {method}", status_code=405)

        if version not in ("HTTP/1.0", "HTTP/1.1"):
            raise HTTPParseError(
                f"Unsupported HTTP version: {version}",
                status_code=505,
            )

        parsed = urlparse(uri)
        path = unquote(parsed.path) or "/"
        query_params = parse_qs(parsed.query, keep_blank_values=True)

        if ".." in path:
            raise HTTPParseError("Invalid path: contains ..", status_code=400)

        return method, path, query_params, version

    def _parse_headers(self, lines: list[str]) -> Dict[str, str]:
        """
        Parse header lines into a dict with lowercase names.

        Repeated headers are joined with ", " (RFC 7230 section 3.2.2).
        Obsolete line folding (continuation lines starting with
        whitespace) is appended to the previous header.
        """
        headers: Dict[str, str] = {}
        current_name = None

        for line in lines:
            if not line:
                continue

            if line[0] in (" ", "\t"):
                if current_name is not None:
                    headers[current_name] += " " + line.strip()
                continue

            match = self.HEADER_PATTERN.match(line)
            if not match:
                continue  # lenient: skip malformed lines

            name, value = match.groups()
            name = name.strip().lower()
            value = value.strip()
            current_name = name

            if name in headers:
                headers[name] += ", " + value
            else:
                headers[name] = value

        return headers


def parse_request(
    data: bytes,
    client_address: tuple[str, int] = ("", 0),
    max_size: int = 10 * 1024 * 1024
) -> HTTPRequest:
    """
    Convenience function to parse an HTTP request in one call.

    Use RequestParser directly to parse many requests with the same
    settings.
    """
    parser = RequestParser(max_request_size=max_size)
    return parser.parse(data, client_address)
