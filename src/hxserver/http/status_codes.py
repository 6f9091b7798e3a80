"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The status codes this server actually produces, with their reason phrases.

    ┌────────┬───────────────────────────────────────────────────────────┐
    │  2xx   │ SUCCESS       200 OK, 201 Created, 204 No Content        │
    │  3xx   │ REDIRECTION   301, 302, 303, 304                         │
    │  4xx   │ CLIENT ERROR  400, 404, 405, 408, 413, 422, 429, 431     │
    │  5xx   │ SERVER ERROR  500, 501, 503, 505                          │
    └────────┴───────────────────────────────────────────────────────────┘

A note on hx clients: the client-side script only swaps content for 2xx
responses by default. Redirect-like behaviour for partial page updates is
expressed with the HX-Location / HX-Redirect response headers rather than
with 3xx status codes, because the browser follows 3xx transparently and
the script never sees them.

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

    Example:
        >>> HTTPStatus.OK
        <HTTPStatus.OK: 200>
        >>> HTTPStatus.OK.phrase
        'OK'
        >>> int(HTTPStatus.NOT_FOUND)
        404
    """

    # 1xx Informational
    CONTINUE = 100

    # 2xx Success
    OK = 200
    CREATED = 201
    ACCEPTED = 202
    NO_CONTENT = 204

    # 3xx Redirection
    MOVED_PERMANENTLY = 301
    FOUND = 302
    SEE_OTHER = 303
    NOT_MODIFIED = 304

    # 4xx Client Errors
    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405
    REQUEST_TIMEOUT = 408
    PAYLOAD_TOO_LARGE = 413
    UNPROCESSABLE_ENTITY = 422
    TOO_MANY_REQUESTS = 429
    REQUEST_HEADER_FIELDS_TOO_LARGE = 431

    # 5xx Server Errors
    INTERNAL_SERVER_ERROR = 500
    NOT_IMPLEMENTED = 501
    SERVICE_UNAVAILABLE = 503
    HTTP_VERSION_NOT_SUPPORTED = 505

    @property
    def phrase(self) -> str:
        """
        Get the reason phrase for this status code.

            HTTP/1.1 404 Not Found
                     ─── ─────────
                      │      └── Reason phrase
                      └───────── Status code
        """
        return _STATUS_PHRASES.get(self, "Unknown")

    @property
    def is_informational(self) -> bool:
        return 100 <= self < 200

    @property
    def allows_body(self) -> bool:
        """
        Check if a response with this status may carry a body.

        RFC 7230 section 3.3.3: 1xx, 204 and 304 responses never have one,
        so they must not be sent with chunked framing either.
        """
        return not (
            self.is_informational
            or self == HTTPStatus.NO_CONTENT
            or self == HTTPStatus.NOT_MODIFIED
        )


_STATUS_PHRASES = {
    HTTPStatus.CONTINUE: "Continue",

    HTTPStatus.OK: "OK",
    HTTPStatus.CREATED: "Created",
    HTTPStatus.ACCEPTED: "Accepted",
    HTTPStatus.NO_CONTENT: "No Content",

    HTTPStatus.MOVED_PERMANENTLY: "Moved Permanently",
    HTTPStatus.FOUND: "Found",
    HTTPStatus.SEE_OTHER: "See Other",
    HTTPStatus.NOT_MODIFIED: "Not Modified",

    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.UNAUTHORIZED: "Unauthorized",
    HTTPStatus.FORBIDDEN: "Forbidden",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.METHOD_NOT_ALLOWED: "Method Not Allowed",
    HTTPStatus.REQUEST_TIMEOUT: "Request Timeout",
    HTTPStatus.PAYLOAD_TOO_LARGE: "Payload Too Large",
    HTTPStatus.UNPROCESSABLE_ENTITY: "Unprocessable Entity",
    HTTPStatus.TOO_MANY_REQUESTS: "Too Many Requests",
    HTTPStatus.REQUEST_HEADER_FIELDS_TOO_LARGE: "Request Header Fields Too Large",

    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
    HTTPStatus.NOT_IMPLEMENTED: "Not Implemented",
    HTTPStatus.SERVICE_UNAVAILABLE: "Service Unavailable",
    HTTPStatus.HTTP_VERSION_NOT_SUPPORTED: "HTTP Version Not Supported",
}
