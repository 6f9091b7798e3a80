"""
=============================================================================
LOGGING MIDDLEWARE
=============================================================================

Access logging with timing and request IDs.

=============================================================================
LOG FORMATS
=============================================================================

    TEXT (default), Apache combined style plus an hx marker:
    ┌─────────────────────────────────────────────────────────────────────┐
    │ 127.0.0.1 - - [10/Jun/2026:10:55:36 +0000] "POST /cart" 200 812     │
    │ 3.21ms hx                                                           │
    └─────────────────────────────────────────────────────────────────────┘

    JSON (for log aggregators):
    ┌─────────────────────────────────────────────────────────────────────┐
    │ {"request_id": "a1b2c3d4", "method": "POST", "path": "/cart",       │
    │  "hx": true, "status_code": 200, "content_length": 812, ...}        │
    └─────────────────────────────────────────────────────────────────────┘

The "hx" flag says whether the hx client sent the request, which is
usually the first thing to check when a fragment shows up where a full
page was expected (or the other way round).

=============================================================================
"""

from dataclasses import dataclass
from typing import Optional
import json
import logging
import time
import uuid

from .base import Middleware, NextHandler
from ..htmx.request import is_hx_request
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


# Configure separately from the rest of the package, e.g.
#   logging.getLogger("hxserver.access").addHandler(file_handler)
logger = logging.getLogger("hxserver.access")


@dataclass
class RequestLog:
    """Structured log entry for a request."""

    request_id: str
    method: str
    path: str
    client_ip: str
    user_agent: str
    hx: bool
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        return {
            "request_id": self.request_id,
            "method": self.method,
            "path": self.path,
            "client_ip": self.client_ip,
            "user_agent": self.user_agent,
            "hx": self.hx,
            "status_code": self.status_code,
            "content_length": self.content_length,
            "duration_ms": round(self.duration_ms, 2),
            "timestamp": self.timestamp,
        }

    def to_text(self) -> str:
        text = (
            f'{self.client_ip or "-"} - - [{self.timestamp}] '
            f'"{self.method} {self.path}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms'
        )
        return f"{text} hx" if self.hx else text


class LoggingMiddleware(Middleware):
    """
    Request logging middleware.

    Put it FIRST so it sees every request, including ones rejected by
    later middleware, and so its timing covers the whole chain.

        server.use(LoggingMiddleware(log_format="json", skip_paths=["/health"]))
        server.use(HXMiddleware())

    Args:
        log_format: "text" or "json".
        include_request_id: Add an X-Request-ID header to the response.
        log_level: Level for access log lines.
        skip_paths: Paths that are never logged.
    """

    def __init__(
        self,
        log_format: str = "text",
        include_request_id: bool = True,
        log_level: int = logging.INFO,
        skip_paths: Optional[list[str]] = None,
    ):
        self.log_format = log_format
        self.include_request_id = include_request_id
        self.log_level = log_level
        self.skip_paths = set(skip_paths or [])

    def __call__(self, request: HTTPRequest, next: NextHandler) -> Optional[HTTPResponse]:
        # 8 hex chars of a UUID4 are plenty to correlate log lines.
        request_id = str(uuid.uuid4())[:8]
        start_time = time.time()

        # Before next(): the request ID has to reach a streamed response
        # before its headers are committed.
        writer = request.writer
        if self.include_request_id and writer is not None and not writer.committed:
            writer.headers["X-Request-ID"] = request_id

        try:
            response = next(request)
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                f"Request failed: {request.method} {request.path} "
                f"- {type(e).__name__}: {e} ({duration_ms:.2f}ms)"
            )
            raise

        duration_ms = (time.time() - start_time) * 1000

        if response is not None and self.include_request_id:
            response.headers["X-Request-ID"] = request_id

        if request.path in self.skip_paths:
            return response

        if response is not None:
            status_code = int(response.status)
            content_length = len(response.body)
        else:
            status_code = int(getattr(request.writer, "status", None) or 0)
            content_length = getattr(request.writer, "bytes_written", 0)

        log_entry = RequestLog(
            request_id=request_id,
            method=request.method,
            path=request.path,
            client_ip=request.client_address[0],
            user_agent=request.user_agent or "-",
            hx=is_hx_request(request),
            status_code=status_code,
            content_length=content_length,
            duration_ms=duration_ms,
            timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
        )

        if self.log_format == "json":
            logger.log(self.log_level, json.dumps(log_entry.to_dict()))
        else:
            logger.log(self.log_level, log_entry.to_text())

        return response
