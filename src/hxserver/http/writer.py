"""
=============================================================================
RESPONSE WRITER
=============================================================================

The transport primitive: turns a status, a header dict and body bytes into
HTTP/1.1 wire format and hands the bytes to a `send` callable (normally
`socket.sendall`).

=============================================================================
COMMIT POINT
=============================================================================

A response has exactly one moment after which its headers are frozen:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   writer.headers["X-A"] = "1"     headers are still a plain dict    │
    │   writer.headers["X-B"] = "2"                                       │
    │                                                                      │
    │   writer.write_header(200)   ◄─── COMMIT: status line + header      │
    │         or                        block go to the socket now        │
    │   writer.write(b"...")       ◄─── first write commits with 200      │
    │                                                                      │
    │   writer.write(b"...")            more body, headers can't change   │
    │   writer.finish()                 chunked terminator, if any        │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Anything that must end up in the header block (the hx directives, for
instance) has to be in `headers` before the commit. Wrappers get in
front of the commit by subclassing BaseResponseWriter and intercepting
write_header / write / finish; send_response is written purely in terms
of those primitives so wrappers see it too.

=============================================================================
BODY FRAMING
=============================================================================

    Content-Length set     → body bytes are written as-is
    Content-Length absent  → Transfer-Encoding: chunked

        5\\r\\n          ← chunk size in hex
        hello\\r\\n      ← chunk data
        0\\r\\n\\r\\n       ← terminator (written by finish)

=============================================================================
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, Union
import logging

from .response import HTTPResponse, format_http_date
from .status_codes import HTTPStatus


logger = logging.getLogger(__name__)


class BaseResponseWriter(ABC):
    """
    Interface every response writer implements.

    Subclasses provide the four primitives; send_response is shared.
    """

    @property
    @abstractmethod
    def headers(self) -> Dict[str, str]:
        """Outgoing headers. Mutations after commit have no effect."""

    @property
    @abstractmethod
    def committed(self) -> bool:
        """True once the status line and header block have been sent."""

    @abstractmethod
    def write_header(self, status: HTTPStatus = HTTPStatus.OK) -> None:
        """Commit the status line and headers. Later calls are ignored."""

    @abstractmethod
    def write(self, data: Union[str, bytes]) -> int:
        """Write body bytes, committing with 200 OK first if needed."""

    @abstractmethod
    def finish(self) -> None:
        """End the response. Safe to call more than once."""

    def send_response(self, response: HTTPResponse) -> None:
        """
        Write a complete HTTPResponse through this writer.

        Headers set on the response take precedence over headers
        already on the writer with the same name.
        """
        for name, value in response.headers.items():
            self.headers[name] = value

        if HTTPStatus(response.status).allows_body:
            self.headers.setdefault("Content-Length", str(len(response.body)))

        self.write_header(response.status)
        if response.body:
            self.write(response.body)
        self.finish()


class ResponseWriter(BaseResponseWriter):
    """
    Writes one HTTP/1.1 response to a byte sink.

    Usage:
        writer = ResponseWriter(sock.sendall)
        writer.headers["Content-Type"] = "text/html; charset=utf-8"
        writer.write(b"<p>first</p>")   # commits, chunked framing
        writer.write(b"<p>second</p>")
        writer.finish()

    Args:
        send: Callable receiving raw bytes (e.g. socket.sendall).
        version: HTTP version for the status line.
        server_name: Value for the Server header if none is set.
    """

    def __init__(
        self,
        send: Callable[[bytes], Any],
        version: str = "HTTP/1.1",
        server_name: str = "HXServer/1.0",
    ):
        self._send = send
        self._version = version
        self._server_name = server_name
        self._headers: Dict[str, str] = {}
        self._status: Optional[HTTPStatus] = None
        self._chunked = False
        self._finished = False
        self.bytes_written = 0

    @property
    def headers(self) -> Dict[str, str]:
        return self._headers

    @property
    def committed(self) -> bool:
        return self._status is not None

    @property
    def status(self) -> Optional[HTTPStatus]:
        """The committed status, or None before the commit."""
        return self._status

    def write_header(self, status: HTTPStatus = HTTPStatus.OK) -> None:
        if self.committed:
            logger.debug(f"Superfluous write_header({int(status)}), already sent {int(self._status)}")
            return

        self._status = HTTPStatus(status)
        headers = dict(self._headers)

        if self._status.allows_body:
            if "Content-Length" not in headers:
                headers["Transfer-Encoding"] = "chunked"
                self._chunked = True
        else:
            headers.pop("Content-Length", None)

        headers.setdefault("Date", format_http_date(datetime.now(timezone.utc)))
        headers.setdefault("Server", self._server_name)

        lines = [f"{self._version} {int(self._status)} {self._status.phrase}"]
        for name, value in headers.items():
            lines.append(f"{name}: {value}")
        lines.append("")

        self._send("\r\n".join(lines).encode("utf-8") + b"\r\n")

    def write(self, data: Union[str, bytes]) -> int:
        if isinstance(data, str):
            data = data.encode("utf-8")

        if not self.committed:
            self.write_header(HTTPStatus.OK)

        if self._finished:
            raise RuntimeError("write after finish")
        if not data or not self._status.allows_body:
            return 0

        if self._chunked:
            self._send(f"{len(data):X}\r\n".encode("ascii") + data + b"\r\n")
        else:
            self._send(data)

        self.bytes_written += len(data)
        return len(data)

    def finish(self) -> None:
        if self._finished:
            return

        if not self.committed:
            # Nothing was ever written: an empty, fully framed response.
            self._headers.setdefault("Content-Length", "0")
            self.write_header(HTTPStatus.OK)

        if self._chunked:
            self._send(b"0\r\n\r\n")

        self._finished = True
