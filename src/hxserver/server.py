"""
=============================================================================
HTTP SERVER
=============================================================================

Ties the parser, the middleware pipeline, the handler and the response
writer together.

=============================================================================
REQUEST LIFECYCLE
=============================================================================

    1. ACCEPT
       └── ThreadingTCPServer gives each connection its own thread

    2. READ + PARSE
       └── head up to \\r\\n\\r\\n, body by Content-Length → HTTPRequest

    3. ATTACH TRANSPORT
       └── request.writer = ResponseWriter(sock.sendall)

    4. MIDDLEWARE PIPELINE
       └── Logging → HX (binds record, wraps writer) → ... → handler

    5. WRITE RESPONSE
       ├── handler returned HTTPResponse → request.writer.send_response()
       └── handler returned None         → request.writer.finish()

    6. CLOSE
       └── one request per connection ("Connection: close")

Each request runs start to finish on one worker thread and owns its
HTTPRequest, so per-request state (request.context, the hx record) is
never shared between requests and needs no locking.

=============================================================================
"""

import logging
import re
import socketserver
from typing import Any, Callable, Optional

from .config import ServerConfig
from .htmx import HXMiddleware
from .http import (
    HTTPParseError,
    HTTPStatus,
    RequestParser,
    ResponseBuilder,
    ResponseWriter,
    internal_error,
)
from .middleware import LoggingMiddleware, Middleware, MiddlewarePipeline, NextHandler


logger = logging.getLogger(__name__)


_CONTENT_LENGTH_PATTERN = re.compile(rb"^content-length:[ \t]*(\d+)[ \t]*\r?$", re.IGNORECASE | re.MULTILINE)

# Longest single header line we read before giving up on it.
_MAX_LINE = 65536


def read_request(rfile, max_size: int) -> Optional[bytes]:
    """
    Read one raw HTTP request from a buffered binary stream.

    Returns:
        The request bytes, or None if the peer closed the connection
        before sending anything.

    Raises:
        HTTPParseError: 413 if the request exceeds max_size,
            431 if a single header line is too long.
    """
    head = bytearray()

    while True:
        line = rfile.readline(_MAX_LINE + 1)
        if not line:
            return bytes(head) or None
        if len(line) > _MAX_LINE:
            raise HTTPParseError("Header line too long", status_code=431)

        head += line
        if len(head) > max_size:
            raise HTTPParseError(f"Request too large: over {max_size} bytes", status_code=413)
        if line in (b"\r\n", b"\n"):
            break

    match = _CONTENT_LENGTH_PATTERN.search(head)
    length = int(match.group(1)) if match else 0
    if len(head) + length > max_size:
        raise HTTPParseError(f"Request too large: {len(head) + length} bytes", status_code=413)

    body = rfile.read(length) if length else b""
    return bytes(head) + body


class HTTPServer:
    """
    HTTP/1.1 server running one handler behind a middleware pipeline.

    Routing is up to the handler; the server only dispatches to it.

    Example:
        def app(request):
            trigger(request, "hello")
            return html("<p>hi</p>")

        server = HTTPServer(app)
        server.use(LoggingMiddleware())
        server.use(HXMiddleware())
        server.run()
    """

    def __init__(self, handler: NextHandler, config: Optional[ServerConfig] = None):
        """
        Args:
            handler: Final handler; returns an HTTPResponse, or None after
                writing through request.writer.
            config: Server configuration. Uses defaults if not provided.
        """
        self.config = config or ServerConfig()
        self.config.validate()

        self._app = handler
        self._parser = RequestParser(max_request_size=self.config.max_request_size)
        self._middleware = MiddlewarePipeline()

        # Built lazily so use() can still be called after construction.
        self._handler: Optional[NextHandler] = None

        self._tcp_server: Optional[socketserver.ThreadingTCPServer] = None

    def use(self, middleware: Middleware) -> "HTTPServer":
        """
        Add middleware. First added runs outermost.

        Returns:
            Self for method chaining.
        """
        self._middleware.add(middleware)
        self._handler = None
        return self

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def handle(
        self,
        raw: bytes,
        send: Callable[[bytes], Any],
        client_address: tuple[str, int] = ("", 0),
    ) -> None:
        """
        Process one raw request and write the response through `send`.

        Args:
            raw: Raw request bytes.
            send: Byte sink for the response (e.g. socket.sendall).
            client_address: (ip, port) of the client.
        """
        try:
            request = self._parser.parse(raw, client_address)
        except HTTPParseError as e:
            logger.info(f"Rejected request from {client_address[0] or '-'}: {e}")
            self._send_error(send, HTTPStatus(e.status_code), str(e))
            return

        writer = ResponseWriter(send, version="HTTP/1.1", server_name=self.config.server_name)
        writer.headers["Connection"] = "close"
        request.writer = writer

        if self._handler is None:
            self._handler = self._middleware.wrap(self._app)

        try:
            response = self._handler(request)
        except Exception as e:
            logger.exception(f"Handler error: {request.method} {request.path}: {e}")
            if writer.committed:
                # Too late for a 500: status and headers are already out.
                writer.finish()
            else:
                writer.send_response(internal_error())
            return

        if response is None:
            request.writer.finish()
        else:
            request.writer.send_response(response)

    def _send_error(self, send: Callable[[bytes], Any], status: HTTPStatus, message: str):
        """Send an error for a request that never reached the handlers."""
        response = (ResponseBuilder()
            .status(status)
            .json({"error": message})
            .close_connection()
            .build())

        ResponseWriter(send, server_name=self.config.server_name).send_response(response)

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def run(self, host: Optional[str] = None, port: Optional[int] = None):
        """
        Start the server (blocking until shutdown() or Ctrl+C).

        Args:
            host: Override config host.
            port: Override config port.
        """
        if host:
            self.config.host = host
        if port is not None:
            self.config.port = port

        self._setup_logging()

        if self._handler is None:
            self._handler = self._middleware.wrap(self._app)

        self._tcp_server = _TCPServer((self.config.host, self.config.port), self)
        logger.info(f"Serving on http://{self.config.host}:{self.address[1]}")

        try:
            self._tcp_server.serve_forever()
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._tcp_server.server_close()
            logger.info("Server stopped")

    def shutdown(self):
        """Stop a running server. Call from another thread."""
        if self._tcp_server is not None:
            self._tcp_server.shutdown()

    @property
    def address(self) -> tuple[str, int]:
        """Bound (host, port), available once run() has started."""
        if self._tcp_server is None:
            return (self.config.host, self.config.port)
        return self._tcp_server.server_address[:2]

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("hxserver").setLevel(level)


class _RequestHandler(socketserver.StreamRequestHandler):
    """Reads one request from the connection and hands it to the app."""

    server: "_TCPServer"

    def handle(self):
        app = self.server.app
        self.connection.settimeout(app.config.timeout)
        client_address = (self.client_address[0], self.client_address[1])

        try:
            raw = read_request(self.rfile, app.config.max_request_size)
        except HTTPParseError as e:
            app._send_error(self.connection.sendall, HTTPStatus(e.status_code), str(e))
            return
        except TimeoutError:
            app._send_error(self.connection.sendall, HTTPStatus.REQUEST_TIMEOUT, "Request timeout")
            return

        if raw is None:
            return

        try:
            app.handle(raw, self.connection.sendall, client_address)
        except OSError as e:
            # Client went away mid-response.
            logger.debug(f"Connection error from {client_address[0]}: {e}")


class _TCPServer(socketserver.ThreadingTCPServer):
    daemon_threads = True
    allow_reuse_address = True

    def __init__(self, address: tuple[str, int], app: HTTPServer):
        self.app = app
        super().__init__(address, _RequestHandler)


def create_app(handler: NextHandler, config: Optional[ServerConfig] = None) -> HTTPServer:
    """
    Create a server with the standard middleware stack:
    LoggingMiddleware → HXMiddleware → handler.

    Example:
        app = create_app(my_handler, ServerConfig(port=3000, hx_vary=True))
        app.run()
    """
    server = HTTPServer(handler, config)
    server.use(LoggingMiddleware(log_format=server.config.log_format))
    server.use(HXMiddleware(vary=server.config.hx_vary))
    return server
