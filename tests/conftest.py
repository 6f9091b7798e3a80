"""
pytest configuration and fixtures.
"""

import socket
import threading
import time
from typing import Generator, List, Optional
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from hxserver import HTTPServer, ServerConfig, create_app
from hxserver.htmx import hx_request, trigger, retarget
from hxserver.http import HTTPRequest, HTTPResponse, ResponseWriter, html, parse_request


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request."""
    return (
        b"GET /items?page=1&limit=10 HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"User-Agent: pytest\r\n"
        b"Accept: text/html\r\n"
        b"Connection: keep-alive\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample HTTP POST request with JSON body."""
    body = b'{"sku": "A-100", "qty": 2}'
    return (
        b"POST /cart HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"Content-Type: application/json\r\n"
        b"Content-Length: %d\r\n"
        b"Connection: close\r\n"
        b"\r\n"
    ) % len(body) + body


@pytest.fixture
def sample_hx_request() -> bytes:
    """Request as sent by the hx client after clicking a boosted link."""
    return (
        b"GET /items HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"HX-Request: true\r\n"
        b"HX-Boosted: true\r\n"
        b"HX-Current-Url: http://localhost:8080/\r\n"
        b"HX-Target: list\r\n"
        b"HX-Trigger: load-more\r\n"
        b"HX-Trigger-Name: more\r\n"
        b"\r\n"
    )


class Sink:
    """Collects everything a ResponseWriter sends."""

    def __init__(self):
        self.chunks: List[bytes] = []

    def __call__(self, data: bytes):
        self.chunks.append(data)

    @property
    def data(self) -> bytes:
        return b"".join(self.chunks)

    @property
    def head(self) -> str:
        return self.data.split(b"\r\n\r\n", 1)[0].decode("utf-8")

    @property
    def body(self) -> bytes:
        return self.data.split(b"\r\n\r\n", 1)[1]

    @property
    def status(self) -> int:
        return int(self.head.split(" ", 2)[1])

    def header(self, name: str) -> Optional[str]:
        """Value of the first header with this name, or None."""
        for line in self.head.split("\r\n")[1:]:
            key, _, value = line.partition(":")
            if key.lower() == name.lower():
                return value.strip()
        return None

    def header_names(self) -> List[str]:
        return [line.partition(":")[0] for line in self.head.split("\r\n")[1:]]


@pytest.fixture
def sink() -> Sink:
    return Sink()


@pytest.fixture
def make_request():
    """Build a request with a ResponseWriter over a Sink attached."""

    def _make(raw: bytes = b"GET / HTTP/1.1\r\nHost: test\r\n\r\n", sink: Optional[Sink] = None) -> HTTPRequest:
        request = parse_request(raw)
        if sink is not None:
            request.writer = ResponseWriter(sink)
        return request

    return _make


@pytest.fixture
def config() -> ServerConfig:
    """Default test server configuration."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        timeout=5.0,
        log_level="WARNING",
    )


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


class TestServer:
    """Test server helper that runs in a background thread."""

    __test__ = False

    def __init__(self, server: HTTPServer, port: int):
        self.server = server
        self.port = port
        self._thread: Optional[threading.Thread] = None

    def start(self):
        """Start server in background thread."""
        self._thread = threading.Thread(
            target=self.server.run,
            kwargs={"port": self.port},
            daemon=True
        )
        self._thread.start()

        # Wait for server to be ready
        for _ in range(50):  # 5 seconds max
            try:
                with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
                    s.connect(('127.0.0.1', self.port))
                    return
            except ConnectionRefusedError:
                time.sleep(0.1)

        raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server."""
        self.server.shutdown()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def request(self, raw: bytes) -> bytes:
        """Send raw bytes and read until the server closes the connection."""
        with socket.create_connection(("127.0.0.1", self.port), timeout=5.0) as s:
            s.sendall(raw)
            chunks = []
            while True:
                data = s.recv(65536)
                if not data:
                    break
                chunks.append(data)
        return b"".join(chunks)


@pytest.fixture
def test_server(free_port: int) -> Generator[TestServer, None, None]:
    """Create a test server with the standard middleware stack."""

    def app(request: HTTPRequest) -> Optional[HTTPResponse]:
        if request.path == "/stream":
            trigger(request, "streamed")
            request.writer.headers["Content-Type"] = "text/html; charset=utf-8"
            request.writer.write("<li>one</li>")
            request.writer.write("<li>two</li>")
            return None

        if hx_request(request) is not None:
            trigger(request, "loaded", {"path": request.path})
            retarget(request, "#main")
            return html("<p>fragment</p>")
        return html("<html><body>page</body></html>")

    server = create_app(app, ServerConfig(
        host="127.0.0.1",
        port=free_port,
        log_level="WARNING",
        hx_vary=True,
    ))

    test_srv = TestServer(server, free_port)
    test_srv.start()

    yield test_srv

    test_srv.stop()
