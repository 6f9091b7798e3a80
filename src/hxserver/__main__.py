"""
=============================================================================
HXSERVER CLI ENTRY POINT
=============================================================================

Run a small demo application:

    python -m hxserver --port 3000
    python -m hxserver --host 0.0.0.0 --vary --log-format json

Environment variables (see ServerConfig.from_env) are read first;
command-line flags override them.

The demo is a counter. A plain page load gets the full page; clicks
made by the hx client get just the new counter fragment plus a couple of
response directives:

    GET  /            full page, or the counter fragment for hx requests
    POST /increment   counter fragment + HX-Trigger: counted
    POST /reset       204 + HX-Refresh: true
    GET  /elsewhere   HX-Location to /

=============================================================================
"""

import argparse
import sys
import threading

from . import __version__
from .config import ServerConfig
from .htmx import (
    SwapStrategy,
    hx_request,
    location_path,
    refresh,
    reswap,
    retarget,
    trigger,
)
from .http import HTTPRequest, HTTPResponse, html, no_content, not_found
from .server import create_app


_PAGE = """<!DOCTYPE html>
<html>
<head>
    <title>hxserver</title>
    <script src="https://unpkg.com/htmx.org@1.9.12"></script>
</head>
<body>
    <h1>hxserver</h1>
    <div id="counter">{counter}</div>
    <button hx-post="/increment" hx-target="#counter">+1</button>
    <button hx-post="/reset">reset</button>
    <a hx-get="/elsewhere" href="#">somewhere else</a>
</body>
</html>
"""


class Counter:
    """Shared counter for the demo; handlers run on many threads."""

    def __init__(self):
        self._lock = threading.Lock()
        self.value = 0

    def increment(self) -> int:
        with self._lock:
            self.value += 1
            return self.value

    def reset(self):
        with self._lock:
            self.value = 0


def demo_app(counter: Counter):
    """Build the demo handler around a counter."""

    def fragment(value: int) -> str:
        return f"<span>{value}</span>"

    def handler(request: HTTPRequest) -> HTTPResponse:
        hx = hx_request(request)

        if request.path == "/" and request.method == "GET":
            if hx is None:
                return html(_PAGE.format(counter=fragment(counter.value)))
            return html(fragment(counter.value))

        if request.path == "/increment" and request.method == "POST":
            value = counter.increment()
            trigger(request, "counted", {"value": value})
            if hx is not None and not hx.target:
                retarget(request, "#counter")
                reswap(request, SwapStrategy.INNER_HTML)
            return html(fragment(value))

        if request.path == "/reset" and request.method == "POST":
            counter.reset()
            refresh(request)
            return no_content()

        if request.path == "/elsewhere":
            location_path(request, "/")
            return no_content()

        return not_found(f"No route for {request.method} {request.path}")

    return handler


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="hxserver",
        description="HTTP/1.1 server with hx response header support (demo app)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m hxserver                        # Run with defaults
  python -m hxserver --port 3000            # Custom port
  python -m hxserver --host 0.0.0.0 --vary  # Containers behind a cache
        """
    )

    parser.add_argument("--host", "-H", default=None, help="Host to bind to (default: $HTTP_HOST or 127.0.0.1)")
    parser.add_argument("--port", "-p", type=int, default=None, help="Port to listen on (default: $HTTP_PORT or 8080)")
    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (DEBUG also logs flushed hx headers)",
    )
    parser.add_argument("--log-format", choices=["text", "json"], default=None, help="Access log format")
    parser.add_argument("--vary", action="store_true", help='Send "Vary: HX-Request" on every response')
    parser.add_argument("--version", "-v", action="version", version=f"hxserver {__version__}")

    args = parser.parse_args()

    try:
        config = ServerConfig.from_env()
    except ValueError as e:
        print(f"Error: bad environment configuration: {e}", file=sys.stderr)
        sys.exit(2)

    if args.host is not None:
        config.host = args.host
    if args.port is not None:
        config.port = args.port
    if args.log_level is not None:
        config.log_level = args.log_level
    if args.log_format is not None:
        config.log_format = args.log_format
    if args.vary:
        config.hx_vary = True

    try:
        server = create_app(demo_app(Counter()), config)
        server.run()
    except (ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
