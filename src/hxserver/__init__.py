"""
=============================================================================
HXSERVER - HX RESPONSE HEADERS FOR A SMALL HTTP/1.1 SERVER
=============================================================================

An HTTP/1.1 server with first-class support for the hx protocol: handlers
read what the hx client sent (HX-Request, HX-Target, ...) and answer with
directives (HX-Trigger, HX-Retarget, HX-Location, ...) that are written
to the response headers exactly once, right before the response commits.

=============================================================================
PROJECT STRUCTURE
=============================================================================

    hxserver/
    ├── __init__.py          # Package exports
    ├── __main__.py          # CLI entry point (python -m hxserver)
    ├── server.py            # HTTPServer, create_app
    ├── config.py            # ServerConfig
    ├── http/                # HTTP protocol
    │   ├── request.py       # HTTP request parsing
    │   ├── response.py      # HTTP response building
    │   ├── writer.py        # Response writer, commit point, chunking
    │   └── status_codes.py  # HTTP status enum
    ├── middleware/          # Middleware framework
    │   ├── base.py          # Middleware, MiddlewarePipeline
    │   └── logging.py       # Access logging
    └── htmx/                # hx protocol
        ├── request.py       # HX-* request headers
        ├── headers.py       # Response directive record
        ├── serializer.py    # Record → wire headers
        ├── middleware.py    # HXMiddleware (flush once)
        ├── response.py      # trigger(), retarget(), ... setters
        ├── types.py         # SwapStrategy, LocationData
        └── errors.py        # HXError hierarchy

=============================================================================
QUICK START
=============================================================================

    from hxserver import create_app, ServerConfig
    from hxserver.http import html
    from hxserver.htmx import hx_request, trigger, retarget, SwapStrategy, reswap

    def handler(request):
        if hx_request(request) is None:
            return html("<html><body><ul id='list'></ul></body></html>")

        trigger(request, "item-added", {"id": 7})
        retarget(request, "#list")
        reswap(request, SwapStrategy.BEFORE_END)
        return html("<li>item 7</li>")

    create_app(handler, ServerConfig(port=8080)).run()

=============================================================================
"""

__version__ = "1.0.0"

from .config import ServerConfig
from .server import HTTPServer, create_app, read_request

__all__ = ["HTTPServer", "ServerConfig", "create_app", "read_request", "__version__"]
