"""
=============================================================================
HX PROTOCOL SUPPORT
=============================================================================

Server side of the hx protocol: reading the headers the hx client sends,
and collecting the response headers that tell it what to do next.

    ┌─────────────────────────────────────────────────────────────────────┐
    │ request.py     hx_request(request) → HXRequestHeaders | None        │
    │ headers.py     HXResponseHeaders, the per-request directive record  │
    │ serializer.py  record → [("HX-Trigger", "a,b"), ...]                │
    │ middleware.py  HXMiddleware: bind record, flush once before commit  │
    │ response.py    trigger(), retarget(), location(), ... setters       │
    │ types.py       SwapStrategy, LocationData                           │
    │ errors.py      HXEncodingError, MiddlewareNotInstalledError         │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
QUICK START
=============================================================================

    from hxserver import HTTPServer
    from hxserver.http import html
    from hxserver.htmx import HXMiddleware, hx_request, trigger, retarget

    def handler(request):
        if hx_request(request) is None:
            return html("<html>...full page...</html>")
        trigger(request, "item-saved", {"id": 7})
        retarget(request, "#list")
        return html("<li>saved</li>")

    server = HTTPServer(handler)
    server.use(HXMiddleware())
    server.run()

=============================================================================
"""

from .errors import HXError, HXEncodingError, MiddlewareNotInstalledError
from .headers import HXResponseHeaders, Location
from .middleware import HXMiddleware, HXResponseWriter, response_headers
from .request import HXRequestHeaders, hx_request, is_hx_request
from .response import (
    location,
    location_path,
    push_url,
    prevent_push_url,
    redirect,
    refresh,
    replace_url,
    prevent_replace_url,
    reswap,
    retarget,
    reselect,
    trigger,
    trigger_after_settle,
    trigger_after_swap,
)
from .serializer import to_header_pairs
from .types import LocationData, SwapStrategy

__all__ = [
    # Middleware
    "HXMiddleware",
    "HXResponseWriter",
    "response_headers",

    # Request side
    "HXRequestHeaders",
    "hx_request",
    "is_hx_request",

    # Response side
    "HXResponseHeaders",
    "Location",
    "LocationData",
    "SwapStrategy",
    "to_header_pairs",
    "location",
    "location_path",
    "push_url",
    "prevent_push_url",
    "redirect",
    "refresh",
    "replace_url",
    "prevent_replace_url",
    "reswap",
    "retarget",
    "reselect",
    "trigger",
    "trigger_after_settle",
    "trigger_after_swap",

    # Errors
    "HXError",
    "HXEncodingError",
    "MiddlewareNotInstalledError",
]
