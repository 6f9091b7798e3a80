"""
=============================================================================
HX RESPONSE SETTERS
=============================================================================

Functions handlers call to ask the hx client for something. Each one
looks up the record HXMiddleware bound to the request and updates one
field. Nothing is sent until the response is committed.

    def add_item(request):
        cart.add(request.json["sku"])
        trigger(request, "cart-updated", {"count": cart.count})
        retarget(request, "#cart")
        reswap(request, SwapStrategy.OUTER_HTML)
        return html(render_cart(cart))

Rules shared by all setters:

- Last write wins. Calling a setter again replaces the previous value,
  so an outer layer can set a default that a handler overrides.
- Setting a field to its empty value ("" / False) unsets it.
- Triggers are keyed by event name: setting the same event twice
  replaces its payload instead of adding a second entry.
- Payloads are JSON-encoded right here. If that fails, HXEncodingError
  is raised and the record is left untouched.
- All of them raise MiddlewareNotInstalledError when HXMiddleware isn't
  in the pipeline.

=============================================================================
"""

from typing import Any

from ..http.request import HTTPRequest
from .headers import (
    Location,
    HX_LOCATION,
    HX_TRIGGER,
    HX_TRIGGER_AFTER_SETTLE,
    HX_TRIGGER_AFTER_SWAP,
)
from .middleware import response_headers
from .serializer import encode_payload
from .types import LocationData, Swap, swap_value


# =============================================================================
# NAVIGATION
# =============================================================================

def location(request: HTTPRequest, loc: LocationData) -> None:
    """
    Client-side redirect without a full page reload (HX-Location).

    Acts like following an hx-boost link: the client issues an ajax
    request to loc.path, swaps the result in and pushes the path into
    history. The remaining LocationData fields refine where and how the
    result is swapped.

    If loc.path is empty, no HX-Location header is sent.

    Raises:
        HXEncodingError: If loc.values can't be JSON-encoded.
    """
    values = encode_payload(f"{HX_LOCATION}: values", loc.values)

    response_headers(request).location = Location(
        path=loc.path,
        source=loc.source,
        event=loc.event,
        handler=loc.handler,
        target=loc.target,
        swap=swap_value(loc.swap),
        values=values,
        headers=dict(loc.headers),
    )


def location_path(request: HTTPRequest, path: str) -> None:
    """Shorthand for location(request, LocationData(path=path))."""
    response_headers(request).location = Location(path=path)


def push_url(request: HTTPRequest, url: str) -> None:
    """
    Push a URL into the browser's history stack (HX-Push-Url).

    Creates a new history entry. Overrides hx-push-url on the element.
    The URL must be from the same origin as the request. Pass "false"
    (or call prevent_push_url) to keep history from being updated.
    """
    response_headers(request).push_url = url


def prevent_push_url(request: HTTPRequest) -> None:
    """Set HX-Push-Url to "false"."""
    response_headers(request).push_url = "false"


def redirect(request: HTTPRequest, url: str) -> None:
    """Client-side redirect to a new location with a full page load (HX-Redirect)."""
    response_headers(request).redirect = url


def refresh(request: HTTPRequest, value: bool = True) -> None:
    """Ask the client to do a full page refresh (HX-Refresh)."""
    response_headers(request).refresh = value


def replace_url(request: HTTPRequest, url: str) -> None:
    """
    Replace the current URL in the browser's history (HX-Replace-Url).

    No new history entry is created. Overrides hx-replace-url on the
    element. The URL must be from the same origin as the request. Pass
    "false" (or call prevent_replace_url) to leave the URL alone.
    """
    response_headers(request).replace_url = url


def prevent_replace_url(request: HTTPRequest) -> None:
    """Set HX-Replace-Url to "false"."""
    response_headers(request).replace_url = "false"


# =============================================================================
# SWAPPING
# =============================================================================

def reswap(request: HTTPRequest, strategy: Swap) -> None:
    """Override how the response is swapped in (HX-Reswap)."""
    response_headers(request).reswap = swap_value(strategy)


def retarget(request: HTTPRequest, selector: str) -> None:
    """Swap into a different element than the requesting one (HX-Retarget)."""
    response_headers(request).retarget = selector


def reselect(request: HTTPRequest, selector: str) -> None:
    """
    Choose which part of the response is swapped in (HX-Reselect).

    Overrides hx-select on the triggering element.
    """
    response_headers(request).reselect = selector


# =============================================================================
# CLIENT-SIDE EVENTS
# =============================================================================

def trigger(request: HTTPRequest, event: str, data: Any = None) -> None:
    """
    Fire a client-side event as soon as the response is received (HX-Trigger).

    Args:
        event: Event name.
        data: Optional JSON-encodable payload for event.detail.

    Raises:
        HXEncodingError: If data can't be JSON-encoded. Never raised for
            data=None.
    """
    payload = encode_payload(f"{HX_TRIGGER}: {event}", data)
    response_headers(request).set_trigger(event, payload)


def trigger_after_settle(request: HTTPRequest, event: str, data: Any = None) -> None:
    """Like trigger(), but fired after the settling step (HX-Trigger-After-Settle)."""
    payload = encode_payload(f"{HX_TRIGGER_AFTER_SETTLE}: {event}", data)
    response_headers(request).set_trigger_after_settle(event, payload)


def trigger_after_swap(request: HTTPRequest, event: str, data: Any = None) -> None:
    """Like trigger(), but fired after the swap step (HX-Trigger-After-Swap)."""
    payload = encode_payload(f"{HX_TRIGGER_AFTER_SWAP}: {event}", data)
    response_headers(request).set_trigger_after_swap(event, payload)
