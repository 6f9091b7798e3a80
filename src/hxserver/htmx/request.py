"""
=============================================================================
HX REQUEST HEADERS
=============================================================================

Read-only view of the headers the hx client sends with each request.

    ┌──────────────────────────────┬───────────────────────────┬─────────┐
    │ Header                       │ Field                     │ Type    │
    ├──────────────────────────────┼───────────────────────────┼─────────┤
    │ HX-Request                   │ (present → snapshot)      │ gate    │
    │ HX-Boosted                   │ boosted                   │ bool    │
    │ HX-Current-Url               │ current_url               │ str     │
    │ HX-History-Restore-Request   │ history_restore_request   │ bool    │
    │ HX-Prompt                    │ prompt                    │ str     │
    │ HX-Target                    │ target                    │ str     │
    │ HX-Trigger-Name              │ trigger_name              │ str     │
    │ HX-Trigger                   │ trigger                   │ str     │
    └──────────────────────────────┴───────────────────────────┴─────────┘

Booleans are true only for the exact value "true". Without
"HX-Request: true" the request did not come from the hx client and
hx_request() returns None, not an all-empty snapshot.

This works with or without HXMiddleware installed.

=============================================================================
"""

from dataclasses import dataclass
from typing import Optional

from ..http.request import HTTPRequest


# Distinct from the response record's key; both live in request.context.
_REQUEST_KEY = object()


@dataclass(frozen=True)
class HXRequestHeaders:
    """
    The hx headers of one request.

    Attributes:
        boosted:                 Request is via an element using hx-boost.
        current_url:             Current URL of the browser.
        history_restore_request: Request is for history restoration after
                                 a miss in the local history cache.
        prompt:                  User response to an hx-prompt.
        target:                  id of the target element, if it exists.
        trigger_name:            name of the triggered element, if it exists.
        trigger:                 id of the triggered element, if it exists.
    """

    boosted: bool = False
    current_url: str = ""
    history_restore_request: bool = False
    prompt: str = ""
    target: str = ""
    trigger_name: str = ""
    trigger: str = ""

    @classmethod
    def from_request(cls, request: HTTPRequest) -> Optional["HXRequestHeaders"]:
        """Project the request's headers, or None for a non-hx request."""
        if request.get_header("HX-Request") != "true":
            return None

        return cls(
            boosted=request.get_header("HX-Boosted") == "true",
            current_url=request.get_header("HX-Current-Url"),
            history_restore_request=request.get_header("HX-History-Restore-Request") == "true",
            prompt=request.get_header("HX-Prompt"),
            target=request.get_header("HX-Target"),
            trigger_name=request.get_header("HX-Trigger-Name"),
            trigger=request.get_header("HX-Trigger"),
        )


def hx_request(request: HTTPRequest) -> Optional[HXRequestHeaders]:
    """
    Return the hx request headers, or None if the hx client didn't send
    the request.

    Computed on first access and cached on the request.

    Example:
        hx = hx_request(request)
        if hx is None:
            return html(render_full_page())
        return html(render_fragment(hx.target))
    """
    if _REQUEST_KEY not in request.context:
        request.context[_REQUEST_KEY] = HXRequestHeaders.from_request(request)
    return request.context[_REQUEST_KEY]


def is_hx_request(request: HTTPRequest) -> bool:
    """Shorthand for hx_request(request) is not None."""
    return hx_request(request) is not None
