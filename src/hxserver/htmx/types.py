"""
=============================================================================
HX VALUE TYPES
=============================================================================

Small value types shared by the request and response sides.

=============================================================================
SWAP STRATEGIES
=============================================================================

How the client inserts the returned HTML relative to the target element:

    ┌──────────────┬──────────────────────────────────────────────────────┐
    │ innerHTML    │ replace the target's children (client default)       │
    │ outerHTML    │ replace the whole target element                     │
    │ beforebegin  │ insert before the target                             │
    │ afterbegin   │ insert before the target's first child               │
    │ beforeend    │ insert after the target's last child                 │
    │ afterend     │ insert after the target                              │
    │ delete       │ delete the target, ignore the response body          │
    │ none         │ don't swap (out-of-band swaps still happen)          │
    └──────────────┴──────────────────────────────────────────────────────┘

The client also accepts modifiers after the strategy, for example
"innerHTML swap:1s settle:2s", so anywhere a SwapStrategy is accepted a
plain string is accepted too and passed through untouched.

=============================================================================
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Union


class SwapStrategy(str, Enum):
    INNER_HTML = "innerHTML"
    OUTER_HTML = "outerHTML"
    BEFORE_BEGIN = "beforebegin"
    AFTER_BEGIN = "afterbegin"
    BEFORE_END = "beforeend"
    AFTER_END = "afterend"
    DELETE = "delete"
    NONE = "none"


# A swap strategy, optionally with modifiers ("outerHTML transition:true").
Swap = Union[SwapStrategy, str]


def swap_value(swap: Swap) -> str:
    """Return the wire text for a swap strategy or a raw swap string."""
    if isinstance(swap, SwapStrategy):
        return swap.value
    return swap


@dataclass
class LocationData:
    """
    Everything HX-Location can tell the client.

    Only `path` is required. When it is the only field set, the header is
    sent in its short form (just the path); otherwise the whole descriptor
    is sent as a JSON object.

    Attributes:
        path:    URL to load the response from.
        source:  Source element of the request.
        event:   Event that "triggered" the request.
        handler: Client-side callback that will handle the response HTML.
        target:  Selector to swap the response into.
        swap:    How the response is swapped in relative to the target.
        values:  Values to submit with the request; any JSON-encodable
                 object. None means "not set".
        headers: Headers to submit with the request.
    """

    path: str
    source: str = ""
    event: str = ""
    handler: str = ""
    target: str = ""
    swap: Swap = ""
    values: Any = None
    headers: Dict[str, str] = field(default_factory=dict)
