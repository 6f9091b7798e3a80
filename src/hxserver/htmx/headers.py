"""
=============================================================================
HX RESPONSE HEADER RECORD
=============================================================================

The per-request buffer of hx directives a handler wants to send back.

=============================================================================
HOW IT IS USED
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   HXMiddleware      creates an empty HXResponseHeaders and binds it │
    │        │            to request.context                              │
    │        ▼                                                             │
    │   middleware A      retarget(request, "#main")      ┐               │
    │        ▼                                             │ any number   │
    │   handler           trigger(request, "saved", None)  │ of writes,   │
    │        ▼            retarget(request, "#dialog")     ┘ last wins    │
    │                                                                      │
    │   first body write  ──► serializer turns the record into            │
    │                         HX-Retarget: #dialog                        │
    │                         HX-Trigger: saved                           │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Every field defaults to its "empty" value and a field at its empty value
is not sent. Setting a field back to empty (e.g. retarget = "") unsets it.

There is no validation here. The record is plain state; the setters in
hxserver.htmx.response do the JSON encoding of user payloads, so that
everything stored in the record is already wire-ready text.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Dict, Optional


# =============================================================================
# WIRE HEADER NAMES
# =============================================================================
# Capitalisation is part of the contract with existing clients.

HX_LOCATION = "HX-Location"
HX_PUSH_URL = "HX-Push-Url"
HX_REDIRECT = "HX-Redirect"
HX_REFRESH = "HX-Refresh"
HX_REPLACE_URL = "HX-Replace-Url"
HX_RESWAP = "HX-Reswap"
HX_RETARGET = "HX-Retarget"
HX_RESELECT = "HX-Reselect"
HX_TRIGGER = "HX-Trigger"
HX_TRIGGER_AFTER_SETTLE = "HX-Trigger-After-Settle"
HX_TRIGGER_AFTER_SWAP = "HX-Trigger-After-Swap"

# Sent by the client on every request it makes.
HX_REQUEST = "HX-Request"


# Event name → encoded JSON payload, or None for "no payload".
Triggers = Dict[str, Optional[str]]


@dataclass
class Location:
    """
    HX-Location as stored in the record.

    Same fields as LocationData, except `values` holds the JSON text the
    user's values were encoded to when the setter ran (or None).
    """

    path: str = ""
    source: str = ""
    event: str = ""
    handler: str = ""
    target: str = ""
    swap: str = ""
    values: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)

    def is_path_only(self) -> bool:
        """True when nothing but the path is set (the short header form)."""
        return not (
            self.source or self.event or self.handler or self.target
            or self.swap or self.values is not None or self.headers
        )


@dataclass
class HXResponseHeaders:
    """
    The hx directives for one response.

    Fields and their "not set" values:

        location              Location(path="")
        push_url              ""      (URL, or "false" to prevent)
        redirect              ""
        refresh               False
        replace_url           ""      (URL, or "false" to prevent)
        reswap                ""
        retarget              ""
        reselect              ""
        trigger               {}
        trigger_after_settle  {}
        trigger_after_swap    {}
    """

    location: Location = field(default_factory=Location)
    push_url: str = ""
    redirect: str = ""
    refresh: bool = False
    replace_url: str = ""
    reswap: str = ""
    retarget: str = ""
    reselect: str = ""
    trigger: Triggers = field(default_factory=dict)
    trigger_after_settle: Triggers = field(default_factory=dict)
    trigger_after_swap: Triggers = field(default_factory=dict)

    # -------------------------------------------------------------------------
    # Trigger upserts: one entry per event name, a second set replaces it.
    # -------------------------------------------------------------------------

    def set_trigger(self, event: str, payload: Optional[str] = None) -> None:
        self.trigger[event] = payload

    def set_trigger_after_settle(self, event: str, payload: Optional[str] = None) -> None:
        self.trigger_after_settle[event] = payload

    def set_trigger_after_swap(self, event: str, payload: Optional[str] = None) -> None:
        self.trigger_after_swap[event] = payload
