"""
=============================================================================
HX DIRECTIVE SERIALIZER
=============================================================================

Turns an HXResponseHeaders record into wire header (name, value) pairs.

=============================================================================
ENCODING RULES
=============================================================================

    ┌──────────────────────────┬──────────────────────────────────────────┐
    │ Field                    │ Wire value                               │
    ├──────────────────────────┼──────────────────────────────────────────┤
    │ plain strings            │ as-is                                    │
    │ refresh                  │ "true" (omitted when False)              │
    │ location, path only      │ /test                                    │
    │ location, anything else  │ {"path":"/test","target":"#main"}        │
    │ triggers, no payloads    │ a,b,c                                    │
    │ triggers, any payload    │ {"reload-nav":{"ActiveEntry":"foo"},     │
    │                          │  "update-cart":null}                     │
    └──────────────────────────┴──────────────────────────────────────────┘

A field at its empty value produces no pair at all.

=============================================================================
TWO-STAGE JSON
=============================================================================

User payloads (location values, trigger data) are encoded by the setter,
at the moment the handler calls it, with encode_payload(). That is where
an unencodable payload fails: at the call site that introduced it, with
the record left as it was.

At flush time the serializer only ever sees text. It embeds the already
encoded payloads verbatim into the outer object instead of decoding and
re-encoding them, so nothing is escaped twice:

    values payload   {"id":1}                   (encoded by the setter)
    outer object     {"path":"/p","values":{"id":1}}
                                          └──────┘ copied, not re-encoded

Encoding the record's own fields can't fail: they are str and Dict[str,
str] by construction. If it ever does, that is a bug and the exception
is left to propagate.

=============================================================================
"""

from typing import Any, Iterable, List, MutableMapping, Optional, Tuple
import json

from .errors import HXEncodingError
from .headers import (
    HXResponseHeaders,
    Location,
    Triggers,
    HX_LOCATION,
    HX_PUSH_URL,
    HX_REDIRECT,
    HX_REFRESH,
    HX_REPLACE_URL,
    HX_RESWAP,
    HX_RETARGET,
    HX_RESELECT,
    HX_TRIGGER,
    HX_TRIGGER_AFTER_SETTLE,
    HX_TRIGGER_AFTER_SWAP,
)


# Compact output keeps header values short.
_SEPARATORS = (",", ":")


def encode_payload(field: str, data: Any) -> Optional[str]:
    """
    Encode a user payload to JSON text.

    Args:
        field: Name used in the error message, e.g. "HX-Trigger: saved".
        data: Any JSON-encodable object, or None for "no payload".

    Returns:
        The JSON text, or None when data is None.

    Raises:
        HXEncodingError: If data can't be encoded (unsupported type,
            NaN/Infinity, circular reference).
    """
    if data is None:
        return None

    try:
        return json.dumps(data, separators=_SEPARATORS, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise HXEncodingError(field, e) from e


def _json_object(members: Iterable[Tuple[str, str]]) -> str:
    """Build a JSON object from (key, already-encoded value) pairs."""
    return "{" + ",".join(f"{json.dumps(key)}:{value}" for key, value in members) + "}"


def location_header_value(location: Location) -> str:
    """
    Wire value for HX-Location.

    Returns the bare path when only the path is set, otherwise a JSON
    object with the non-empty fields in the order path, source, event,
    handler, target, swap, values, headers.
    """
    if location.is_path_only():
        return location.path

    members = []
    for key in ("path", "source", "event", "handler", "target", "swap"):
        value = getattr(location, key)
        if value:
            members.append((key, json.dumps(value)))

    if location.values is not None:
        members.append(("values", location.values))

    if location.headers:
        members.append(("headers", json.dumps(location.headers, separators=_SEPARATORS)))

    return _json_object(members)


def triggers_header_value(triggers: Triggers) -> str:
    """
    Wire value for HX-Trigger, HX-Trigger-After-Settle and
    HX-Trigger-After-Swap.

    Without any payload the events are sent as a comma separated list.
    As soon as one event carries a payload the whole mapping is sent as
    a JSON object, with null for the events that have none.
    """
    if not any(triggers.values()):
        return ",".join(triggers)

    return _json_object(
        (event, payload if payload else "null")
        for event, payload in triggers.items()
    )


def to_header_pairs(h: HXResponseHeaders) -> List[Tuple[str, str]]:
    """
    Serialize a record to (header name, value) pairs.

    Exactly one pair per non-empty field, in a fixed order.
    """
    pairs: List[Tuple[str, str]] = []

    if h.location.path:
        pairs.append((HX_LOCATION, location_header_value(h.location)))
    if h.push_url:
        pairs.append((HX_PUSH_URL, h.push_url))
    if h.redirect:
        pairs.append((HX_REDIRECT, h.redirect))
    if h.refresh:
        pairs.append((HX_REFRESH, "true"))
    if h.replace_url:
        pairs.append((HX_REPLACE_URL, h.replace_url))
    if h.reswap:
        pairs.append((HX_RESWAP, h.reswap))
    if h.retarget:
        pairs.append((HX_RETARGET, h.retarget))
    if h.reselect:
        pairs.append((HX_RESELECT, h.reselect))
    if h.trigger:
        pairs.append((HX_TRIGGER, triggers_header_value(h.trigger)))
    if h.trigger_after_settle:
        pairs.append((HX_TRIGGER_AFTER_SETTLE, triggers_header_value(h.trigger_after_settle)))
    if h.trigger_after_swap:
        pairs.append((HX_TRIGGER_AFTER_SWAP, triggers_header_value(h.trigger_after_swap)))

    return pairs


def add_headers(
    h: HXResponseHeaders,
    headers: MutableMapping[str, str],
    replace: bool = True,
) -> List[str]:
    """
    Write a record's pairs into an outgoing header mapping.

    Args:
        replace: Overwrite a header of the same name already in the
            mapping. With False, headers already present are kept.

    Returns:
        The names of the headers written.
    """
    names = []
    for name, value in to_header_pairs(h):
        if not replace and name in headers:
            continue
        headers[name] = value
        names.append(name)
    return names
