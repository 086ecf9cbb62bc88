"""Child-property materialization for object descriptors.

Every place an object handle is surfaced to the client (lookup, evaluate,
exception events) goes through :func:`add_children`, and every synthesized
scope goes through :func:`make_scope`, so objects look the same no matter
which request produced them.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING
from typing import Any

from diagbridge.constants import DEFAULT_PROPERTY_PAGE_SIZE
from diagbridge.constants import SCOPE_OBJECT_PROTO_REF
from diagbridge.constants import PropertyAttribute
from diagbridge.utils.trace import call_provider

if TYPE_CHECKING:
    from collections.abc import Iterable

    from diagbridge.core.handles import HandleAllocator
    from diagbridge.protocol.messages import PropertyRef
    from diagbridge.protocol.messages import Scope
    from diagbridge.protocol.messages import ScopeObject
    from diagbridge.protocol.provider import DiagnosticsProvider
    from diagbridge.protocol.provider import PropertyListing


def _is_finite(value: Any) -> bool:
    """Numeric finiteness with script-engine coercion of strings and booleans."""
    if value is None:
        return False
    if isinstance(value, bool):
        return True
    if isinstance(value, (int, float)):
        return math.isfinite(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return True
        try:
            return math.isfinite(float(text))
        except ValueError:
            return False
    return False


def property_refs(properties: Iterable[dict[str, Any]]) -> list[PropertyRef]:
    return [
        {"name": prop.get("name"), "propertyType": 0, "ref": prop.get("handle")}
        for prop in properties
    ]


def flatten_listing(listing: PropertyListing) -> list[dict[str, Any]]:
    """Own properties followed by debugger-only properties."""
    return [
        *listing.get("properties", []),
        *listing.get("debuggerOnlyProperties", []),
    ]


def has_children(obj: dict[str, Any]) -> bool:
    attributes = obj.get("propertyAttributes")
    if not isinstance(attributes, int):
        return False
    return bool(attributes & PropertyAttribute.HAVE_CHILDREN)


def add_children(
    obj: dict[str, Any],
    provider: DiagnosticsProvider,
    *,
    page_size: int = DEFAULT_PROPERTY_PAGE_SIZE,
) -> dict[str, Any]:
    """Complete an object descriptor in place and return it.

    A ``display`` summary backfills missing ``value``/``text``/``className``.
    When the attribute bits say the object has children, one property
    listing is fetched and attached as uniform ``{name, propertyType, ref}``
    entries.
    """
    if not isinstance(obj, dict):
        return obj

    if "display" in obj:
        if not _is_finite(obj.get("value")):
            obj["value"] = obj["display"]
        obj.setdefault("text", obj["display"])
        if "className" not in obj:
            obj["className"] = obj.get("type")

    if has_children(obj):
        listing = call_provider(provider.get_properties, obj.get("handle"), 0, page_size)
        obj["properties"] = property_refs(flatten_listing(listing))

    return obj


def make_scope(
    scope_type: int,
    properties: Iterable[dict[str, Any]],
    frame_index: int,
    allocator: HandleAllocator,
) -> tuple[Scope, ScopeObject]:
    """Synthesize one scope bucket and the object standing in for it."""
    handle = allocator.next_scope_handle()
    scope: Scope = {
        "type": int(scope_type),
        "index": frame_index,
        "frameIndex": frame_index,
        "object": {"ref": handle},
    }
    scope_object: ScopeObject = {
        "handle": handle,
        "type": "object",
        "className": "Object",
        "constructorFunction": {"ref": SCOPE_OBJECT_PROTO_REF},
        "protoObject": {"ref": SCOPE_OBJECT_PROTO_REF},
        "prototypeObject": {"ref": SCOPE_OBJECT_PROTO_REF},
        "properties": property_refs(properties),
    }
    return scope, scope_object


__all__ = ["add_children", "flatten_listing", "has_children", "make_scope", "property_refs"]
