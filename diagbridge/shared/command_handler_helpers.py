"""Shared helper utilities for command handler modules."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING
from typing import Any

from diagbridge.constants import COMPILATION_TYPE_HOST
from diagbridge.constants import SCRIPT_TYPE_NORMAL

if TYPE_CHECKING:
    from diagbridge.protocol.messages import Request
    from diagbridge.protocol.messages import ScriptEntry

Payload = dict[str, Any]


def arguments_of(request: Request) -> Payload:
    """Return the request arguments, or an empty dict when absent."""
    arguments = request.get("arguments")
    return arguments if isinstance(arguments, dict) else {}


def is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def script_entry(script: Payload, *, name: str | None = None) -> ScriptEntry:
    """Describe a provider script the way the client protocol expects."""
    file_name = script.get("fileName", "") if name is None else name
    line_count = script.get("lineCount", 0)
    return {
        "type": "script",
        "name": file_name,
        "id": script.get("scriptId"),
        "lineOffset": 0,
        "columnOffset": 0,
        "lineCount": line_count,
        "sourceStart": "",
        "sourceLength": script.get("sourceLength", 0),
        "scriptType": SCRIPT_TYPE_NORMAL,
        "compilationType": COMPILATION_TYPE_HOST,
        "text": f"{file_name} (lines: {line_count})",
    }


def script_ids_match(requested: Any, script_id: Any) -> bool:
    """Compare ids loosely so ``"70"`` from the client matches ``70``."""
    return requested == script_id or str(requested) == str(script_id)


def value_text(value: Any) -> str:
    """Render a top-level evaluation result as script-engine text.

    Mirrors ``String(v)``: arrays join their elements with commas (null
    elements render empty) and other objects render as ``[object Object]``.
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
    if isinstance(value, (list, tuple)):
        return ",".join("" if item is None else value_text(item) for item in value)
    if isinstance(value, dict):
        return "[object Object]"
    return str(value)
