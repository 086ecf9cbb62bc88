"""
Constants shared by the bridge.

Numeric codes mirror the native diagnostics interface so that payloads coming
from the provider can be compared without translation.
"""

from __future__ import annotations

from enum import IntEnum
from enum import IntFlag
from typing import Final


class DebugEvent(IntEnum):
    """Native diagnostic event kinds delivered on the event channel."""

    SOURCE_COMPILE = 0
    COMPILE_ERROR = 1
    BREAK = 2
    STEP_COMPLETE = 3
    DEBUGGER_STATEMENT = 4
    ASYNC_BREAK = 5
    RUNTIME_EXCEPTION = 6


_EVENT_NAMES: Final[dict[int, str]] = {
    DebugEvent.SOURCE_COMPILE: "JsDiagDebugEventSourceCompile",
    DebugEvent.COMPILE_ERROR: "JsDiagDebugEventCompileError",
    DebugEvent.BREAK: "JsDiagDebugEventBreak",
    DebugEvent.STEP_COMPLETE: "JsDiagDebugEventStepComplete",
    DebugEvent.DEBUGGER_STATEMENT: "JsDiagDebugEventDebuggerStatement",
    DebugEvent.ASYNC_BREAK: "JsDiagDebugEventAsyncBreak",
    DebugEvent.RUNTIME_EXCEPTION: "JsDiagDebugEventRuntimeException",
}


def debug_event_name(kind: int) -> str:
    """Return the engine's name for an event kind, for log output."""
    name = _EVENT_NAMES.get(kind)
    if name is None:
        return f"Unhandled JsDiagDebugEvent: {kind}"
    return name


class StepType(IntEnum):
    """Provider step kinds."""

    STEP_IN = 0
    STEP_OUT = 1
    STEP_OVER = 2


# Protocol ``stepaction`` values -> provider step kinds
STEP_ACTIONS: Final[dict[str, StepType]] = {
    "in": StepType.STEP_IN,
    "out": StepType.STEP_OUT,
    "next": StepType.STEP_OVER,
}


class ExceptionBreak(IntFlag):
    """Exception-break policy bits."""

    NONE = 0
    UNCAUGHT = 0x1
    FIRST_CHANCE = 0x2


class PropertyAttribute(IntFlag):
    """Attribute bits carried by provider object descriptors."""

    NONE = 0
    HAVE_CHILDREN = 0x1
    READ_ONLY_VALUE = 0x2


class ScopeType(IntEnum):
    """Scope bucket type codes surfaced to the client."""

    GLOBAL = 0
    LOCAL = 1
    CLOSURE = 3


# Commands the bridge recognizes but does not translate; they get a uniform
# failure response.
UNSUPPORTED_COMMANDS: Final[frozenset[str]] = frozenset(
    {
        "break",
        "changebreakpoint",
        "changelive",
        "clearbreakpointgroup",
        "disconnect",
        "flags",
        "frame",
        "gc",
        "references",
        "restartframe",
        "setvariablevalue",
        "v8flag",
        "version",
    }
)

# Paging limits for provider property listings
DEFAULT_PROPERTY_PAGE_SIZE: Final[int] = 1000
DEFAULT_GLOBALS_PAGE_SIZE: Final[int] = 5000

# Handle bases; allocation counts down from these. Scope handles stay above
# the script base, script handles go below it.
DEFAULT_SCOPE_HANDLE_BASE: Final[int] = 0
DEFAULT_SCRIPT_HANDLE_BASE: Final[int] = -100000

# Placeholder ref used for the prototype links of synthesized scope objects
SCOPE_OBJECT_PROTO_REF: Final[int] = 100000

THREAD_ID: Final[int] = 1

# Script metadata constants reported in script descriptors
SCRIPT_TYPE_NORMAL: Final[int] = 2
COMPILATION_TYPE_HOST: Final[int] = 0
