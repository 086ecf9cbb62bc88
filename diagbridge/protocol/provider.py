"""Typing protocol for the native diagnostics provider.

This defines the capability set the bridge calls into so that hosts can plug
in a real engine binding and tests can provide simple dummy implementations.
Payloads are plain dicts whose keys keep the engine's camelCase names.
"""

from __future__ import annotations

from typing import Any
from typing import Protocol
from typing import TypedDict
from typing import runtime_checkable

from typing_extensions import NotRequired


class ScriptInfo(TypedDict):
    scriptId: int
    fileName: str
    lineCount: int
    sourceLength: int


class SourceInfo(TypedDict):
    source: str
    lineCount: int
    sourceLength: int


class StackFrameInfo(TypedDict):
    index: int
    scriptId: int
    line: int
    column: int
    sourceText: str
    functionHandle: int


class PropertyInfo(TypedDict):
    name: str
    handle: int
    type: NotRequired[str]
    value: NotRequired[Any]
    display: NotRequired[str]
    propertyAttributes: NotRequired[int]


class PropertyListing(TypedDict):
    properties: list[PropertyInfo]
    debuggerOnlyProperties: list[PropertyInfo]


class StackProperties(TypedDict):
    locals: list[PropertyInfo]
    thisObject: NotRequired[PropertyInfo]
    returnValue: NotRequired[PropertyInfo]
    functionCallsReturn: NotRequired[list[PropertyInfo]]
    scopes: NotRequired[list[dict[str, Any]]]
    globals: NotRequired[dict[str, Any]]


class BreakpointInfo(TypedDict):
    breakpointId: int
    scriptId: int
    line: int
    column: int


class FunctionPosition(TypedDict):
    scriptId: int
    firstStatementLine: int
    firstStatementColumn: int


@runtime_checkable
class DiagnosticsProvider(Protocol):
    """Native diagnostics capability set consumed by the bridge.

    Every call is a synchronous round trip; failures are raised as
    exceptions and propagate to the request or event being processed.
    """

    def list_scripts(self) -> list[ScriptInfo]: ...

    def get_source(self, script_id: int) -> SourceInfo: ...

    def get_stack_trace(self) -> list[StackFrameInfo]: ...

    def get_stack_properties(self, frame_index: int) -> StackProperties: ...

    def get_properties(self, handle: int, start: int, count: int) -> PropertyListing: ...

    def get_object_from_handle(self, handle: int) -> dict[str, Any]: ...

    def set_breakpoint(self, script_id: int, line: int, column: int) -> dict[str, Any]: ...

    def remove_breakpoint(self, breakpoint_id: int) -> Any: ...

    def list_breakpoints(self) -> list[BreakpointInfo]: ...

    def set_step_mode(self, step_type: int) -> bool: ...

    def set_exception_break_policy(self, policy: int) -> bool: ...

    def get_exception_break_policy(self) -> int: ...

    def evaluate(self, expression: str, frame_index: int) -> dict[str, Any]: ...

    def evaluate_top_level(self, expression: str) -> Any: ...

    def get_function_position(self, function: Any) -> FunctionPosition: ...
