from __future__ import annotations

import json
import logging
from typing import Any

import pytest

from diagbridge.bridge import Bridge
from diagbridge.config import BridgeConfig
from diagbridge.config import reset_config
from diagbridge.utils.trace import set_trace_enabled

logger = logging.getLogger(__name__)


class DummyProvider:
    """In-memory diagnostics provider that records every call.

    Tests seed the public attributes with the data the engine would report
    and then inspect ``calls`` to check which capabilities were used.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.scripts: list[dict[str, Any]] = []
        self.sources: dict[int, dict[str, Any]] = {}
        self.stack: list[dict[str, Any]] = []
        self.this_objects: dict[int, dict[str, Any]] = {}
        self.stack_properties: dict[int, dict[str, Any]] = {}
        self.properties: dict[int, dict[str, Any]] = {}
        self.objects: dict[int, dict[str, Any]] = {}
        self.evaluations: dict[str, dict[str, Any]] = {}
        self.top_level_values: dict[str, Any] = {}
        self.function_positions: dict[Any, dict[str, Any]] = {}
        self.breakpoints: dict[int, dict[str, Any]] = {}
        self.next_breakpoint_id = 7
        self.accept_breakpoints = True
        self.step_mode_result = True
        self.exception_policy = 0
        self.failing: dict[str, Exception] = {}

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))
        error = self.failing.get(name)
        if error is not None:
            raise error

    def call_count(self, name: str) -> int:
        return sum(1 for called, _ in self.calls if called == name)

    def calls_to(self, name: str) -> list[tuple[Any, ...]]:
        return [args for called, args in self.calls if called == name]

    # --- DiagnosticsProvider ---

    def list_scripts(self) -> list[dict[str, Any]]:
        self._record("list_scripts")
        return [dict(script) for script in self.scripts]

    def get_source(self, script_id: int) -> dict[str, Any]:
        self._record("get_source", script_id)
        if script_id not in self.sources:
            raise KeyError(f"no source for script {script_id}")
        return dict(self.sources[script_id])

    def get_stack_trace(self) -> list[dict[str, Any]]:
        self._record("get_stack_trace")
        return [dict(frame) for frame in self.stack]

    def get_stack_properties(self, frame_index: int) -> dict[str, Any]:
        self._record("get_stack_properties", frame_index)
        return dict(self.stack_properties.get(frame_index, {"locals": []}))

    def get_properties(self, handle: int, start: int, count: int) -> dict[str, Any]:
        self._record("get_properties", handle, start, count)
        listing = self.properties.get(handle, {})
        return {
            "properties": list(listing.get("properties", [])),
            "debuggerOnlyProperties": list(listing.get("debuggerOnlyProperties", [])),
        }

    def get_object_from_handle(self, handle: int) -> dict[str, Any]:
        self._record("get_object_from_handle", handle)
        return dict(self.objects[handle])

    def set_breakpoint(self, script_id: int, line: int, column: int) -> dict[str, Any]:
        self._record("set_breakpoint", script_id, line, column)
        if not self.accept_breakpoints:
            return {"breakpointId": 0}
        breakpoint_id = self.next_breakpoint_id
        self.next_breakpoint_id += 1
        info = {"breakpointId": breakpoint_id, "scriptId": script_id, "line": line, "column": column}
        self.breakpoints[breakpoint_id] = info
        return dict(info)

    def remove_breakpoint(self, breakpoint_id: int) -> None:
        self._record("remove_breakpoint", breakpoint_id)
        self.breakpoints.pop(breakpoint_id, None)

    def list_breakpoints(self) -> list[dict[str, Any]]:
        self._record("list_breakpoints")
        return [dict(bp) for bp in self.breakpoints.values()]

    def set_step_mode(self, step_type: int) -> bool:
        self._record("set_step_mode", step_type)
        return self.step_mode_result

    def set_exception_break_policy(self, policy: int) -> bool:
        self._record("set_exception_break_policy", policy)
        self.exception_policy = policy
        return True

    def get_exception_break_policy(self) -> int:
        self._record("get_exception_break_policy")
        return self.exception_policy

    def evaluate(self, expression: str, frame_index: int) -> dict[str, Any]:
        self._record("evaluate", expression, frame_index)
        if expression == "this":
            return dict(self.this_objects.get(frame_index, {}))
        return dict(self.evaluations.get(expression, {"value": expression, "type": "string"}))

    def evaluate_top_level(self, expression: str) -> Any:
        self._record("evaluate_top_level", expression)
        return self.top_level_values.get(expression)

    def get_function_position(self, function: Any) -> dict[str, Any]:
        self._record("get_function_position", function)
        return dict(self.function_positions.get(function, {"scriptId": -1}))


def encode_request(command: str, seq: int = 1, **arguments: Any) -> str:
    """Encode one protocol request."""
    message: dict[str, Any] = {"seq": seq, "type": "request", "command": command}
    if arguments:
        message["arguments"] = arguments
    return json.dumps(message)


@pytest.fixture(autouse=True)
def _reset_bridge_globals():
    yield
    reset_config()
    set_trace_enabled(False)


@pytest.fixture
def provider() -> DummyProvider:
    return DummyProvider()


@pytest.fixture
def delayed() -> list[str]:
    return []


@pytest.fixture
def bridge(provider: DummyProvider, delayed: list[str]) -> Bridge:
    return Bridge(provider, config=BridgeConfig(), send_delayed=delayed.append)


@pytest.fixture
def call(bridge: Bridge):
    """Send a request through the bridge and decode the response."""

    def _call(command: str, seq: int = 1, **arguments: Any) -> dict[str, Any] | None:
        text = bridge.handle_request(encode_request(command, seq, **arguments))
        if text is None:
            return None
        return json.loads(text)

    return _call


@pytest.fixture
def emit(bridge: Bridge):
    """Deliver a native event through the bridge and decode the result."""

    def _emit(kind: int, payload: dict[str, Any] | None = None) -> dict[str, Any] | None:
        text = bridge.handle_event(kind, payload)
        if text is None:
            return None
        return json.loads(text)

    return _emit


@pytest.fixture
def at_break(bridge: Bridge, provider: DummyProvider, emit) -> DummyProvider:
    """Put the bridge at a break in a two-frame stack of script 5."""
    provider.scripts = [
        {"scriptId": 5, "fileName": "a.js", "lineCount": 10, "sourceLength": 100},
        {"scriptId": 6, "fileName": "lib/b.js", "lineCount": 4, "sourceLength": 40},
    ]
    provider.sources = {
        5: {"source": "var x = 1;\n", "lineCount": 10, "sourceLength": 100},
    }
    provider.stack = [
        {"index": 0, "scriptId": 5, "line": 3, "column": 4, "sourceText": "x++;", "functionHandle": 11},
        {"index": 1, "scriptId": 6, "line": 1, "column": 0, "sourceText": "f();", "functionHandle": 12},
    ]
    provider.this_objects = {0: {"handle": 21, "type": "object"}}
    emit(2, {"scriptId": 5, "line": 3, "column": 4, "sourceText": "x++;", "breakpointId": 7})
    return provider


@pytest.fixture
def encode():
    return encode_request
