"""Breakpoint command handlers: set, list and clear."""

from __future__ import annotations

import logging
import math
import re
from typing import TYPE_CHECKING
from typing import Any
from typing import NamedTuple

from diagbridge.constants import ExceptionBreak
from diagbridge.core.breakpoint_registry import BreakpointKind
from diagbridge.shared.command_handler_helpers import arguments_of
from diagbridge.shared.command_handler_helpers import is_int
from diagbridge.shared.command_handlers import Command
from diagbridge.shared.command_handlers import command_handler
from diagbridge.utils.trace import call_provider

if TYPE_CHECKING:
    from diagbridge.bridge import Bridge
    from diagbridge.protocol.messages import Request
    from diagbridge.protocol.messages import Response
    from diagbridge.shared.command_handler_helpers import Payload

logger = logging.getLogger(__name__)


class BreakpointOutcome(NamedTuple):
    """Result of one attempt to commit a breakpoint request.

    ``resolved`` is False when no target script could be found; otherwise
    ``breakpoint_id`` is what the provider returned (non-positive = refused).
    """

    resolved: bool
    breakpoint_id: int = 0


_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def parse_script_id(target: Any) -> int | None:
    """Read a script id the way the engine's ``parseInt`` would.

    Leading whitespace is skipped and trailing garbage ignored, so ``"19abc"``
    is script 19. Returns None when no digits lead the value.
    """
    if isinstance(target, bool):
        return None
    if isinstance(target, int):
        return target
    if isinstance(target, float):
        return int(target) if math.isfinite(target) else None
    if not isinstance(target, str):
        return None
    match = _LEADING_INT.match(target)
    return int(match.group(1)) if match else None


def resolve_target(bridge: Bridge, args: Payload) -> tuple[int | None, BreakpointKind]:
    """Find the script id a breakpoint request targets.

    - ``scriptId``: the leading integer of the target
    - ``scriptRegExp``: first script whose file name matches the pattern
    - ``script`` without target: the script at the current break
    - ``script`` with target: case-insensitive exact file name match
    """
    bp_type = args.get("type")
    target = args.get("target")

    if bp_type == "scriptId":
        script_id = parse_script_id(target)
        if script_id is None:
            logger.debug("Breakpoint target %r is not a script id", target)
        return script_id, BreakpointKind.SCRIPT_ID

    if bp_type == "scriptRegExp":
        try:
            pattern = re.compile(target)
        except (re.error, TypeError):
            logger.warning("Invalid breakpoint target pattern %r", target)
            return None, BreakpointKind.SCRIPT_REGEXP
        for script in bridge.scripts.refresh():
            file_name = script.get("fileName")
            if file_name and pattern.search(file_name):
                return script["scriptId"], BreakpointKind.SCRIPT_REGEXP
        return None, BreakpointKind.SCRIPT_REGEXP

    if bp_type == "script":
        if target is None:
            return bridge.session.break_script_id, BreakpointKind.SCRIPT_ID
        wanted = str(target).lower()
        for script in bridge.scripts.refresh():
            file_name = script.get("fileName")
            if file_name and file_name.lower() == wanted:
                return script["scriptId"], BreakpointKind.SCRIPT_NAME
        return None, BreakpointKind.SCRIPT_NAME

    return None, BreakpointKind.SCRIPT_ID


def try_set_breakpoint(bridge: Bridge, request: Request) -> BreakpointOutcome:
    """Resolve and commit one breakpoint request, registering it on success."""
    args = arguments_of(request)
    script_id, kind = resolve_target(bridge, args)
    if script_id is None:
        return BreakpointOutcome(resolved=False)

    column = args.get("column")
    if not is_int(column):
        column = 0

    result = call_provider(bridge.provider.set_breakpoint, script_id, args.get("line"), column)
    breakpoint_id = result.get("breakpointId", 0) if isinstance(result, dict) else 0
    if bridge.breakpoints.add(breakpoint_id, kind, args.get("target")):
        logger.debug("Breakpoint %s set in script %s", breakpoint_id, script_id)
    return BreakpointOutcome(resolved=True, breakpoint_id=breakpoint_id)


def set_breakpoint(bridge: Bridge, request: Request, *, add_to_pending: bool) -> Response:
    outcome = try_set_breakpoint(bridge, request)

    if not outcome.resolved and add_to_pending:
        logger.debug("Deferring breakpoint request %s until its script loads", request.get("seq"))
        bridge.breakpoints.add_pending(request)

    if is_int(outcome.breakpoint_id) and outcome.breakpoint_id > 0:
        body: dict[str, Any] = dict(arguments_of(request))
        body["actual_locations"] = []
        body["breakpoint"] = outcome.breakpoint_id
        return bridge.make_response(request, True, body=body)

    return bridge.make_response(request, False)


def replay_pending_breakpoint(bridge: Bridge, request: Request) -> BreakpointOutcome:
    """Retry a deferred request without answering it.

    The registry keeps the request queued while the outcome is unresolved.
    """
    return try_set_breakpoint(bridge, request)


@command_handler(Command.SETBREAKPOINT)
def handle_setbreakpoint(bridge: Bridge, request: Request) -> Response:
    return set_breakpoint(bridge, request, add_to_pending=True)


@command_handler(Command.LISTBREAKPOINTS)
def handle_listbreakpoints(bridge: Bridge, request: Request) -> Response:
    """List provider breakpoints annotated with how they were requested."""
    breakpoints = call_provider(bridge.provider.list_breakpoints)
    policy = int(call_provider(bridge.provider.get_exception_break_policy) or 0)

    entries = []
    for bp in breakpoints:
        script_id = bp.get("scriptId")
        entry: dict[str, Any] = {
            "number": bp.get("breakpointId"),
            "line": bp.get("line"),
            "column": bp.get("column"),
            "groupId": None,
            "hit_count": 0,
            "active": True,
            "condition": None,
            "ignoreCount": 0,
            "actual_locations": [
                {"line": bp.get("line"), "column": bp.get("column"), "script_id": script_id}
            ],
            "type": BreakpointKind.SCRIPT_ID.value,
            "script_id": script_id,
            "script_name": bridge.scripts.file_name(script_id),
        }
        registered = bridge.breakpoints.get(bp.get("breakpointId"))
        if registered is not None:
            entry["type"] = registered.kind.value
            if registered.kind is BreakpointKind.SCRIPT_REGEXP:
                entry["script_regexp"] = registered.target
        entries.append(entry)

    body = {
        "breakpoints": entries,
        "breakOnExceptions": policy != 0,
        "breakOnUncaughtExceptions": bool(policy & ExceptionBreak.UNCAUGHT),
    }
    return bridge.make_response(request, True, body=body)


@command_handler(Command.CLEARBREAKPOINT)
def handle_clearbreakpoint(bridge: Bridge, request: Request) -> Response:
    """Remove a breakpoint; the response reports success regardless of the provider."""
    response = bridge.make_response(request, True)
    breakpoint_id = arguments_of(request).get("breakpoint")
    call_provider(bridge.provider.remove_breakpoint, breakpoint_id)
    bridge.breakpoints.remove(breakpoint_id)
    return response
