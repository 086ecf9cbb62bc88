"""
Command dispatch and the general-purpose command handlers.

This module provides:
1. The closed :class:`Command` enum of translated commands
2. The ``COMMAND_HANDLERS`` registry populated via the ``@command_handler`` decorator
3. :func:`dispatch`, the single entry point used by the bridge
4. Handlers for ``scripts``, ``source``, ``continue``, ``lookup``,
   ``setexceptionbreak`` and ``suspend``

Breakpoint and stack/scope handlers live in their own modules and register
into the same table. :func:`ensure_handler_coverage` runs once all handler
modules are imported and fails loudly if a command has no handler.
"""

from __future__ import annotations

from enum import Enum
import logging
from typing import TYPE_CHECKING
from typing import Callable

from diagbridge.constants import STEP_ACTIONS
from diagbridge.constants import UNSUPPORTED_COMMANDS
from diagbridge.constants import ExceptionBreak
from diagbridge.core.children import add_children
from diagbridge.errors import StepActionError
from diagbridge.errors import UnrecognizedCommandError
from diagbridge.shared.command_handler_helpers import arguments_of
from diagbridge.shared.command_handler_helpers import script_entry
from diagbridge.shared.command_handler_helpers import script_ids_match
from diagbridge.utils.trace import call_provider

if TYPE_CHECKING:
    from diagbridge.bridge import Bridge
    from diagbridge.protocol.messages import Request
    from diagbridge.protocol.messages import Response

logger = logging.getLogger(__name__)


class Command(str, Enum):
    """Protocol commands the bridge translates."""

    SCRIPTS = "scripts"
    SOURCE = "source"
    CONTINUE = "continue"
    SETBREAKPOINT = "setbreakpoint"
    BACKTRACE = "backtrace"
    LOOKUP = "lookup"
    EVALUATE = "evaluate"
    THREADS = "threads"
    SETEXCEPTIONBREAK = "setexceptionbreak"
    SCOPES = "scopes"
    SCOPE = "scope"
    LISTBREAKPOINTS = "listbreakpoints"
    CLEARBREAKPOINT = "clearbreakpoint"
    SUSPEND = "suspend"


# A handler returns the response to send, or None when the answer is
# delivered later (suspend).
CommandHandler = Callable[["Bridge", "Request"], "Response | None"]

# Command mapping table - populated by the @command_handler decorator
COMMAND_HANDLERS: dict[Command, CommandHandler] = {}


def command_handler(command: Command):
    """Decorator to register a handler in the COMMAND_HANDLERS registry."""

    def decorator(func: CommandHandler) -> CommandHandler:
        if command in COMMAND_HANDLERS:
            raise RuntimeError(f"Duplicate handler for command {command.value!r}")
        COMMAND_HANDLERS[command] = func
        return func

    return decorator


def ensure_handler_coverage() -> None:
    """Fail if any member of :class:`Command` lacks a registered handler."""
    missing = [c.value for c in Command if c not in COMMAND_HANDLERS]
    if missing:
        raise RuntimeError(f"No handler registered for command(s): {', '.join(missing)}")


def dispatch(bridge: Bridge, request: Request) -> Response | None:
    """Route one parsed request to its handler.

    Commands outside :class:`Command` but in the unsupported list get a
    plain failure response. Anything else raises
    :class:`UnrecognizedCommandError`.
    """
    name = request.get("command")
    try:
        command = Command(name)
    except ValueError:
        if name in UNSUPPORTED_COMMANDS:
            logger.debug("Command %s is not supported", name)
            return bridge.make_response(request, False)
        raise UnrecognizedCommandError(name, sequence=request.get("seq")) from None

    return COMMAND_HANDLERS[command](bridge, request)


# =============================================================================
# Handlers
# =============================================================================


@command_handler(Command.SCRIPTS)
def handle_scripts(bridge: Bridge, request: Request) -> Response:
    """List scripts, filtered by ``ids`` or exact ``filter`` file name."""
    args = arguments_of(request)
    ids = args.get("ids")
    name_filter = args.get("filter")
    include_source = bool(args.get("includeSource"))

    body = []
    for script in bridge.scripts.refresh():
        script_id = script["scriptId"]
        found = True
        if ids:
            found = any(script_ids_match(i, script_id) for i in ids)
        # An explicit filter decides on its own, overriding ids.
        if name_filter:
            found = name_filter == script.get("fileName")
        if not found:
            continue

        entry = script_entry(script)
        if include_source:
            source = call_provider(bridge.provider.get_source, script_id, log_result=False)
            entry["source"] = source["source"]
            entry["lineCount"] = source["lineCount"]
            entry["sourceLength"] = source["sourceLength"]
        body.append(entry)

    return bridge.make_response(request, True, body=body)


@command_handler(Command.SOURCE)
def handle_source(bridge: Bridge, request: Request) -> Response:
    """Return the full source of the script at the current break."""
    session = bridge.session
    try:
        source = call_provider(
            bridge.provider.get_source, session.break_script_id, log_result=False
        )
    except Exception:
        if session.is_at_break:
            raise
        logger.warning("No source available outside a break", exc_info=True)
        return bridge.make_response(request, False)

    body = {
        "source": source["source"],
        "fromLine": 0,
        "toLine": source["lineCount"],
        "fromPosition": 0,
        "toPosition": source["sourceLength"],
        "totalLines": source["lineCount"],
    }
    return bridge.make_response(request, True, body=body)


@command_handler(Command.CONTINUE)
def handle_continue(bridge: Bridge, request: Request) -> Response:
    """Resume execution, optionally arming a step first."""
    bridge.session.resume()

    args = arguments_of(request)
    success = True
    step_action = args.get("stepaction")
    if step_action:
        step_type = STEP_ACTIONS.get(step_action)
        if step_type is None:
            raise StepActionError(step_action, sequence=request.get("seq"))
        if not call_provider(bridge.provider.set_step_mode, int(step_type)):
            success = False

    return bridge.make_response(request, success)


@command_handler(Command.LOOKUP)
def handle_lookup(bridge: Bridge, request: Request) -> Response:
    """Resolve handles to script descriptors or live objects."""
    args = arguments_of(request)
    results = {}
    for handle in args.get("handles") or []:
        if bridge.scripts.is_script_handle(handle):
            obj = bridge.scripts.descriptor_for_handle(handle)
            if obj is None:
                logger.warning("Script handle %s has no descriptor", handle)
                return bridge.make_response(request, False)
        else:
            obj = call_provider(bridge.provider.get_object_from_handle, handle)
            add_children(obj, bridge.provider, page_size=bridge.config.property_page_size)

        if "fileName" in obj and "name" not in obj:
            obj["name"] = obj["fileName"]
        if "scriptId" in obj and "id" not in obj:
            obj["id"] = obj["scriptId"]

        results[str(handle)] = obj

    return bridge.make_response(request, True, body=results)


@command_handler(Command.SETEXCEPTIONBREAK)
def handle_setexceptionbreak(bridge: Bridge, request: Request) -> Response:
    """Map ``{type, enabled}`` to the provider's exception-break bits."""
    args = arguments_of(request)
    enabled = bool(args.get("enabled"))
    break_type = args.get("type")

    policy = ExceptionBreak.NONE
    if enabled:
        if break_type == "all":
            policy = ExceptionBreak.UNCAUGHT | ExceptionBreak.FIRST_CHANCE
        elif break_type == "uncaught":
            policy = ExceptionBreak.UNCAUGHT

    logger.debug("Exception break policy: %d", int(policy))
    success = bool(call_provider(bridge.provider.set_exception_break_policy, int(policy)))

    body = {"type": break_type, "enabled": enabled}
    return bridge.make_response(request, success, body=body)


@command_handler(Command.SUSPEND)
def handle_suspend(bridge: Bridge, request: Request) -> None:
    """Park the request; it is answered on the next async-break event."""
    bridge.session.await_suspend(request)
    return None
