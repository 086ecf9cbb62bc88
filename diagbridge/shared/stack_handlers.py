"""Stack/thread/scope/evaluate command handlers."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from typing import Any

from diagbridge.constants import THREAD_ID
from diagbridge.constants import ScopeType
from diagbridge.core.children import add_children
from diagbridge.core.children import flatten_listing
from diagbridge.core.children import make_scope
from diagbridge.core.frame_cache import capture_frames
from diagbridge.shared.command_handler_helpers import arguments_of
from diagbridge.shared.command_handler_helpers import is_int
from diagbridge.shared.command_handler_helpers import value_text
from diagbridge.shared.command_handlers import Command
from diagbridge.shared.command_handlers import command_handler
from diagbridge.utils.trace import call_provider

if TYPE_CHECKING:
    from diagbridge.bridge import Bridge
    from diagbridge.core.frame_cache import Frame
    from diagbridge.protocol.messages import Request
    from diagbridge.protocol.messages import Response
    from diagbridge.protocol.messages import Scope
    from diagbridge.protocol.messages import ScopeObject

logger = logging.getLogger(__name__)


def current_frames(bridge: Bridge) -> tuple[Frame, ...]:
    """Return the stack snapshot of the current break, capturing it on first use."""
    return bridge.session.frames.get_or_capture(
        lambda: capture_frames(bridge.provider, bridge.scripts, bridge.allocator)
    )


@command_handler(Command.BACKTRACE)
def handle_backtrace(bridge: Bridge, request: Request) -> Response:
    """Return the captured frames, optionally sliced to ``[fromFrame, toFrame)``."""
    frames = current_frames(bridge)
    total = len(frames)

    args = arguments_of(request)
    from_frame = args.get("fromFrame")
    to_frame = args.get("toFrame")
    if is_int(from_frame) and is_int(to_frame):
        selected = frames[max(from_frame, 0) : max(min(to_frame, total), 0)]
        body = {
            "fromFrame": from_frame,
            "toFrame": to_frame,
            "totalFrames": total,
            "frames": [frame.to_dict() for frame in selected],
        }
    else:
        body = {
            "fromFrame": 0,
            "toFrame": total,
            "totalFrames": total,
            "frames": [frame.to_dict() for frame in frames],
        }

    return bridge.make_response(request, True, body=body)


def build_scopes(bridge: Bridge, frame: Frame) -> tuple[list[Scope], list[ScopeObject]]:
    """Synthesize the locals, closure and globals buckets of one frame.

    Empty buckets are skipped, so the result holds between zero and three
    scopes, always in that order.
    """
    provider = bridge.provider
    props = call_provider(provider.get_stack_properties, frame.index)

    local_props: list[dict[str, Any]] = list(props.get("locals") or [])
    if "thisObject" in props:
        local_props.append(props["thisObject"])
    if "returnValue" in props:
        local_props.append(props["returnValue"])
    local_props.extend(props.get("functionCallsReturn") or [])

    scopes: list[Scope] = []
    refs: list[ScopeObject] = []

    def add(scope_type: ScopeType, properties: list[dict[str, Any]]) -> None:
        scope, scope_object = make_scope(scope_type, properties, frame.index, bridge.allocator)
        scopes.append(scope)
        refs.append(scope_object)

    if local_props:
        add(ScopeType.LOCAL, local_props)

    closure_props: list[dict[str, Any]] = []
    for scope_info in props.get("scopes") or []:
        listing = call_provider(
            provider.get_properties, scope_info.get("handle"), 0, bridge.config.property_page_size
        )
        closure_props.extend(flatten_listing(listing))
    if closure_props:
        add(ScopeType.CLOSURE, closure_props)

    globals_info = props.get("globals")
    if globals_info and globals_info.get("handle"):
        listing = call_provider(
            provider.get_properties, globals_info["handle"], 0, bridge.config.globals_page_size
        )
        global_props = flatten_listing(listing)
        if global_props:
            add(ScopeType.GLOBAL, global_props)

    return scopes, refs


@command_handler(Command.SCOPES)
def handle_scopes(bridge: Bridge, request: Request) -> Response:
    args = arguments_of(request)
    frame = bridge.session.frames.find(args.get("frameNumber", 0))
    if frame is None:
        logger.debug("scopes: no cached frame %s", args.get("frameNumber"))
        return bridge.make_response(request, False)

    scopes, refs = build_scopes(bridge, frame)
    body = {
        "fromScope": 0,
        "toScope": len(scopes),
        "totalScopes": len(scopes),
        "scopes": scopes,
    }
    return bridge.make_response(request, True, body=body, refs=refs)


@command_handler(Command.SCOPE)
def handle_scope(bridge: Bridge, request: Request) -> Response:
    """Return one synthesized scope, selected by its ordinal ``number``."""
    args = arguments_of(request)
    frame = bridge.session.frames.find(args.get("frameNumber") or 0)
    if frame is None:
        logger.debug("scope: no cached frame %s", args.get("frameNumber"))
        return bridge.make_response(request, False)

    scopes, refs = build_scopes(bridge, frame)
    number = args.get("number") or 0
    if not is_int(number) or not 0 <= number < len(scopes):
        return bridge.make_response(request, False)

    return bridge.make_response(request, True, body=scopes[number], refs=[refs[number]])


@command_handler(Command.THREADS)
def handle_threads(bridge: Bridge, request: Request) -> Response:
    """The engine is single-threaded as far as the client is concerned."""
    body = {
        "totalThreads": 1,
        "threads": [{"current": True, "id": THREAD_ID}],
    }
    return bridge.make_response(request, True, body=body)


def _global_frame_index(bridge: Bridge) -> int:
    outermost = bridge.session.frames.outermost()
    if outermost is not None:
        return outermost.index
    stack = call_provider(bridge.provider.get_stack_trace)
    if not stack:
        return 0
    return stack[-1]["index"]


@command_handler(Command.EVALUATE)
def handle_evaluate(bridge: Bridge, request: Request) -> Response:
    """Evaluate in a stack frame while at a break, else as a top-level script."""
    args = arguments_of(request)
    expression = args.get("expression", "")

    if bridge.session.is_at_break:
        frame_index = 0
        if is_int(args.get("frame")):
            frame_index = args["frame"]
        elif args.get("global") is True:
            frame_index = _global_frame_index(bridge)

        logger.debug("Evaluating %r in frame %s", expression, frame_index)
        result = call_provider(bridge.provider.evaluate, expression, frame_index)
        add_children(result, bridge.provider, page_size=bridge.config.property_page_size)
        return bridge.make_response(request, True, body=result)

    value = call_provider(bridge.provider.evaluate_top_level, expression)
    return bridge.make_response(request, True, body={"value": value, "text": value_text(value)})
