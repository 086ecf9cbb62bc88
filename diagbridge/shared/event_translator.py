"""EventTranslator: native diagnostic events -> outbound protocol events.

Translation also drives the session's break state:

- source compiled: ``afterCompile`` event, then pending breakpoints replay
- compile error: nothing (reserved)
- break / step complete / debugger statement: ``break`` event, now at break
- async break: answers a pending ``suspend`` through the delayed channel
- runtime exception: ``exception`` event, now at break
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from typing import Any

from diagbridge.constants import DebugEvent
from diagbridge.constants import debug_event_name
from diagbridge.core.children import add_children
from diagbridge.errors import UnrecognizedEventError
from diagbridge.shared.breakpoint_handlers import replay_pending_breakpoint
from diagbridge.shared.command_handler_helpers import script_entry

if TYPE_CHECKING:
    from diagbridge.bridge import Bridge
    from diagbridge.protocol.messages import Event

logger = logging.getLogger(__name__)


class EventTranslator:
    """Maps ``(event kind, payload)`` pairs onto protocol events."""

    def __init__(self, bridge: Bridge) -> None:
        self._bridge = bridge

    def translate(self, event_kind: int, payload: dict[str, Any]) -> Event | None:
        """Translate one native event.

        Returns:
            The event to send, or None when the event produces no message.

        Raises:
            UnrecognizedEventError: for a kind outside the known range.
        """
        try:
            kind = DebugEvent(event_kind)
        except ValueError:
            raise UnrecognizedEventError(event_kind) from None

        logger.debug("Translating %s", debug_event_name(kind))

        if kind is DebugEvent.SOURCE_COMPILE:
            return self._source_compiled(payload)
        if kind is DebugEvent.COMPILE_ERROR:
            return None
        if kind in (DebugEvent.BREAK, DebugEvent.STEP_COMPLETE, DebugEvent.DEBUGGER_STATEMENT):
            return self._break(payload)
        if kind is DebugEvent.ASYNC_BREAK:
            self._async_break()
            return None
        return self._runtime_exception(payload)

    def _script_ref(self, script_id: Any) -> dict[str, Any]:
        return {"id": script_id, "name": self._bridge.scripts.file_name(script_id)}

    def _source_compiled(self, payload: dict[str, Any]) -> Event:
        bridge = self._bridge
        script_id = payload.get("scriptId")
        script = script_entry(payload, name=bridge.scripts.file_name(script_id))
        event = bridge.factory.create_event(
            "afterCompile",
            {"script": script},
            success=True,
            running=not bridge.session.is_at_break,
        )

        if bridge.breakpoints.has_pending():
            replayed = bridge.breakpoints.replay_pending(
                lambda request: replay_pending_breakpoint(bridge, request).resolved
            )
            logger.debug(
                "Replayed %d pending breakpoint request(s), %d still waiting",
                replayed,
                len(bridge.breakpoints.pending),
            )
        return event

    def _break(self, payload: dict[str, Any]) -> Event:
        bridge = self._bridge
        script_id = payload.get("scriptId")
        body: dict[str, Any] = {
            "sourceLine": payload.get("line"),
            "sourceColumn": payload.get("column"),
            "sourceLineText": payload.get("sourceText"),
            "script": self._script_ref(script_id),
        }
        if payload.get("breakpointId"):
            body["breakpoints"] = [payload["breakpointId"]]

        event = bridge.factory.create_event("break", body)
        bridge.session.enter_break(script_id)
        return event

    def _async_break(self) -> None:
        bridge = self._bridge
        session = bridge.session
        if session.suspend is None:
            return
        session.is_at_break = True
        request = session.resolve_suspend()
        response = bridge.make_response(request, True)
        bridge.deliver_delayed(response)

    def _runtime_exception(self, payload: dict[str, Any]) -> Event:
        bridge = self._bridge
        script_id = payload.get("scriptId")
        exception = payload.get("exception")
        if isinstance(exception, dict):
            add_children(exception, bridge.provider, page_size=bridge.config.property_page_size)

        body = {
            "uncaught": payload.get("uncaught"),
            "exception": exception,
            "sourceLine": payload.get("line"),
            "sourceColumn": payload.get("column"),
            "sourceLineText": payload.get("sourceText"),
            "script": self._script_ref(script_id),
        }
        event = bridge.factory.create_event("exception", body)
        bridge.session.enter_break(script_id)
        return event
