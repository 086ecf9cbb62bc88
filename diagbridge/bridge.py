"""Bridge: the top-level object the host talks to.

A bridge owns one debuggee session and exposes two entry points:

- :meth:`Bridge.handle_request` takes inbound protocol text and returns the
  response text (or None when nothing is to be sent right away)
- :meth:`Bridge.handle_event` takes a native diagnostic event and returns the
  protocol event text (or None)

Both run under one re-entrant lock because they share the session state.
Responses that are not the return value of the call that produced them (the
answer to ``suspend``) are delivered to the delayed-message listeners.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING
from typing import Any
from typing import Callable

from diagbridge.config import get_config
from diagbridge.constants import debug_event_name
from diagbridge.core.breakpoint_registry import BreakpointKind
from diagbridge.core.breakpoint_registry import BreakpointRegistry
from diagbridge.core.handles import HandleAllocator
from diagbridge.core.script_registry import ScriptRegistry
from diagbridge.core.session import Session
from diagbridge.errors import BridgeError
from diagbridge.errors import ErrorHandler
from diagbridge.errors import handle_bridge_errors
from diagbridge.protocol.protocol import ProtocolFactory
from diagbridge.protocol.protocol import parse_request
from diagbridge.protocol.protocol import serialize
from diagbridge.shared import EventTranslator
from diagbridge.shared import dispatch
from diagbridge.utils.events import EventEmitter
from diagbridge.utils.trace import call_provider
from diagbridge.utils.trace import input_logger
from diagbridge.utils.trace import output_logger
from diagbridge.utils.trace import set_trace_enabled

if TYPE_CHECKING:
    from collections.abc import Iterable

    from diagbridge.config import BridgeConfig
    from diagbridge.core.session import PendingSuspend
    from diagbridge.protocol.messages import Event
    from diagbridge.protocol.messages import Request
    from diagbridge.protocol.messages import Response
    from diagbridge.protocol.provider import DiagnosticsProvider

logger = logging.getLogger(__name__)


class Bridge:
    """Translates between the JSON debug protocol and a diagnostics provider.

    Args:
        provider: The native diagnostics capability set.
        config: Bridge configuration; the process-wide config when omitted.
        send_delayed: Optional listener for delayed outbound messages.
    """

    def __init__(
        self,
        provider: DiagnosticsProvider,
        *,
        config: BridgeConfig | None = None,
        send_delayed: Callable[[str], Any] | None = None,
    ) -> None:
        self.config = config if config is not None else get_config()
        self.config.validate()

        self.provider = provider
        self.allocator = HandleAllocator(
            self.config.scope_handle_base, self.config.script_handle_base
        )
        self.scripts = ScriptRegistry(provider, self.allocator)
        self.breakpoints = BreakpointRegistry()
        self.session = Session()
        self.factory = ProtocolFactory(seq_start=self.config.sequence_start)
        self.error_handler = ErrorHandler(logger)

        self.on_delayed_message = EventEmitter()
        if send_delayed is not None:
            self.on_delayed_message.add_listener(send_delayed)

        self._translator = EventTranslator(self)
        self._lock = threading.RLock()

        set_trace_enabled(self.config.trace_enabled)

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------
    @handle_bridge_errors("handle_request")
    def handle_request(self, text: str | bytes) -> str | None:
        """Process one inbound protocol request.

        Returns:
            The serialized response, or None when there is nothing to send
            now (``suspend``, or a request that failed).
        """
        with self._lock:
            input_logger.debug("%s", text)
            request = parse_request(text)
            try:
                response = dispatch(self, request)
            except BridgeError:
                raise
            except Exception as e:
                if not self.config.error_responses:
                    raise
                response = self._error_response(request, e)

            if response is None:
                return None
            return self._serialize(response)

    @handle_bridge_errors("handle_event")
    def handle_event(self, event_kind: int, payload: dict[str, Any] | None = None) -> str | None:
        """Process one native diagnostic event.

        Returns:
            The serialized protocol event, or None when the event produces
            no message.
        """
        with self._lock:
            input_logger.debug("%s: %s", debug_event_name(event_kind), payload)
            event = self._translator.translate(event_kind, payload or {})
            if event is None:
                return None
            return self._serialize(event)

    def set_breakpoint_at_function(self, fn: Any, line: int, column: int) -> int:
        """Set a breakpoint relative to the first statement of ``fn``.

        Returns:
            The provider breakpoint id, or -1 when the function has no script.
        """
        with self._lock:
            position = call_provider(self.provider.get_function_position, fn)
            script_id = position.get("scriptId", -1)
            if script_id is None or script_id < 0:
                logger.debug("Function %r has no script position", fn)
                return -1

            bp_line = position.get("firstStatementLine", 0) + line
            bp_column = position.get("firstStatementColumn", 0) + column
            result = call_provider(self.provider.set_breakpoint, script_id, bp_line, bp_column)
            breakpoint_id = result.get("breakpointId", -1)
            self.breakpoints.add(breakpoint_id, BreakpointKind.SCRIPT_ID, script_id)
            return breakpoint_id

    # ------------------------------------------------------------------
    # Responses
    # ------------------------------------------------------------------
    def make_response(
        self,
        request: Request,
        success: bool,
        *,
        body: Any | None = None,
        refs: Iterable[Any] | None = None,
        error_message: str | None = None,
    ) -> Response:
        """Build a response to ``request`` reflecting the current break state."""
        response = self.factory.create_response(
            request,
            success,
            running=not self.session.is_at_break,
            body=body,
            error_message=error_message,
        )
        if refs:
            response["refs"] = list(refs)
        return response

    def deliver_delayed(self, message: Response | Event) -> None:
        """Send a message outside the call that produced it."""
        text = self._serialize(message)
        if self.on_delayed_message.emit(text) == 0:
            logger.warning("Delayed message dropped, no listener took it: %s", text)

    def add_delayed_listener(self, fn: Callable[[str], Any]) -> None:
        self.on_delayed_message.add_listener(fn)

    def remove_delayed_listener(self, fn: Callable[[str], Any]) -> None:
        self.on_delayed_message.remove_listener(fn)

    def _error_response(self, request: Request, error: Exception) -> Response:
        message, body = self.error_handler.create_error_body(
            error, context={"command": request.get("command"), "request_seq": request.get("seq")}
        )
        return self.make_response(request, False, body=body, error_message=message)

    def _serialize(self, message: Response | Event) -> str:
        text = serialize(message)
        output_logger.debug("%s", text)
        return text

    # ------------------------------------------------------------------
    # Host helpers
    # ------------------------------------------------------------------
    @property
    def should_continue(self) -> bool:
        """Whether the engine may resume after the current native event."""
        with self._lock:
            return not self.session.is_at_break

    @property
    def is_at_break(self) -> bool:
        with self._lock:
            return self.session.is_at_break

    def set_logging(self, enabled: bool) -> None:
        """Switch the api/input/output trace loggers on or off."""
        set_trace_enabled(enabled)

    def abandon_suspend(self) -> PendingSuspend | None:
        """Give up on the pending ``suspend`` request; it is never answered."""
        with self._lock:
            return self.session.abandon_suspend()


__all__ = ["Bridge"]
