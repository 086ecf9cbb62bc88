"""Inbound request queue and the engine-side event pump.

The transport thread hands request text to :meth:`DebugMessageQueue.send_command`.
Requests are only processed on the engine thread, from inside a native event
callback (:meth:`DebugMessageQueue.process_debug_event`). When no event
callback is currently waiting for input, the engine is asked for an async
break so that one will run soon.
"""

from __future__ import annotations

from collections import deque
import logging
import threading
from typing import TYPE_CHECKING
from typing import Any
from typing import Callable

from diagbridge.constants import debug_event_name

if TYPE_CHECKING:
    from diagbridge.bridge import Bridge

logger = logging.getLogger(__name__)


class DebugMessageQueue:
    """Thread-safe FIFO of inbound requests drained by native events.

    Args:
        bridge: The bridge that processes requests and events.
        send: Receives every outbound message, including delayed ones.
        request_async_break: Asks the engine to raise an async-break event.
    """

    def __init__(
        self,
        bridge: Bridge,
        send: Callable[[str], Any],
        *,
        request_async_break: Callable[[], Any] | None = None,
    ) -> None:
        self._bridge = bridge
        self._send = send
        self._request_async_break = request_async_break

        self._messages: deque[str] = deque()
        self._cond = threading.Condition()
        self._waiting = False

        # Engine-thread state
        self._processing = False
        self._event_depth = 0

        bridge.add_delayed_listener(send)

    # ------------------------------------------------------------------
    # Transport side
    # ------------------------------------------------------------------
    def save_message(self, text: str) -> bool:
        """Queue one request.

        Returns:
            True if the engine thread was blocked waiting for it.
        """
        with self._cond:
            self._messages.append(text)
            was_waiting = self._waiting
            if was_waiting:
                self._cond.notify()
            return was_waiting

    def send_command(self, text: str) -> None:
        """Queue a request and make sure the engine will get to it."""
        if self.save_message(text):
            return
        if self._request_async_break is None:
            logger.debug("Request queued; no async break callback configured")
            return
        self._request_async_break()

    # ------------------------------------------------------------------
    # Engine side
    # ------------------------------------------------------------------
    def is_empty(self) -> bool:
        with self._cond:
            return not self._messages

    def pop_message(self) -> str | None:
        with self._cond:
            if not self._messages:
                return None
            return self._messages.popleft()

    def wait_for_message(self, timeout: float | None = None) -> bool:
        """Block until a request is queued.

        Returns:
            False if ``timeout`` expired first.
        """
        with self._cond:
            if self._messages:
                return True
            self._waiting = True
            try:
                return self._cond.wait_for(lambda: bool(self._messages), timeout)
            finally:
                self._waiting = False

    def process_message(self) -> None:
        """Process the next queued request, unless one is already in progress."""
        if self._processing:
            return
        text = self.pop_message()
        if text is None:
            return

        self._processing = True
        try:
            response = self._bridge.handle_request(text)
            if response is not None:
                self._send(response)
        finally:
            self._processing = False

    def process_debug_event(self, event_kind: int, payload: dict[str, Any] | None) -> None:
        """Handle one native event, then serve requests while at a break.

        Queued requests are only drained by the outermost event callback. A
        nested event raised while a request is being processed is
        translated and returns immediately.
        """
        self._event_depth += 1
        try:
            logger.debug("Processing %s", debug_event_name(event_kind))
            event = self._bridge.handle_event(event_kind, payload)
            if event is not None:
                self._send(event)

            while True:
                if self._event_depth <= 1:
                    while not self._processing and not self.is_empty():
                        self.process_message()

                if self._bridge.should_continue:
                    break
                self.wait_for_message()
                if self._processing:
                    break
        finally:
            self._event_depth -= 1


__all__ = ["DebugMessageQueue"]
