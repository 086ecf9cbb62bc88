"""Delayed-message delivery for the bridge.

Most outbound protocol text is the return value of the call that produced
it. The answer to ``suspend`` is not: it is produced while translating a later
async-break event. Such messages go out through an EventEmitter whose
listeners each receive the serialized message text.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from typing import Any

if TYPE_CHECKING:
    from collections.abc import Callable

    MessageListener = Callable[[str], Any]

logger = logging.getLogger(__name__)


class EventEmitter:
    """Synchronous fan-out of outbound message text.

    API:
    - add_listener(callable)
    - remove_listener(callable)
    - emit(message) -> number of listeners that received it

    A failing listener is logged and does not stop delivery to the others.
    """

    def __init__(self) -> None:
        self._listeners: list[MessageListener] = []

    def add_listener(self, fn: MessageListener) -> None:
        self._listeners.append(fn)

    def remove_listener(self, fn: MessageListener) -> None:
        try:
            self._listeners.remove(fn)
        except ValueError:
            pass

    def emit(self, message: str) -> int:
        delivered = 0
        for fn in list(self._listeners):
            try:
                fn(message)
            except Exception:
                logger.exception("Delayed message listener %r failed", fn)
            else:
                delivered += 1
        return delivered
