"""
Protocol message parsing and construction.

Inbound text is parsed into a :class:`Request`; outbound responses and events
are built by :class:`ProtocolFactory`, which owns two independent sequence
counters, one for responses and one for events.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING
from typing import Any
from typing import cast

from diagbridge.errors import ProtocolError

if TYPE_CHECKING:
    from diagbridge.protocol.messages import Event
    from diagbridge.protocol.messages import Request
    from diagbridge.protocol.messages import Response

logger = logging.getLogger(__name__)


class MessageSequencer:
    """Strictly increasing sequence number generator."""

    def __init__(self, start: int = 0) -> None:
        self._next = start

    def next(self) -> int:
        seq = self._next
        self._next += 1
        return seq

    def peek(self) -> int:
        return self._next


class ProtocolFactory:
    """
    Builds outbound protocol messages.

    Responses and events draw their ``seq`` from separate sequencers, so the
    two streams are each strictly increasing and independent of one another.
    """

    def __init__(self, *, seq_start: int = 0) -> None:
        self.response_seq = MessageSequencer(seq_start)
        self.event_seq = MessageSequencer(seq_start)

    def create_response(
        self,
        request: Request,
        success: bool,
        *,
        running: bool,
        body: Any | None = None,
        error_message: str | None = None,
    ) -> Response:
        req = cast("dict[str, Any]", request)

        response_dict: dict[str, Any] = {
            "seq": self.response_seq.next(),
            "request_seq": req.get("seq"),
            "type": "response",
            "command": req.get("command"),
            "success": success,
            "refs": [],
            "running": running,
        }

        if body is not None:
            response_dict["body"] = body

        if not success and error_message is not None:
            response_dict["message"] = error_message

        return cast("Response", response_dict)

    def create_event(
        self,
        event_type: str,
        body: Any,
        **extra: Any,
    ) -> Event:
        event_dict: dict[str, Any] = {
            "seq": self.event_seq.next(),
            "type": "event",
            "event": event_type,
        }
        event_dict.update(extra)
        event_dict["body"] = body
        return cast("Event", event_dict)


def parse_request(text: str | bytes) -> Request:
    """Parse one inbound protocol message.

    Raises:
        ProtocolError: if the text is not a JSON object carrying a command.
    """
    try:
        message = json.loads(text)
    except (TypeError, ValueError) as e:
        raise ProtocolError(f"Malformed protocol message: {e}", cause=e) from e

    if not isinstance(message, dict):
        raise ProtocolError(
            "Protocol message must be a JSON object",
            details={"received": type(message).__name__},
        )

    command = message.get("command")
    if not isinstance(command, str):
        raise ProtocolError(
            "Protocol message has no command",
            sequence=message.get("seq"),
        )

    arguments = message.get("arguments")
    if arguments is not None and not isinstance(arguments, dict):
        raise ProtocolError(
            "Request arguments must be an object",
            command=command,
            sequence=message.get("seq"),
        )

    return cast("Request", message)


def serialize(message: Any) -> str:
    """Serialize an outbound message to protocol text."""
    return json.dumps(message, separators=(",", ":"), ensure_ascii=False)
