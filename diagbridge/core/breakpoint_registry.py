"""BreakpointRegistry: committed and pending breakpoint state.

This module tracks:
1. Committed breakpoints, keyed by the provider-assigned id, with the kind of
   target they were requested against (script id, regexp or script name)
2. Pending requests whose target script did not exist yet; these are retried
   on each compile until their script appears
"""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field
from enum import Enum
import logging
from typing import TYPE_CHECKING
from typing import Any

if TYPE_CHECKING:
    from collections.abc import Callable

    from diagbridge.protocol.messages import Request

logger = logging.getLogger(__name__)


class BreakpointKind(str, Enum):
    """How a breakpoint's target script was specified."""

    SCRIPT_ID = "scriptId"
    SCRIPT_REGEXP = "scriptRegExp"
    SCRIPT_NAME = "scriptName"


@dataclass(frozen=True)
class BreakpointEntry:
    kind: BreakpointKind
    target: Any


@dataclass
class BreakpointRegistry:
    """Manages committed breakpoints and the pending request queue.

    Attributes:
        entries: Mapping of provider breakpoint id -> entry.
        pending: Requests waiting for their target script to appear.
    """

    entries: dict[int, BreakpointEntry] = field(default_factory=dict)
    pending: list[Request] = field(default_factory=list)

    # --- Committed breakpoints ---

    def add(self, breakpoint_id: int, kind: BreakpointKind | str, target: Any) -> bool:
        """Register a committed breakpoint.

        Only positive ids are registered; the provider reports failure with
        a non-positive id.

        Returns:
            True if the breakpoint was registered.
        """
        if not isinstance(breakpoint_id, int) or breakpoint_id <= 0:
            return False
        self.entries[breakpoint_id] = BreakpointEntry(BreakpointKind(kind), target)
        return True

    def get(self, breakpoint_id: int) -> BreakpointEntry | None:
        return self.entries.get(breakpoint_id)

    def remove(self, breakpoint_id: int) -> bool:
        return self.entries.pop(breakpoint_id, None) is not None

    def __contains__(self, breakpoint_id: object) -> bool:
        return breakpoint_id in self.entries

    def __len__(self) -> int:
        return len(self.entries)

    # --- Pending requests ---

    def add_pending(self, request: Request) -> None:
        self.pending.append(request)

    def has_pending(self) -> bool:
        return bool(self.pending)

    def replay_pending(self, replay: Callable[[Request], bool]) -> int:
        """Retry every pending request against the scripts loaded now.

        ``replay`` returns whether the request's target script was found. A
        request whose script is still missing stays queued. A request that
        resolved leaves the queue whatever the provider answered, and so does
        one whose replay raised.

        Returns:
            The number of requests that left the queue.
        """
        queued = self.pending
        self.pending = []
        waiting: list[Request] = []
        for request in queued:
            try:
                resolved = replay(request)
            except Exception:
                logger.debug(
                    "Dropping pending breakpoint request %s", request.get("seq"), exc_info=True
                )
                continue
            if not resolved:
                waiting.append(request)
        self.pending = waiting + self.pending
        return len(queued) - len(waiting)


__all__ = ["BreakpointEntry", "BreakpointKind", "BreakpointRegistry"]
