"""Mutable per-debuggee session state shared by requests and events."""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field
from enum import Enum
import logging
from typing import TYPE_CHECKING

from diagbridge.core.frame_cache import FrameCache

if TYPE_CHECKING:
    from diagbridge.protocol.messages import Request

logger = logging.getLogger(__name__)


class SuspendStatus(str, Enum):
    PENDING = "pending"
    RESOLVED = "resolved"
    ABANDONED = "abandoned"


@dataclass
class PendingSuspend:
    """A ``suspend`` request waiting for the next async-break event.

    It is answered when that event arrives. It is abandoned when another
    ``suspend`` supersedes it or the host gives up on it. An abandoned
    request is never answered.
    """

    request: Request
    status: SuspendStatus = SuspendStatus.PENDING


@dataclass
class Session:
    is_at_break: bool = False
    suspend: PendingSuspend | None = None
    frames: FrameCache = field(default_factory=FrameCache)
    break_script_id: int | None = None
    abandoned_suspends: list[PendingSuspend] = field(default_factory=list)

    def resume(self) -> None:
        """Leave the break state and drop the stack snapshot."""
        self.is_at_break = False
        self.frames.invalidate()

    def enter_break(self, script_id: int | None) -> None:
        self.break_script_id = script_id
        self.is_at_break = True

    # --- Suspend bookkeeping ---

    def await_suspend(self, request: Request) -> PendingSuspend:
        """Record ``request`` as the pending suspend, abandoning any older one."""
        if self.suspend is not None:
            self.abandon_suspend()
        self.suspend = PendingSuspend(request)
        return self.suspend

    def resolve_suspend(self) -> Request | None:
        """Mark the pending suspend resolved and return its request."""
        pending = self.suspend
        if pending is None:
            return None
        pending.status = SuspendStatus.RESOLVED
        self.suspend = None
        return pending.request

    def abandon_suspend(self) -> PendingSuspend | None:
        pending = self.suspend
        if pending is None:
            return None
        pending.status = SuspendStatus.ABANDONED
        self.abandoned_suspends.append(pending)
        self.suspend = None
        logger.warning(
            "Suspend request %s abandoned without a response", pending.request.get("seq")
        )
        return pending
