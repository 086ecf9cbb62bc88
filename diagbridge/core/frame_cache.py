"""FrameCache: the call-stack snapshot of the current break.

The snapshot is captured lazily on the first stack request after a break and
stays immutable until execution resumes, at which point it is invalidated.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import TYPE_CHECKING
from typing import Any

from diagbridge.utils.trace import call_provider

if TYPE_CHECKING:
    from collections.abc import Callable
    from collections.abc import Sequence

    from diagbridge.core.handles import HandleAllocator
    from diagbridge.core.script_registry import ScriptRegistry
    from diagbridge.protocol.provider import DiagnosticsProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Frame:
    """One captured stack frame."""

    index: int
    handle: int
    line: int
    column: int
    source_line_text: str
    function_handle: int
    script_handle: int
    receiver_handle: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "frame",
            "index": self.index,
            "handle": self.handle,
            "constructCall": False,
            "atReturn": False,
            "debuggerFrame": False,
            "position": 0,
            "line": self.line,
            "column": self.column,
            "sourceLineText": self.source_line_text,
            "func": {"ref": self.function_handle},
            "script": {"ref": self.script_handle},
            "receiver": {"ref": self.receiver_handle},
            "arguments": [],
            "locals": [],
            "scopes": [],
            "text": "",
        }


def capture_frames(
    provider: DiagnosticsProvider,
    scripts: ScriptRegistry,
    allocator: HandleAllocator,
) -> list[Frame]:
    """Build the frame sequence for the current break.

    Fetches the full stack once, then evaluates ``this`` in every frame to
    find its receiver. Script handles are reused across breaks.
    """
    stack = call_provider(provider.get_stack_trace)
    frames: list[Frame] = []
    for entry in stack:
        this_obj = call_provider(provider.evaluate, "this", entry["index"])
        function_handle = entry.get("functionHandle")
        receiver = function_handle
        if isinstance(this_obj, dict) and "handle" in this_obj:
            receiver = this_obj["handle"]
        frames.append(
            Frame(
                index=entry["index"],
                handle=allocator.next_scope_handle(),
                line=entry.get("line", 0),
                column=entry.get("column", 0),
                source_line_text=entry.get("sourceText", ""),
                function_handle=function_handle,
                script_handle=scripts.handle_for(entry["scriptId"]),
                receiver_handle=receiver,
            )
        )
    return frames


class FrameCache:
    """Holds the most recent stack snapshot, or None when there is none.

    A stored snapshot is always non-empty and ordered as the provider
    reported it, so position ``i`` holds native frame ``i``.
    """

    def __init__(self) -> None:
        self._frames: tuple[Frame, ...] | None = None

    @property
    def frames(self) -> tuple[Frame, ...] | None:
        return self._frames

    def is_cached(self) -> bool:
        return self._frames is not None

    def store(self, frames: Sequence[Frame]) -> None:
        self._frames = tuple(frames) or None

    def invalidate(self) -> None:
        self._frames = None

    def get_or_capture(self, capture: Callable[[], Sequence[Frame]]) -> tuple[Frame, ...]:
        """Return the cached snapshot, capturing it first if needed."""
        if self._frames is None:
            self.store(capture())
            logger.debug("Captured %d stack frame(s)", len(self._frames or ()))
        return self._frames or ()

    def find(self, native_index: Any) -> Frame | None:
        """Return the cached frame whose native index is ``native_index``."""
        for frame in self._frames or ():
            if frame.index == native_index:
                return frame
        return None

    def outermost(self) -> Frame | None:
        if not self._frames:
            return None
        return self._frames[-1]

    def __len__(self) -> int:
        return len(self._frames or ())


__all__ = ["Frame", "FrameCache", "capture_frames"]
