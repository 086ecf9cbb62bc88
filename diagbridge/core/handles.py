"""HandleAllocator: issues bridge-side handles.

Two independent spaces are maintained:
1. object/scope handles (stack frames and synthesized scope objects), in the
   range ``script_base < handle < scope_base``
2. script handles (stable per script id, see ScriptRegistry), below
   ``script_base``

Both count down from a non-positive base so bridge handles never collide
with the provider's own positive object handles. The scope space is bounded
by the script base and restarts from its own base when it runs out; frame
and scope handles only live until the next resume, so reuse is safe.
"""

from __future__ import annotations

import logging

from diagbridge.constants import DEFAULT_SCOPE_HANDLE_BASE
from diagbridge.constants import DEFAULT_SCRIPT_HANDLE_BASE

logger = logging.getLogger(__name__)


class HandleSpace:
    """One monotonically decreasing handle counter.

    When ``floor`` is set the counter never reaches it; the handle after
    ``floor + 1`` is ``base - 1`` again.
    """

    def __init__(self, base: int, floor: int | None = None) -> None:
        if floor is not None and floor >= base - 1:
            raise ValueError(f"Handle space floor {floor} leaves no room below base {base}")
        self.base = base
        self.floor = floor
        self.last_handle = base

    def allocate(self) -> int:
        self.last_handle -= 1
        if self.floor is not None and self.last_handle <= self.floor:
            logger.debug("Handle space %s exhausted, restarting from its base", self.base)
            self.last_handle = self.base - 1
        return self.last_handle


class HandleAllocator:
    """Allocates handles for the object/scope and script spaces.

    Attributes:
        scopes: The object/scope handle space, bounded by the script base.
        scripts: The script handle space.

    Example usage:
        allocator = HandleAllocator()
        frame_handle = allocator.next_scope_handle()   # -1
        script_handle = allocator.next_script_handle() # -100001
    """

    def __init__(
        self,
        scope_base: int = DEFAULT_SCOPE_HANDLE_BASE,
        script_base: int = DEFAULT_SCRIPT_HANDLE_BASE,
    ) -> None:
        self.scopes = HandleSpace(scope_base, floor=script_base)
        self.scripts = HandleSpace(script_base)

    def next_scope_handle(self) -> int:
        return self.scopes.allocate()

    def next_script_handle(self) -> int:
        return self.scripts.allocate()


__all__ = ["HandleAllocator", "HandleSpace"]
