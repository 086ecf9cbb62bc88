"""
diagbridge.core - Session state stores shared by requests and events.
"""

from diagbridge.core.breakpoint_registry import BreakpointEntry
from diagbridge.core.breakpoint_registry import BreakpointKind
from diagbridge.core.breakpoint_registry import BreakpointRegistry
from diagbridge.core.children import add_children
from diagbridge.core.children import make_scope
from diagbridge.core.frame_cache import Frame
from diagbridge.core.frame_cache import FrameCache
from diagbridge.core.frame_cache import capture_frames
from diagbridge.core.handles import HandleAllocator
from diagbridge.core.script_registry import ScriptRegistry
from diagbridge.core.session import PendingSuspend
from diagbridge.core.session import Session
from diagbridge.core.session import SuspendStatus

__all__ = [
    "BreakpointEntry",
    "BreakpointKind",
    "BreakpointRegistry",
    "Frame",
    "FrameCache",
    "HandleAllocator",
    "PendingSuspend",
    "ScriptRegistry",
    "Session",
    "SuspendStatus",
    "add_children",
    "capture_frames",
    "make_scope",
]
