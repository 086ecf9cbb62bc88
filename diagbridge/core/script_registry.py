"""ScriptRegistry: cached script descriptors and script handles.

Descriptors come from the provider's script listing and are refreshed by
re-querying whenever a lookup misses. Each script id is mapped to exactly one
bridge handle, allocated on first use and never reused.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from typing import Any

from diagbridge.utils.trace import call_provider

if TYPE_CHECKING:
    from diagbridge.core.handles import HandleAllocator
    from diagbridge.protocol.provider import DiagnosticsProvider
    from diagbridge.protocol.provider import ScriptInfo

logger = logging.getLogger(__name__)


class ScriptRegistry:
    """Script descriptor cache plus the bidirectional script id <-> handle map."""

    def __init__(self, provider: DiagnosticsProvider, allocator: HandleAllocator) -> None:
        self._provider = provider
        self._allocator = allocator
        self._descriptors: dict[int, ScriptInfo] = {}
        self._handle_by_id: dict[int, int] = {}
        self._id_by_handle: dict[int, int] = {}

    # --- Descriptors ---

    def refresh(self) -> list[ScriptInfo]:
        """Re-query the provider and merge every script it reports."""
        scripts = call_provider(self._provider.list_scripts)
        for script in scripts:
            self._descriptors[script["scriptId"]] = script
        return scripts

    def descriptor(self, script_id: int) -> ScriptInfo | None:
        """Return the descriptor for ``script_id``, refreshing once on a miss."""
        if script_id not in self._descriptors:
            self.refresh()
        return self._descriptors.get(script_id)

    def file_name(self, script_id: int | None) -> str:
        """Return the file name of a script, or ``""`` if it is unknown."""
        if script_id is None:
            return ""
        script = self.descriptor(script_id)
        if script is None:
            return ""
        return script.get("fileName") or ""

    # --- Handles ---

    def handle_for(self, script_id: int) -> int:
        """Return the handle of ``script_id``, allocating one on first use."""
        handle = self._handle_by_id.get(script_id)
        if handle is None:
            handle = self._allocator.next_script_handle()
            self._handle_by_id[script_id] = handle
            self._id_by_handle[handle] = script_id
            logger.debug("Mapped script %s to handle %s", script_id, handle)
        return handle

    def is_script_handle(self, handle: Any) -> bool:
        return handle in self._id_by_handle

    def descriptor_for_handle(self, handle: int) -> dict[str, Any] | None:
        """Return a copy of the descriptor behind a script handle.

        The copy carries the ``handle`` so it can be returned as a lookup
        result directly.
        """
        script_id = self._id_by_handle.get(handle)
        if script_id is None:
            return None
        script = self.descriptor(script_id)
        if script is None:
            return None
        result: dict[str, Any] = dict(script)
        result["handle"] = handle
        return result


__all__ = ["ScriptRegistry"]
