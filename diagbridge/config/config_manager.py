"""Global configuration management for the debug protocol bridge.

This module provides process-wide configuration with thread-safe access and
configuration validation. Bridges constructed without an explicit config read
the current value from here.
"""

from __future__ import annotations

import dataclasses
import logging
import threading
from typing import TYPE_CHECKING
from typing import Any

if TYPE_CHECKING:
    import types

from diagbridge.config.bridge_config import DEFAULT_CONFIG
from diagbridge.config.bridge_config import BridgeConfig

logger = logging.getLogger(__name__)


class ConfigManager:
    """Thread-safe manager for process-wide configuration state."""

    def __init__(self, default_config: BridgeConfig) -> None:
        self._lock = threading.RLock()
        self._default_config = default_config
        self._current_config = default_config

    def get_config(self) -> BridgeConfig:
        """Get the current configuration in a thread-safe manner."""
        with self._lock:
            return self._current_config

    def set_config(self, config: BridgeConfig) -> None:
        """Set the current configuration in a thread-safe manner."""
        with self._lock:
            config.validate()
            self._current_config = config

    def update_config(self, **kwargs: Any) -> None:
        """Update the current configuration with new values."""
        with self._lock:
            allowed_keys = {f.name for f in dataclasses.fields(BridgeConfig)}
            unknown_keys = sorted(set(kwargs) - allowed_keys)
            if unknown_keys:
                logger.warning("Ignoring unknown config key(s): %s", ", ".join(unknown_keys))

            changes = {k: v for k, v in kwargs.items() if k in allowed_keys}
            new_config = dataclasses.replace(self._current_config, **changes)
            new_config.validate()
            self._current_config = new_config

    def reset_config(self) -> None:
        """Reset configuration to defaults."""
        with self._lock:
            self._current_config = self._default_config

    def apply_context_changes(self, changes: dict[str, Any]) -> tuple[BridgeConfig, BridgeConfig]:
        """Apply temporary configuration changes atomically.

        Returns:
            Tuple of (original_config, new_config).
        """
        with self._lock:
            original = self._current_config
            new_config = dataclasses.replace(original, **changes)
            new_config.validate()
            self._current_config = new_config
            return original, new_config

    def restore_config(self, config: BridgeConfig) -> None:
        """Restore a previously captured configuration."""
        with self._lock:
            self._current_config = config


_config_manager = ConfigManager(DEFAULT_CONFIG)


def get_config() -> BridgeConfig:
    """Get the current configuration in a thread-safe manner."""
    return _config_manager.get_config()


def set_config(config: BridgeConfig) -> None:
    """Set the current configuration in a thread-safe manner."""
    _config_manager.set_config(config)


def update_config(**kwargs: Any) -> None:
    """Update the current configuration with new values."""
    _config_manager.update_config(**kwargs)


def reset_config() -> None:
    """Reset configuration to defaults."""
    _config_manager.reset_config()


class ConfigContext:
    """Context manager for temporary configuration changes.

    This allows for temporary configuration modifications that are
    automatically reverted when the context exits.
    """

    def __init__(self, **kwargs: Any):
        self._manager = _config_manager
        self._changes = kwargs
        self._original_config: BridgeConfig | None = None

    def __enter__(self) -> BridgeConfig:
        self._original_config, new_config = self._manager.apply_context_changes(self._changes)
        return new_config

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: types.TracebackType | None,
    ) -> None:
        if self._original_config is not None:
            self._manager.restore_config(self._original_config)


def config_context(**kwargs: Any) -> ConfigContext:
    """Create a context manager for temporary configuration changes."""
    return ConfigContext(**kwargs)
