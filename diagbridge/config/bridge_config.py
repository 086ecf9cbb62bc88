"""Centralized configuration for the debug protocol bridge.

A single dataclass carries every tunable the bridge reads: paging limits for
provider property listings, handle bases, logging switches and the choice of
how provider failures are surfaced to the client.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from dataclasses import fields
from typing import Any
from typing import Literal

from diagbridge.constants import DEFAULT_GLOBALS_PAGE_SIZE
from diagbridge.constants import DEFAULT_PROPERTY_PAGE_SIZE
from diagbridge.constants import DEFAULT_SCOPE_HANDLE_BASE
from diagbridge.constants import DEFAULT_SCRIPT_HANDLE_BASE
from diagbridge.errors import ConfigurationError

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
_ENV_PREFIX = "DIAGBRIDGE_"
_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass
class BridgeConfig:
    """Configuration for one bridge instance.

    Attributes:
        log_level: Level applied by :func:`diagbridge.configure_logging`.
        trace_enabled: Initial state of the api/input/output trace loggers.
        property_page_size: Properties fetched per object or closure scope.
        globals_page_size: Properties fetched for the globals scope.
        scope_handle_base: Object/scope handles count down from here.
        script_handle_base: Script handles count down from here.
        error_responses: Answer failed provider calls with an explicit
            ``success=false`` response instead of dropping the response.
        sequence_start: First sequence number of both outbound counters.
    """

    log_level: LogLevel = "INFO"
    trace_enabled: bool = False
    property_page_size: int = DEFAULT_PROPERTY_PAGE_SIZE
    globals_page_size: int = DEFAULT_GLOBALS_PAGE_SIZE
    scope_handle_base: int = DEFAULT_SCOPE_HANDLE_BASE
    script_handle_base: int = DEFAULT_SCRIPT_HANDLE_BASE
    error_responses: bool = False
    sequence_start: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BridgeConfig:
        """Create config from a mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        config = cls(**{k: v for k, v in data.items() if k in known})
        config.validate()
        return config

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> BridgeConfig:
        """Create config from ``DIAGBRIDGE_*`` environment variables."""
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}
        for f in fields(cls):
            raw = env.get(_ENV_PREFIX + f.name.upper())
            if raw is None:
                continue
            default = getattr(cls, f.name)
            if isinstance(default, bool):
                values[f.name] = raw.strip().lower() in _TRUE_VALUES
            elif isinstance(default, int):
                try:
                    values[f.name] = int(raw)
                except ValueError as e:
                    raise ConfigurationError(
                        f"Invalid integer for {f.name}: {raw!r}",
                        config_key=f.name,
                        cause=e,
                    ) from e
            else:
                values[f.name] = raw.strip().upper()
        return cls.from_dict(values)

    def validate(self) -> None:
        """Validate configuration and raise errors for invalid setups."""
        if self.log_level not in _LOG_LEVELS:
            raise ConfigurationError(
                f"Unknown log level: {self.log_level}",
                config_key="log_level",
                details={"allowed": list(_LOG_LEVELS)},
            )

        for key in ("property_page_size", "globals_page_size"):
            if getattr(self, key) <= 0:
                raise ConfigurationError(
                    f"{key} must be positive",
                    config_key=key,
                    details={key: getattr(self, key)},
                )

        # Handles are allocated by counting down, so they stay non-positive
        # and never collide with the provider's own positive object handles.
        for key in ("scope_handle_base", "script_handle_base"):
            if getattr(self, key) > 0:
                raise ConfigurationError(
                    f"{key} must not be positive",
                    config_key=key,
                    details={key: getattr(self, key)},
                )

        if self.script_handle_base >= self.scope_handle_base - 1:
            raise ConfigurationError(
                "script_handle_base must leave room below scope_handle_base",
                config_key="script_handle_base",
                details={
                    "scope_handle_base": self.scope_handle_base,
                    "script_handle_base": self.script_handle_base,
                },
            )


# Default configuration instance
DEFAULT_CONFIG = BridgeConfig()
