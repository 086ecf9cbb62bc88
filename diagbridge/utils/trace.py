"""Trace logging for provider calls and protocol traffic.

Three named loggers can be switched on and off at runtime:

- ``diagbridge.api``: every provider call with its duration
- ``diagbridge.input``: inbound requests and native events
- ``diagbridge.output``: outbound responses and events
"""

from __future__ import annotations

import json
import logging
import time
from typing import TYPE_CHECKING
from typing import Any
from typing import TypeVar

from diagbridge.config import get_config

if TYPE_CHECKING:
    from collections.abc import Callable

R = TypeVar("R")

api_logger = logging.getLogger("diagbridge.api")
input_logger = logging.getLogger("diagbridge.input")
output_logger = logging.getLogger("diagbridge.output")

TRACE_LOGGERS = (api_logger, input_logger, output_logger)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Eventually this can just be logging.getLevelNamesMapping()
NAME_TO_LEVEL: dict[str, int] = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}


def set_trace_enabled(enabled: bool) -> None:
    """Switch the api/input/output trace loggers on or off."""
    for trace_logger in TRACE_LOGGERS:
        trace_logger.disabled = not enabled
        if enabled:
            trace_logger.setLevel(logging.DEBUG)


def trace_enabled() -> bool:
    return not api_logger.disabled


def configure_logging(level: str | None = None) -> None:
    """Configure console logging for a host process.

    The package itself never configures logging; hosts embedding the bridge
    call this once if they have no logging setup of their own. ``level``
    defaults to the configured ``log_level``.
    """
    if level is None:
        level = get_config().log_level
    logging.basicConfig(
        level=NAME_TO_LEVEL.get(level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler()],
    )


def _render(obj: Any) -> str:
    if isinstance(obj, str):
        return obj
    try:
        return json.dumps(obj, default=str)
    except (TypeError, ValueError):
        return repr(obj)


def call_provider(
    fn: Callable[..., R],
    *args: Any,
    log_result: bool = True,
) -> R:
    """Invoke one provider capability, tracing its arguments and duration.

    Exceptions from the provider propagate unchanged.
    """
    start = time.perf_counter()
    result = fn(*args)
    if api_logger.isEnabledFor(logging.DEBUG):
        elapsed_ms = (time.perf_counter() - start) * 1000.0
        name = getattr(fn, "__name__", repr(fn))
        rendered_args = ",".join(str(a) for a in args)
        if log_result:
            api_logger.debug("%s(%s):%.1f: %s", name, rendered_args, elapsed_ms, _render(result))
        else:
            api_logger.debug("%s(%s):%.1f", name, rendered_args, elapsed_ms)
    return result
