"""Standardized error handling patterns for the bridge entry points.

Both collaborator-facing entry points (inbound protocol text and inbound native
events) treat a failure as fatal for that single call only: the exception is
classified, logged, and the call produces no outbound message.
"""

from __future__ import annotations

from functools import wraps
import logging
from typing import TYPE_CHECKING
from typing import Any
from typing import TypeVar

if TYPE_CHECKING:
    from collections.abc import Callable

    R = TypeVar("R")
else:
    R = TypeVar("R")

from diagbridge.errors.bridge_errors import BridgeError
from diagbridge.errors.bridge_errors import ConfigurationError
from diagbridge.errors.bridge_errors import ProtocolError
from diagbridge.errors.bridge_errors import UnrecognizedEventError

logger = logging.getLogger(__name__)


def classify_error(e: Exception, *, operation: str) -> BridgeError:
    """Classify a generic exception into the appropriate ``BridgeError`` subtype.

    Bridge errors pass through unchanged. Anything else came out of a
    provider call or a malformed payload and is wrapped as a provider error.
    """
    if isinstance(e, BridgeError):
        return e
    return BridgeError(
        f"Error in bridge operation {operation}: {e!s}",
        error_code="ProviderError",
        cause=e,
        details={"operation": operation},
    )


def _handle_bridge_exception(
    e: Exception,
    *,
    operation: str,
    reraise: bool,
    log_level: int,
) -> None:
    """Log one entry-point failure consistently."""
    if isinstance(e, ConfigurationError):
        if reraise:
            raise e
        logger.exception("Configuration error in %s", operation)
        return

    if isinstance(e, (ProtocolError, UnrecognizedEventError)):
        if reraise:
            raise e
        logger.warning("%s in %s: %s", e.error_code, operation, e, exc_info=True)
        return

    wrapped_error = classify_error(e, operation=operation)
    logger.log(log_level, str(wrapped_error), exc_info=True)

    if reraise:
        raise wrapped_error from e


def handle_bridge_errors(
    operation: str | None = None,
    *,
    reraise: bool = False,
    log_level: int = logging.ERROR,
) -> Callable[[Callable[..., R]], Callable[..., R | None]]:
    """Decorator for bridge entry points.

    Args:
        operation: Name of the entry point being guarded
        reraise: Whether to re-raise the classified exception
        log_level: Logging level for unexpected (provider) failures

    Returns:
        Decorated function that returns ``None`` when the call failed
    """

    def decorator(func: Callable[..., R]) -> Callable[..., R | None]:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> R | None:
            try:
                return func(*args, **kwargs)
            except Exception as e:
                _handle_bridge_exception(
                    e,
                    operation=operation or func.__name__,
                    reraise=reraise,
                    log_level=log_level,
                )
                return None

        return wrapper

    return decorator
