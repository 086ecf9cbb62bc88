"""Centralized error handling for the debug protocol bridge.

This module provides a hierarchy of exceptions for the ways a single request
or native event can fail, along with utilities for error reporting and for
turning an error into a protocol failure response.
"""

from __future__ import annotations

import logging
import traceback
from typing import TYPE_CHECKING
from typing import Any

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)


class BridgeError(Exception):
    """Base exception for all bridge errors.

    All bridge-specific exceptions inherit from this class so that entry
    points can classify what went wrong without inspecting messages.
    """

    def __init__(
        self,
        message: str,
        *,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        self.cause = cause

    def to_dict(self) -> dict[str, Any]:
        """Convert error to a dictionary for protocol responses."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message} (caused by: {self.cause!s})"
        return self.message


class ConfigurationError(BridgeError):
    """Raised when there's a configuration problem."""

    def __init__(
        self,
        message: str,
        config_key: str | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if config_key:
            details["config_key"] = config_key
        super().__init__(message, error_code="ConfigurationError", details=details, **kwargs)
        self.config_key = config_key


class ProtocolError(BridgeError):
    """Raised when an inbound protocol message cannot be processed."""

    def __init__(
        self,
        message: str,
        *,
        command: str | None = None,
        sequence: int | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        error_code = kwargs.pop("error_code", "ProtocolError")
        if command:
            details["command"] = command
        if sequence is not None:
            details["sequence"] = sequence
        super().__init__(message, error_code=error_code, details=details, **kwargs)
        self.command = command
        self.sequence = sequence


class UnrecognizedCommandError(ProtocolError):
    """Raised for a command outside both the handled and unsupported lists."""

    def __init__(self, command: str | None, *, sequence: int | None = None) -> None:
        super().__init__(
            f"Unhandled command: {command}",
            command=command,
            sequence=sequence,
            error_code="UnrecognizedCommandError",
        )


class StepActionError(ProtocolError):
    """Raised when ``continue`` carries a step action the provider cannot map."""

    def __init__(self, step_action: Any, *, sequence: int | None = None) -> None:
        super().__init__(
            f"Unhandled stepaction: {step_action}",
            command="continue",
            sequence=sequence,
            error_code="StepActionError",
            details={"stepaction": step_action},
        )
        self.step_action = step_action


class UnrecognizedEventError(BridgeError):
    """Raised for a native event kind outside the known range."""

    def __init__(self, event_kind: Any) -> None:
        super().__init__(
            f"Invalid debugEvent: {event_kind}",
            error_code="UnrecognizedEventError",
            details={"event_kind": event_kind},
        )
        self.event_kind = event_kind


class ErrorHandler:
    """Centralized error handling and reporting."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger(__name__)
        self._error_handlers: dict[type[Exception], Callable[[Exception], Any]] = {}

    def register_handler(
        self,
        exception_type: type[Exception],
        handler: Callable[[Exception], Any],
    ) -> None:
        """Register a custom error handler for an exception type."""
        self._error_handlers[exception_type] = handler

    def handle_error(
        self,
        error: Exception,
        *,
        reraise: bool = False,
        log_level: int = logging.ERROR,
        context: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Handle an error and return a standardized error payload.

        Args:
            error: The exception to handle
            reraise: Whether to re-raise the exception after handling
            log_level: Logging level for the error
            context: Additional context information

        Returns:
            Dictionary with error information suitable for protocol responses
        """
        error_msg = f"Error: {error!s}"
        if context:
            error_msg += f" (context: {context})"

        self.logger.log(log_level, error_msg, exc_info=error)

        for exc_type, handler in self._error_handlers.items():
            if isinstance(error, exc_type):
                try:
                    result = handler(error)
                    if isinstance(result, dict):
                        return result
                except Exception as handler_error:
                    self.logger.error(
                        "Error handler for %s failed: %s", exc_type.__name__, handler_error
                    )

        if isinstance(error, BridgeError):
            error_dict = error.to_dict()
        else:
            error_dict = {
                "error": error.__class__.__name__,
                "message": str(error),
                "details": {},
            }

        if context:
            error_dict["context"] = context

        error_dict["traceback"] = "".join(
            traceback.format_exception(type(error), error, error.__traceback__)
        )

        if reraise:
            raise error

        return error_dict

    def create_error_body(
        self,
        error: Exception,
        *,
        context: dict[str, Any] | None = None,
    ) -> tuple[str, dict[str, Any]]:
        """Return ``(message, body)`` describing ``error`` for a failure response."""
        error_info = self.handle_error(error, reraise=False, context=context)
        body = {
            "error": error_info.get("error"),
            "details": error_info.get("details", {}),
        }
        return error_info.get("message", "Unknown error"), body
