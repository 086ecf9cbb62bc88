"""Error handling for the debug protocol bridge."""

from diagbridge.errors.bridge_errors import BridgeError
from diagbridge.errors.bridge_errors import ConfigurationError
from diagbridge.errors.bridge_errors import ErrorHandler
from diagbridge.errors.bridge_errors import ProtocolError
from diagbridge.errors.bridge_errors import StepActionError
from diagbridge.errors.bridge_errors import UnrecognizedCommandError
from diagbridge.errors.bridge_errors import UnrecognizedEventError
from diagbridge.errors.error_patterns import classify_error
from diagbridge.errors.error_patterns import handle_bridge_errors

__all__ = [
    "BridgeError",
    "ConfigurationError",
    "ErrorHandler",
    "ProtocolError",
    "StepActionError",
    "UnrecognizedCommandError",
    "UnrecognizedEventError",
    "classify_error",
    "handle_bridge_errors",
]
