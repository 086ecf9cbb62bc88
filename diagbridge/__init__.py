"""diagbridge - V8-style JSON debug protocol bridge for native diagnostics providers."""

from diagbridge.bridge import Bridge
from diagbridge.config import BridgeConfig
from diagbridge.message_queue import DebugMessageQueue
from diagbridge.utils.trace import configure_logging

__all__ = ["Bridge", "BridgeConfig", "DebugMessageQueue", "__version__", "configure_logging"]
__version__ = "0.1.0"
