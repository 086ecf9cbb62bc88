"""Protocol messages, framing helpers and the provider capability protocol."""

from diagbridge.protocol.protocol import MessageSequencer
from diagbridge.protocol.protocol import ProtocolFactory
from diagbridge.protocol.protocol import parse_request
from diagbridge.protocol.protocol import serialize
from diagbridge.protocol.provider import DiagnosticsProvider

__all__ = [
    "DiagnosticsProvider",
    "MessageSequencer",
    "ProtocolFactory",
    "parse_request",
    "serialize",
]
