"""Protocol command handlers and native event translation.

Importing this package registers every command handler, so the dispatch
table is complete before the first request arrives.
"""

from diagbridge.shared import breakpoint_handlers  # noqa: F401
from diagbridge.shared import command_handlers
from diagbridge.shared import stack_handlers  # noqa: F401
from diagbridge.shared.command_handlers import dispatch
from diagbridge.shared.event_translator import EventTranslator

command_handlers.ensure_handler_coverage()

__all__ = ["EventTranslator", "dispatch"]
