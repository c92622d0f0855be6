"""Domain services."""

from pyslc.domain.services.command_parser import ParsedCommand, parse_command
from pyslc.domain.services.protocols import (
    ChatApi,
    CommandListener,
    ErrorListener,
    MessageListener,
    StartListener,
    invoke_listener,
)

__all__ = [
    "ChatApi",
    "CommandListener",
    "ErrorListener",
    "MessageListener",
    "ParsedCommand",
    "StartListener",
    "invoke_listener",
    "parse_command",
]
