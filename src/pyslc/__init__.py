"""Client SDK for SLChat bots."""

from pyslc.application.bot import Bot, ChangeKey
from pyslc.application.factory import create_bot
from pyslc.config import Config, load_config
from pyslc.domain.entities import (
    ChatMessage,
    CommandContext,
    MessageContext,
    User,
    UserProfile,
)
from pyslc.domain.exceptions import (
    AlreadyJoinedError,
    BotConfigurationError,
    ErrorKind,
    NotJoinedError,
    ProtocolError,
    SLChatError,
    TransportError,
)

__all__ = [
    "AlreadyJoinedError",
    "Bot",
    "BotConfigurationError",
    "ChangeKey",
    "ChatMessage",
    "CommandContext",
    "Config",
    "ErrorKind",
    "MessageContext",
    "NotJoinedError",
    "ProtocolError",
    "SLChatError",
    "TransportError",
    "User",
    "UserProfile",
    "create_bot",
    "load_config",
]
