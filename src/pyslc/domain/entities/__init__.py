"""Domain entities."""

from pyslc.domain.entities.context import CommandContext, MessageContext
from pyslc.domain.entities.message import ChatMessage
from pyslc.domain.entities.user import User, UserProfile

__all__ = ["ChatMessage", "CommandContext", "MessageContext", "User", "UserProfile"]
