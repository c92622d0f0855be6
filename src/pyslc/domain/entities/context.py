"""Message and command contexts handed to listeners."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from pyslc.domain.entities.message import ChatMessage
from pyslc.domain.entities.user import User

if TYPE_CHECKING:
    from pyslc.application.bot import Bot


@dataclass(frozen=True)
class MessageContext:
    """Snapshot of one inbound message.

    Attributes:
        content: Message text.
        owner: Author of the message. Built fresh for each context.
        server_id: Server the message was posted in.
        bot: The bot that received the message, for replying.
    """

    content: str
    owner: User
    server_id: str
    bot: Bot

    @classmethod
    def from_message(
        cls, message: ChatMessage, server_id: str, bot: Bot
    ) -> MessageContext:
        return cls(
            content=message.content,
            owner=User(message.owner, bot.api, bot.error_listener),
            server_id=str(server_id),
            bot=bot,
        )

    async def send(self, message: str) -> None:
        """Reply in the server this message came from."""
        await self.bot.send(message, self.server_id)


@dataclass(frozen=True)
class CommandContext(MessageContext):
    """Snapshot of one inbound command.

    Attributes:
        command: Command name with the prefix stripped.
        arguments: Argument tokens, possibly empty.
    """

    command: str = ""
    arguments: tuple[str, ...] = ()

    @classmethod
    def from_command(
        cls,
        message: ChatMessage,
        server_id: str,
        bot: Bot,
        command: str,
        arguments: tuple[str, ...] = (),
    ) -> CommandContext:
        return cls(
            content=message.content,
            owner=User(message.owner, bot.api, bot.error_listener),
            server_id=str(server_id),
            bot=bot,
            command=command,
            arguments=tuple(arguments),
        )
