"""Routing of inbound messages to command or message listeners."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pyslc.application.services.dispatcher import ListenerDispatcher
from pyslc.config import CommandConfig
from pyslc.domain.entities.context import CommandContext, MessageContext
from pyslc.domain.entities.message import ChatMessage
from pyslc.domain.services.command_parser import parse_command

if TYPE_CHECKING:
    from pyslc.application.bot import Bot

logger = logging.getLogger(__name__)


class MessageRouter:
    """Decides who hears about an inbound message.

    Both transports feed messages through the same router:
    - messages from the bot itself are dropped, or handed to message
      listeners only when `ignore_own_messages` is off;
    - prefixed messages go to command listeners;
    - everything else goes to message listeners.
    """

    def __init__(
        self, bot: Bot, dispatcher: ListenerDispatcher, config: CommandConfig
    ) -> None:
        self._bot = bot
        self._dispatcher = dispatcher
        self._config = config

    @property
    def has_listeners(self) -> bool:
        return self._dispatcher.has_listeners

    async def route(self, message: ChatMessage, server_id: str) -> None:
        """Dispatch a message received in a server.

        Args:
            message: The inbound message.
            server_id: Server it was posted in.
        """
        own = message.owner == self._bot.id
        if own and self._config.ignore_own_messages:
            logger.debug("Ignoring own message in server %s", server_id)
            return

        parsed = None
        if not own:
            parsed = parse_command(
                message.content,
                self._bot.prefix,
                drop_last_argument=self._config.drop_last_argument,
            )

        if parsed is not None:
            logger.debug(
                "Command '%s' from %s in server %s",
                parsed.command,
                message.owner,
                server_id,
            )
            await self._dispatcher.dispatch_command(
                lambda: CommandContext.from_command(
                    message,
                    server_id,
                    self._bot,
                    parsed.command,
                    parsed.arguments,
                )
            )
        else:
            await self._dispatcher.dispatch_message(
                lambda: MessageContext.from_message(message, server_id, self._bot)
            )
