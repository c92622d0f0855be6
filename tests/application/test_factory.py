"""Tests for create_bot."""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from pyslc.application.bot import Bot
from pyslc.application.factory import create_bot
from pyslc.config import BotConfig, Config, TransportMode
from pyslc.domain.exceptions import BotConfigurationError
from pyslc.infrastructure.http import SLChatApiClient
from pyslc.infrastructure.socket import SocketHub


def make_config(
    transport: TransportMode = TransportMode.POLLING, token: str = "tok"
) -> Config:
    return Config(
        bot=BotConfig(prefix="!", token=token, bot_id="42"), transport=transport
    )


class TestCreateBot:
    """Tests for create_bot."""

    async def test_polling_bot(self) -> None:
        async with httpx.AsyncClient() as http_client:
            bot = create_bot(make_config(), http_client=http_client)

            assert isinstance(bot, Bot)
            assert isinstance(bot.api, SLChatApiClient)
            assert bot.transport is TransportMode.POLLING
            assert bot._sockets is None

    async def test_socket_bot_gets_hub(self) -> None:
        factory = MagicMock()

        async with httpx.AsyncClient() as http_client:
            bot = create_bot(
                make_config(TransportMode.SOCKET),
                http_client=http_client,
                socket_factory=factory,
            )

            assert isinstance(bot._sockets, SocketHub)
            assert bot.transport is TransportMode.SOCKET

    async def test_registers_listeners_in_order(self) -> None:
        first = AsyncMock()
        second = AsyncMock()
        on_message = AsyncMock()
        on_error = AsyncMock()
        on_start = AsyncMock()

        async with httpx.AsyncClient() as http_client:
            bot = create_bot(
                make_config(),
                on_start=on_start,
                on_error=on_error,
                command_listeners=[first, second],
                message_listeners=[on_message],
                http_client=http_client,
            )

            assert bot.command_listeners == (first, second)
            assert bot.message_listeners == (on_message,)
            assert bot.start_listener is on_start
            assert bot.error_listener is on_error

    def test_missing_token_rejected(self) -> None:
        with pytest.raises(BotConfigurationError) as exc_info:
            create_bot(make_config(token=""))

        assert str(exc_info.value) == "Token not set."
