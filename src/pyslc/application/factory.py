"""Build a Bot from configuration."""

from collections.abc import Callable, Iterable

import httpx
import socketio

from pyslc.application.bot import Bot, validate_bot_config
from pyslc.config import Config, TransportMode
from pyslc.domain.services.protocols import (
    CommandListener,
    ErrorListener,
    MessageListener,
    StartListener,
)
from pyslc.infrastructure.http import SLChatApiClient
from pyslc.infrastructure.socket import SocketHub


def create_bot(
    config: Config,
    *,
    on_start: StartListener | None = None,
    on_error: ErrorListener | None = None,
    command_listeners: Iterable[CommandListener] = (),
    message_listeners: Iterable[MessageListener] = (),
    http_client: httpx.AsyncClient | None = None,
    socket_factory: Callable[[], socketio.AsyncClient] | None = None,
) -> Bot:
    """Create a bot wired to the real HTTP and socket clients.

    Args:
        config: Application configuration.
        on_start: Called once after the server list is fetched.
        on_error: Called with (error, operation) on every failure.
        command_listeners: Command listeners, in dispatch order.
        message_listeners: Message listeners, in dispatch order.
        http_client: Optional httpx client to send requests through. The
            caller keeps ownership of it.
        socket_factory: Optional factory for Socket.IO clients.

    Returns:
        The configured Bot, not yet started.

    Raises:
        BotConfigurationError: Prefix, token or bot id is empty.
    """
    bot_config = config.bot
    validate_bot_config(bot_config.prefix, bot_config.token, str(bot_config.bot_id))

    api = SLChatApiClient(
        config.api, bot_config.token, bot_config.bot_id, client=http_client
    )

    sockets: SocketHub | None = None
    if config.transport is TransportMode.SOCKET:
        sockets = SocketHub(
            config.api,
            bot_config.token,
            bot_config.bot_id,
            client_factory=socket_factory or socketio.AsyncClient,
        )

    bot = Bot(
        config,
        api,
        start_listener=on_start,
        error_listener=on_error,
        sockets=sockets,
    )
    for listener in command_listeners:
        bot.add_command_listener(listener)
    for listener in message_listeners:
        bot.add_message_listener(listener)
    return bot
