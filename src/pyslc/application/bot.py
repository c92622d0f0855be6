"""The bot account and its run loop."""

import asyncio
import logging
from enum import Enum
from typing import Any

from pyslc.application.services import (
    ListenerDispatcher,
    MessagePoller,
    MessageRouter,
    PollCycle,
)
from pyslc.config import Config, TransportMode
from pyslc.domain.entities.user import User, parse_server_ids
from pyslc.domain.exceptions import (
    AlreadyJoinedError,
    BotConfigurationError,
    NotJoinedError,
    ProtocolError,
    SLChatError,
)
from pyslc.domain.services.protocols import (
    ChatApi,
    CommandListener,
    ErrorListener,
    MessageListener,
    StartListener,
    invoke_listener,
)
from pyslc.infrastructure.socket import SocketHub, decode_prompt

logger = logging.getLogger(__name__)


class ChangeKey(Enum):
    """Bot profile properties that can be changed, mapped to remote keys."""

    PROFILE_IMAGE = "profile_img"
    NICKNAME = "nickname"


def validate_bot_config(prefix: str, token: str, bot_id: str) -> None:
    """Check that the credentials needed to run are present.

    Raises:
        BotConfigurationError: Prefix, token or bot id is empty.
    """
    if not prefix:
        raise BotConfigurationError("Prefix not set.", "run")
    if not token:
        raise BotConfigurationError("Token not set.", "run")
    if not bot_id or bot_id == "0":
        raise BotConfigurationError("Bot user ID not set.", "run")


class Bot(User):
    """A bot account that listens to its servers and talks back.

    Messages arrive either by polling each joined server at a fixed rate
    or by one Socket.IO channel per server, depending on the configured
    transport. Inbound messages are routed to command or message
    listeners; listeners reply through send().

    Remote failures never propagate out of the bot's operations. They are
    reported to the error listener with the name of the failing operation
    and logged. Only configuration errors and misuse raise.
    """

    def __init__(
        self,
        config: Config,
        api: ChatApi,
        *,
        start_listener: StartListener | None = None,
        error_listener: ErrorListener | None = None,
        sockets: SocketHub | None = None,
    ) -> None:
        """Initialize the bot.

        Args:
            config: Application configuration.
            api: Remote API client.
            start_listener: Called once, after the server list is fetched.
            error_listener: Called with (error, operation) on every failure.
            sockets: Socket hub; required for the socket transport.

        Raises:
            BotConfigurationError: Socket transport without a socket hub.
        """
        super().__init__(config.bot.bot_id, api, error_listener)
        if config.transport is TransportMode.SOCKET and sockets is None:
            raise BotConfigurationError("Socket transport requires a SocketHub.")

        self.prefix = config.bot.prefix
        self.start_listener = start_listener
        self._token = config.bot.token
        self._config = config
        self._sockets = sockets
        self._joined: set[str] = set()
        self._membership_lock = asyncio.Lock()

        self._dispatcher = ListenerDispatcher(self.report_error)
        self._router = MessageRouter(self, self._dispatcher, config.commands)
        self._poll_cycle = PollCycle(
            api=api,
            router=self._router,
            joined_servers=lambda: sorted(self._joined),
            report_error=self.report_error,
            deduplicate=config.polling.deduplicate,
        )
        self._poller = MessagePoller(self._poll_cycle, config.polling)
        self._poller_task: asyncio.Task[None] | None = None
        self._stopped = asyncio.Event()
        self._running = False

    @property
    def token(self) -> str:
        return self._token

    @property
    def transport(self) -> TransportMode:
        return self._config.transport

    @property
    def _uses_sockets(self) -> bool:
        return self._config.transport is TransportMode.SOCKET

    @property
    def joined_servers(self) -> frozenset[str]:
        return frozenset(self._joined)

    @property
    def last_seen(self) -> dict[str, str]:
        """Marker of the last polled message, per server."""
        return self._poll_cycle.last_seen

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def command_listeners(self) -> tuple[CommandListener, ...]:
        return self._dispatcher.command_listeners

    @property
    def message_listeners(self) -> tuple[MessageListener, ...]:
        return self._dispatcher.message_listeners

    def add_command_listener(self, listener: CommandListener) -> None:
        self._dispatcher.add_command_listener(listener)

    def add_message_listener(self, listener: MessageListener) -> None:
        self._dispatcher.add_message_listener(listener)

    def remove_command_listener(self, listener: CommandListener) -> bool:
        return self._dispatcher.remove_command_listener(listener)

    def remove_message_listener(self, listener: MessageListener) -> bool:
        return self._dispatcher.remove_message_listener(listener)

    def validate(self) -> None:
        """Check prefix, token and id.

        Raises:
            BotConfigurationError: One of them is empty.
        """
        validate_bot_config(self.prefix, self._token, self.id)

    async def start(self) -> bool:
        """Fetch the joined servers and begin receiving messages.

        Returns once polling is scheduled or the sockets are open.

        Returns:
            True if the bot started, False if fetching the server list
            failed (the failure is reported with operation "run").

        Raises:
            BotConfigurationError: Prefix, token or bot id is empty.
        """
        self.validate()
        if self._running:
            logger.warning("Bot.start() called while already running; ignoring.")
            return True

        try:
            data = await self.api.get_user(self.id)
            if "servers" not in data:
                raise ProtocolError("User payload is missing field 'servers'", "run")
            servers = parse_server_ids(data["servers"])
        except SLChatError as e:
            logger.error("Failed to start bot: %s", e)
            await self.report_error(e, "run")
            return False

        async with self._membership_lock:
            self._joined.update(servers)
        logger.info("Bot %s is in servers: %s", self.id, sorted(self._joined))

        if self.start_listener is not None:
            try:
                await invoke_listener(self.start_listener)
            except Exception as e:
                logger.exception("Error in start listener")
                await self.report_error(e, "on_start")

        self._stopped.clear()
        self._running = True

        if self._config.transport is TransportMode.POLLING:
            self._poller_task = self._poller.schedule()
        else:
            for server_id in sorted(self._joined):
                await self._open_socket(server_id)
        return True

    async def run(self) -> None:
        """Start the bot and wait until stop() is called.

        Returns early, without waiting, if startup failed.

        Raises:
            BotConfigurationError: Prefix, token or bot id is empty.
        """
        if not await self.start():
            return
        await self._stopped.wait()

    async def stop(self) -> None:
        """Stop polling, close every socket and release the HTTP client."""
        logger.info("Stopping bot %s", self.id)
        await self._poller.stop()
        if self._poller_task is not None:
            await self._poller_task
            self._poller_task = None
        if self._sockets is not None:
            await self._sockets.close()
        await self.api.close()
        self._running = False
        self._stopped.set()

    async def send(self, message: str, server_id: str | int) -> None:
        """Send a message to a joined server.

        Sending to a server the bot has not joined performs no I/O and
        reports a NotJoinedError.
        """
        server_id = str(server_id)
        if server_id not in self._joined:
            error = NotJoinedError(server_id, "send")
            logger.warning("%s", error)
            await self.report_error(error, "send")
            return

        try:
            if self._sockets is not None and self._uses_sockets:
                await self._sockets.emit_message(server_id, message)
            else:
                await self.api.send_message(server_id, message)
        except SLChatError as e:
            logger.warning("Failed to send message to server %s: %s", server_id, e)
            await self.report_error(e, "send")

    async def join(self, server_id: str | int) -> None:
        """Join a server.

        Joining a server the bot is already in performs no I/O and reports
        an AlreadyJoinedError. With the socket transport the server's
        channel is opened after a successful join.
        """
        server_id = str(server_id)
        async with self._membership_lock:
            if server_id in self._joined:
                error = AlreadyJoinedError(server_id, "join")
                logger.warning("%s", error)
                await self.report_error(error, "join")
                return
            try:
                await self.api.join_server(server_id)
            except SLChatError as e:
                logger.warning("Failed to join server %s: %s", server_id, e)
                await self.report_error(e, "join")
                return
            self._joined.add(server_id)

        logger.info("Joined server %s; current servers: %s", server_id, sorted(self._joined))
        if self._uses_sockets:
            await self._open_socket(server_id)

    async def change(self, key: ChangeKey, value: str) -> None:
        """Change a profile property of the bot.

        Raises:
            TypeError: key is not a ChangeKey.
        """
        if not isinstance(key, ChangeKey):
            raise TypeError(f"Invalid change key: {key!r}")
        try:
            await self.api.change_profile(key.value, value)
        except SLChatError as e:
            logger.warning("Failed to change %s into %s: %s", key.name, value, e)
            await self.report_error(e, "change")
            return
        logger.info("Changed %s into %s", key.name, value)

    async def _open_socket(self, server_id: str) -> None:
        if self._sockets is None:
            return
        try:
            await self._sockets.connect(server_id, self._on_prompt)
        except SLChatError as e:
            logger.warning("Failed to open socket for server %s: %s", server_id, e)
            await self.report_error(e, "connect")

    async def _on_prompt(self, data: Any) -> None:
        try:
            server_id, message = decode_prompt(data)
        except ProtocolError as e:
            logger.warning("Dropping malformed prompt: %s", e)
            await self.report_error(e, "prompt")
            return
        await self._router.route(message, server_id)

