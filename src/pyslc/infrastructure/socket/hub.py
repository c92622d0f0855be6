"""Per-server Socket.IO channels."""

import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any
from urllib.parse import urlencode

import socketio
from socketio.exceptions import ConnectionError as SocketConnectionError
from socketio.exceptions import SocketIOError

from pyslc.config import ApiConfig, CredentialMode
from pyslc.domain.entities.message import ChatMessage
from pyslc.domain.exceptions import ProtocolError, TransportError

logger = logging.getLogger(__name__)

PROMPT_EVENT = "prompt"
MESSAGE_EVENT = "message"

# Receives the raw payload of a "prompt" event
PromptHandler = Callable[[Any], Awaitable[None]]


def decode_prompt(data: Any) -> tuple[str, ChatMessage]:
    """Decode a "prompt" event payload.

    Args:
        data: Either the decoded object or its JSON text, shaped as
            `{"message": {...}, "server_id": ...}`.

    Returns:
        Tuple of (server_id, message).

    Raises:
        ProtocolError: The payload is not valid JSON or lacks fields.
    """
    if isinstance(data, (str, bytes)):
        try:
            data = json.loads(data)
        except json.JSONDecodeError as e:
            raise ProtocolError("Prompt payload is not valid JSON", "prompt") from e
    if not isinstance(data, dict):
        raise ProtocolError("Prompt payload is not an object", "prompt")
    if "message" not in data or "server_id" not in data:
        raise ProtocolError("Prompt payload lacks message or server_id", "prompt")
    return str(data["server_id"]), ChatMessage.from_json(data["message"])


class SocketHub:
    """Keeps one Socket.IO client per joined server.

    Each client reconnects on its own after connection loss; the hub only
    opens, emits on and closes them.
    """

    def __init__(
        self,
        config: ApiConfig,
        token: str,
        bot_id: str,
        client_factory: Callable[[], socketio.AsyncClient] = socketio.AsyncClient,
    ) -> None:
        """Initialize the hub.

        Args:
            config: API settings; base_url is the socket host too.
            token: Bot token, included in outbound payloads.
            bot_id: Bot account id, sent as `op`.
            client_factory: Creates Socket.IO clients.
        """
        self._config = config
        self._token = token
        self._bot_id = str(bot_id)
        self._client_factory = client_factory
        self._sockets: dict[str, socketio.AsyncClient] = {}

    @property
    def server_ids(self) -> list[str]:
        return list(self._sockets)

    def is_open(self, server_id: str) -> bool:
        return str(server_id) in self._sockets

    def _url(self, server_id: str) -> str:
        return f"{self._config.base_url}?{urlencode({'server_id': server_id})}"

    def _headers(self) -> dict[str, str]:
        if self._config.credential_mode is CredentialMode.COOKIE:
            return {"Cookie": f"op={self._bot_id}; token={self._token}"}
        return {}

    async def connect(self, server_id: str, on_prompt: PromptHandler) -> None:
        """Open the channel for a server. No-op if it is already open.

        Args:
            server_id: Server to subscribe to.
            on_prompt: Coroutine called with each "prompt" payload.

        Raises:
            TransportError: The connection could not be established.
        """
        server_id = str(server_id)
        if server_id in self._sockets:
            return

        sio = self._client_factory()
        sio.on(PROMPT_EVENT, on_prompt)

        async def on_disconnect(*args: Any) -> None:
            logger.info("Socket for server %s disconnected", server_id)

        sio.on("disconnect", on_disconnect)

        try:
            await sio.connect(self._url(server_id), headers=self._headers())
        except SocketConnectionError as e:
            raise TransportError(
                f"Failed to open socket for server {server_id}: {e}", "connect"
            ) from e

        self._sockets[server_id] = sio
        logger.info("Socket for server %s connected", server_id)

    async def emit_message(self, server_id: str, content: str) -> None:
        """Emit a chat message on a server's channel.

        Raises:
            TransportError: No channel is open for the server or the emit failed.
        """
        server_id = str(server_id)
        sio = self._sockets.get(server_id)
        if sio is None:
            raise TransportError(f"No socket open for server {server_id}", "send")

        payload = {
            "content": content,
            "server_id": server_id,
            "token": self._token,
            "op": self._bot_id,
        }
        try:
            await sio.emit(MESSAGE_EVENT, payload)
        except SocketIOError as e:
            raise TransportError(
                f"Failed to emit on server {server_id}: {e}", "send"
            ) from e

    async def close(self) -> None:
        """Disconnect every channel."""
        sockets = list(self._sockets.items())
        self._sockets.clear()
        for server_id, sio in sockets:
            try:
                await sio.disconnect()
            except Exception:
                logger.exception("Error closing socket for server %s", server_id)
