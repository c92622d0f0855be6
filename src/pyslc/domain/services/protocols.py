"""Domain service protocols and listener signatures."""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, Protocol, Union

if TYPE_CHECKING:
    from pyslc.domain.entities.context import CommandContext, MessageContext

# Listeners may be plain functions or coroutine functions
StartListener = Callable[[], Union[Awaitable[None], None]]
CommandListener = Callable[["CommandContext"], Union[Awaitable[None], None]]
MessageListener = Callable[["MessageContext"], Union[Awaitable[None], None]]
ErrorListener = Callable[[Exception, str], Union[Awaitable[None], None]]


async def invoke_listener(listener: Callable[..., Any], *args: Any) -> None:
    """Call a listener and await its result if it returned an awaitable."""
    result = listener(*args)
    if inspect.isawaitable(result):
        await result


class ChatApi(Protocol):
    """Remote chat API abstraction.

    Implementations raise TransportError on I/O failure or an error status,
    and ProtocolError on malformed responses.
    """

    async def get_user(self, user_id: str) -> dict[str, Any]:
        """Fetch a user's profile object."""
        ...

    async def get_server(self, server_id: str) -> dict[str, Any]:
        """Fetch a server object, including its `messages` list."""
        ...

    async def send_message(self, server_id: str, message: str) -> None:
        """Post a message to a server."""
        ...

    async def join_server(self, server_id: str) -> None:
        """Add the bot to a server."""
        ...

    async def change_profile(self, change_key: str, change_value: str) -> None:
        """Change one of the bot's profile properties."""
        ...

    async def close(self) -> None:
        """Release network resources."""
        ...
