"""One pass over the joined servers looking for a new latest message."""

import logging
from collections.abc import Callable, Iterable

from pyslc.application.services.dispatcher import ErrorReporter
from pyslc.application.services.router import MessageRouter
from pyslc.domain.entities.message import ChatMessage
from pyslc.domain.exceptions import ProtocolError, SLChatError
from pyslc.domain.services.protocols import ChatApi

logger = logging.getLogger(__name__)


class PollCycle:
    """Fetches the latest message of every joined server and routes it.

    With deduplication on, the marker of the last routed message is kept
    per server and a server whose latest marker is unchanged is skipped.
    With it off, the same latest message is routed again on every tick.
    """

    def __init__(
        self,
        api: ChatApi,
        router: MessageRouter,
        joined_servers: Callable[[], Iterable[str]],
        report_error: ErrorReporter,
        deduplicate: bool = True,
    ) -> None:
        """Initialize the cycle.

        Args:
            api: Client used to fetch server messages.
            router: Router receiving each new latest message.
            joined_servers: Returns the servers to poll. Called once per tick.
            report_error: Called with (error, "poll") when a server fails.
            deduplicate: Skip servers whose latest message was already routed.
        """
        self._api = api
        self._router = router
        self._joined_servers = joined_servers
        self._report_error = report_error
        self._deduplicate = deduplicate
        self._last_seen: dict[str, str] = {}

    @property
    def last_seen(self) -> dict[str, str]:
        """Marker of the last routed message, per server."""
        return dict(self._last_seen)

    async def execute(self) -> None:
        """Poll every joined server once.

        A failure on one server is reported and does not stop the others.
        """
        if not self._router.has_listeners:
            logger.debug("No listeners registered; skipping poll")
            return

        for server_id in list(self._joined_servers()):
            try:
                await self._poll_server(server_id)
            except SLChatError as e:
                logger.warning("Failed to poll server %s: %s", server_id, e)
                await self._report_error(e, "poll")
            except Exception as e:
                logger.exception("Unexpected error polling server %s", server_id)
                await self._report_error(e, "poll")

    async def _poll_server(self, server_id: str) -> None:
        data = await self._api.get_server(server_id)
        messages = data.get("messages")
        if not isinstance(messages, list):
            raise ProtocolError(f"Server {server_id} payload has no messages list")
        if not messages:
            return

        latest = ChatMessage.from_json(messages[-1])
        if self._deduplicate:
            if self._last_seen.get(server_id) == latest.marker:
                return
            self._last_seen[server_id] = latest.marker

        await self._router.route(latest, server_id)
