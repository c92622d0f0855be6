"""Fan-out of contexts to registered listeners."""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from pyslc.domain.entities.context import CommandContext, MessageContext
from pyslc.domain.services.protocols import (
    CommandListener,
    MessageListener,
    invoke_listener,
)

logger = logging.getLogger(__name__)

# Receives (error, operation); never raises
ErrorReporter = Callable[[Exception, str], Awaitable[None]]


def _listener_name(listener: Callable[..., Any]) -> str:
    return getattr(listener, "__name__", str(listener))


class ListenerDispatcher:
    """Holds command and message listeners and calls them in order.

    Every listener gets its own context, built by the factory passed to
    the dispatch call. A failing listener is reported and logged; the
    remaining listeners still run. The listener lists are copied before
    each fan-out, so registrations made while dispatching apply from the
    next message on.
    """

    def __init__(self, report_error: ErrorReporter) -> None:
        """Initialize the dispatcher.

        Args:
            report_error: Called with (error, operation) when a listener fails.
        """
        self._report_error = report_error
        self._command_listeners: list[CommandListener] = []
        self._message_listeners: list[MessageListener] = []

    @property
    def command_listeners(self) -> tuple[CommandListener, ...]:
        return tuple(self._command_listeners)

    @property
    def message_listeners(self) -> tuple[MessageListener, ...]:
        return tuple(self._message_listeners)

    @property
    def has_listeners(self) -> bool:
        return bool(self._command_listeners or self._message_listeners)

    def add_command_listener(self, listener: CommandListener) -> None:
        self._command_listeners.append(listener)
        logger.debug("Registered command listener: %s", _listener_name(listener))

    def add_message_listener(self, listener: MessageListener) -> None:
        self._message_listeners.append(listener)
        logger.debug("Registered message listener: %s", _listener_name(listener))

    def remove_command_listener(self, listener: CommandListener) -> bool:
        """Unregister a command listener.

        Returns:
            True if the listener was registered.
        """
        if listener in self._command_listeners:
            self._command_listeners.remove(listener)
            return True
        return False

    def remove_message_listener(self, listener: MessageListener) -> bool:
        """Unregister a message listener.

        Returns:
            True if the listener was registered.
        """
        if listener in self._message_listeners:
            self._message_listeners.remove(listener)
            return True
        return False

    async def dispatch_command(self, make_context: Callable[[], CommandContext]) -> None:
        """Call every command listener with a freshly built context."""
        for listener in list(self._command_listeners):
            await self._call(listener, make_context(), "on_command")

    async def dispatch_message(self, make_context: Callable[[], MessageContext]) -> None:
        """Call every message listener with a freshly built context."""
        for listener in list(self._message_listeners):
            await self._call(listener, make_context(), "on_message")

    async def _call(
        self, listener: Callable[..., Any], context: MessageContext, operation: str
    ) -> None:
        try:
            await invoke_listener(listener, context)
        except Exception as e:
            logger.exception(
                "Error in listener %s for server %s",
                _listener_name(listener),
                context.server_id,
            )
            await self._report_error(e, operation)
