"""Domain exceptions."""

from enum import Enum


class ErrorKind(Enum):
    """Broad failure category, so callers need not match on message text."""

    CONFIGURATION = "configuration"
    TRANSPORT = "transport"
    PROTOCOL = "protocol"
    DOMAIN = "domain"


class SLChatError(Exception):
    """Base class for errors raised or reported by the SDK.

    Attributes:
        kind: Failure category.
        operation: Name of the operation that failed, if known.
    """

    kind: ErrorKind = ErrorKind.DOMAIN

    def __init__(self, message: str, operation: str | None = None) -> None:
        self.operation = operation
        super().__init__(message)


class BotConfigurationError(SLChatError):
    """Prefix, token or bot id is missing. Fatal at startup."""

    kind = ErrorKind.CONFIGURATION


class TransportError(SLChatError):
    """HTTP or socket I/O failed, or the server answered with an error status."""

    kind = ErrorKind.TRANSPORT

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        status_code: int | None = None,
    ) -> None:
        self.status_code = status_code
        super().__init__(message, operation)


class ProtocolError(SLChatError):
    """The server answered with malformed JSON or a payload missing fields."""

    kind = ErrorKind.PROTOCOL


class NotJoinedError(SLChatError):
    """The bot is not a member of the target server."""

    def __init__(self, server_id: str, operation: str | None = None) -> None:
        self.server_id = server_id
        super().__init__(f"Bot is not in server {server_id}", operation)


class AlreadyJoinedError(SLChatError):
    """The bot is already a member of the server it tried to join."""

    def __init__(self, server_id: str, operation: str | None = None) -> None:
        self.server_id = server_id
        super().__init__(f"Bot is already in server {server_id}", operation)
