"""Chat message entity."""

from dataclasses import dataclass
from typing import Any

from pyslc.domain.exceptions import ProtocolError


@dataclass(frozen=True)
class ChatMessage:
    """A message as returned by the server endpoint or pushed over a socket.

    Attributes:
        owner: Id of the user who posted the message.
        content: Message text.
        date: Server-side timestamp string. Empty if the payload had none.
    """

    owner: str
    content: str
    date: str = ""

    @property
    def marker(self) -> str:
        """Value identifying this message as the latest one of its server."""
        if self.date:
            return self.date
        return f"{self.owner}:{self.content}"

    @classmethod
    def from_json(cls, data: Any) -> "ChatMessage":
        """Build a message from its JSON object.

        Args:
            data: Decoded JSON object with `owner`, `content` and `date`.

        Returns:
            ChatMessage entity.

        Raises:
            ProtocolError: The object is not a mapping or lacks owner/content.
        """
        if not isinstance(data, dict):
            raise ProtocolError(f"Expected message object, got {type(data).__name__}")
        try:
            owner = data["owner"]
            content = data["content"]
        except KeyError as e:
            raise ProtocolError(f"Message is missing field {e.args[0]!r}") from e
        date = data.get("date")
        return cls(
            owner=str(owner),
            content=str(content),
            date="" if date is None else str(date),
        )
