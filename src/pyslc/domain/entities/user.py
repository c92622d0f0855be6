"""User entity."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, TypeVar

from pyslc.domain.exceptions import ProtocolError, SLChatError
from pyslc.domain.services.protocols import ChatApi, ErrorListener, invoke_listener

logger = logging.getLogger(__name__)

_T = TypeVar("_T")

BOT_LABEL = "BOT"


def _require(data: dict[str, Any], key: str) -> Any:
    if key not in data or data[key] is None:
        raise ProtocolError(f"User payload is missing field {key!r}")
    return data[key]


def _parse_creation_date(value: Any) -> datetime:
    try:
        return datetime.fromisoformat(str(value))
    except ValueError as e:
        raise ProtocolError(f"Invalid creation_date {value!r}") from e


def parse_server_ids(value: Any) -> tuple[str, ...]:
    """Normalise a `servers` list to string ids.

    Raises:
        ProtocolError: The value is not a list.
    """
    if not isinstance(value, list):
        raise ProtocolError("User field 'servers' is not a list")
    return tuple(str(server_id) for server_id in value)


def _parse_label(value: Any) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise ProtocolError("User field 'label' is not an object")
    return value


@dataclass(frozen=True)
class UserProfile:
    """Snapshot of a user's profile as served by the user endpoint.

    Attributes:
        id: User id.
        username: Login name.
        nickname: Display name.
        profile_img: Avatar URL.
        creation_date: Account creation time.
        servers: Ids of the servers the user has joined.
        label: Label object; bots carry the name "BOT".
    """

    id: str
    username: str
    nickname: str
    profile_img: str
    creation_date: datetime | None = None
    servers: tuple[str, ...] = ()
    label: dict[str, Any] = field(default_factory=dict)

    @property
    def is_bot(self) -> bool:
        return str(self.label.get("name", "")).upper() == BOT_LABEL

    @classmethod
    def from_json(cls, user_id: str, data: dict[str, Any]) -> "UserProfile":
        """Build a profile from the user endpoint's JSON object.

        Raises:
            ProtocolError: A required field is missing or malformed.
        """
        creation_date = data.get("creation_date")
        return cls(
            id=user_id,
            username=str(_require(data, "username")),
            nickname=str(data.get("nickname") or ""),
            profile_img=str(data.get("profile_img") or ""),
            creation_date=(
                _parse_creation_date(creation_date) if creation_date else None
            ),
            servers=parse_server_ids(data.get("servers") or []),
            label=_parse_label(data.get("label") or {}),
        )


class User:
    """Any account on the platform, bot or human.

    Profile fields are never cached: every accessor performs one fresh
    request. Accessors never raise for remote failures; they report the
    error to the error listener (tagged with the accessor name), log it,
    and return None.
    """

    def __init__(
        self,
        user_id: str | int,
        api: ChatApi,
        error_listener: ErrorListener | None = None,
    ) -> None:
        """Initialize the user.

        Args:
            user_id: Account id. Numeric ids are converted to strings.
            api: Client used to fetch profile data.
            error_listener: Optional callback receiving (error, operation).
        """
        self._id = str(user_id)
        self._api = api
        self.error_listener = error_listener

    @property
    def id(self) -> str:
        return self._id

    @property
    def api(self) -> ChatApi:
        return self._api

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, User):
            return NotImplemented
        return self._id == other._id

    def __hash__(self) -> int:
        return hash(self._id)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self._id!r})"

    async def get_profile(self) -> UserProfile | None:
        return await self._fetch(
            "get_profile", lambda data: UserProfile.from_json(self._id, data)
        )

    async def get_username(self) -> str | None:
        return await self._fetch(
            "get_username", lambda data: str(_require(data, "username"))
        )

    async def get_nickname(self) -> str | None:
        return await self._fetch(
            "get_nickname", lambda data: str(_require(data, "nickname"))
        )

    async def get_profile_image_url(self) -> str | None:
        return await self._fetch(
            "get_profile_image_url", lambda data: str(_require(data, "profile_img"))
        )

    async def get_account_creation_date(self) -> datetime | None:
        return await self._fetch(
            "get_account_creation_date",
            lambda data: _parse_creation_date(_require(data, "creation_date")),
        )

    async def get_joined_server_ids(self) -> tuple[str, ...] | None:
        return await self._fetch(
            "get_joined_server_ids",
            lambda data: parse_server_ids(_require(data, "servers")),
        )

    async def get_label(self) -> dict[str, Any] | None:
        return await self._fetch(
            "get_label", lambda data: _parse_label(_require(data, "label"))
        )

    async def is_bot(self) -> bool | None:
        """Check whether the account carries the bot label.

        Returns:
            True for bot accounts, False otherwise, None if the fetch failed.
        """
        label = await self.get_label()
        if label is None:
            return None
        return str(label.get("name", "")).upper() == BOT_LABEL

    async def _fetch(
        self, operation: str, extract: Callable[[dict[str, Any]], _T]
    ) -> _T | None:
        try:
            data = await self._api.get_user(self._id)
            return extract(data)
        except SLChatError as e:
            logger.warning("%s failed for user %s: %s", operation, self._id, e)
            await self.report_error(e, operation)
            return None

    async def report_error(self, error: Exception, operation: str) -> None:
        """Hand an error to the error listener, if one is set.

        Exceptions raised by the listener itself are logged and dropped.
        """
        if self.error_listener is None:
            return
        try:
            await invoke_listener(self.error_listener, error, operation)
        except Exception:
            logger.exception("Error listener failed while handling '%s'", operation)
