"""Tests for User and UserProfile."""

from datetime import datetime
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from pyslc.domain.entities.user import User, UserProfile
from pyslc.domain.exceptions import ProtocolError, TransportError


@pytest.fixture
def user_payload() -> dict[str, Any]:
    """Body of GET /api/user/{id}/."""
    return {
        "username": "pingbot",
        "nickname": "Ping Bot",
        "profile_img": "https://img.example.com/p.png",
        "creation_date": "2024-01-15T12:00:00",
        "servers": [1, "2"],
        "label": {"name": "BOT", "color": "#fff"},
    }


@pytest.fixture
def mock_api(user_payload: dict[str, Any]) -> MagicMock:
    """Create mock ChatApi."""
    api = MagicMock()
    api.get_user = AsyncMock(return_value=user_payload)
    return api


@pytest.fixture
def error_listener() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def user(mock_api: MagicMock, error_listener: AsyncMock) -> User:
    return User(99, mock_api, error_listener)


class TestUserIdentity:
    """Tests for id handling."""

    def test_numeric_id_normalised(self, user: User) -> None:
        assert user.id == "99"

    def test_equality_by_id(self, mock_api: MagicMock) -> None:
        assert User("5", mock_api) == User(5, MagicMock())
        assert User("5", mock_api) != User("6", mock_api)
        assert len({User("5", mock_api), User(5, mock_api)}) == 1


class TestUserAccessors:
    """Tests for the profile accessors."""

    async def test_get_username(self, user: User, mock_api: MagicMock) -> None:
        assert await user.get_username() == "pingbot"
        mock_api.get_user.assert_awaited_once_with("99")

    async def test_get_nickname(self, user: User) -> None:
        assert await user.get_nickname() == "Ping Bot"

    async def test_get_profile_image_url(self, user: User) -> None:
        assert await user.get_profile_image_url() == "https://img.example.com/p.png"

    async def test_get_account_creation_date(self, user: User) -> None:
        assert await user.get_account_creation_date() == datetime(2024, 1, 15, 12, 0)

    async def test_get_joined_server_ids(self, user: User) -> None:
        assert await user.get_joined_server_ids() == ("1", "2")

    async def test_get_label(self, user: User) -> None:
        assert await user.get_label() == {"name": "BOT", "color": "#fff"}

    async def test_is_bot(self, user: User) -> None:
        assert await user.is_bot() is True

    async def test_is_bot_false_for_other_labels(
        self, user: User, user_payload: dict[str, Any]
    ) -> None:
        user_payload["label"] = {"name": "Member"}

        assert await user.is_bot() is False

    async def test_every_call_fetches_fresh(
        self, user: User, mock_api: MagicMock
    ) -> None:
        """Profile data is never cached."""
        await user.get_username()
        await user.get_nickname()
        await user.get_username()

        assert mock_api.get_user.await_count == 3

    async def test_get_profile(self, user: User) -> None:
        profile = await user.get_profile()

        assert profile == UserProfile(
            id="99",
            username="pingbot",
            nickname="Ping Bot",
            profile_img="https://img.example.com/p.png",
            creation_date=datetime(2024, 1, 15, 12, 0),
            servers=("1", "2"),
            label={"name": "BOT", "color": "#fff"},
        )
        assert profile is not None and profile.is_bot


class TestUserErrors:
    """Tests for failure reporting."""

    async def test_transport_error_reported_and_none_returned(
        self, user: User, mock_api: MagicMock, error_listener: AsyncMock
    ) -> None:
        error = TransportError("boom", "get_user")
        mock_api.get_user.side_effect = error

        assert await user.get_nickname() is None
        error_listener.assert_awaited_once_with(error, "get_nickname")

    async def test_missing_field_reported_as_protocol_error(
        self,
        user: User,
        user_payload: dict[str, Any],
        error_listener: AsyncMock,
    ) -> None:
        del user_payload["nickname"]

        assert await user.get_nickname() is None
        reported, operation = error_listener.await_args.args
        assert isinstance(reported, ProtocolError)
        assert operation == "get_nickname"

    async def test_invalid_creation_date(
        self,
        user: User,
        user_payload: dict[str, Any],
        error_listener: AsyncMock,
    ) -> None:
        user_payload["creation_date"] = "yesterday"

        assert await user.get_account_creation_date() is None
        assert isinstance(error_listener.await_args.args[0], ProtocolError)

    async def test_without_error_listener(self, mock_api: MagicMock) -> None:
        """No listener: the failure is only logged."""
        mock_api.get_user.side_effect = TransportError("boom")
        user = User("1", mock_api)

        assert await user.get_username() is None

    async def test_sync_error_listener(self, mock_api: MagicMock) -> None:
        """Plain functions work as error listeners too."""
        calls: list[str] = []
        mock_api.get_user.side_effect = TransportError("boom")
        user = User("1", mock_api, lambda e, op: calls.append(op))

        await user.get_username()

        assert calls == ["get_username"]

    async def test_failing_error_listener_is_contained(
        self, mock_api: MagicMock
    ) -> None:
        mock_api.get_user.side_effect = TransportError("boom")
        user = User("1", mock_api, AsyncMock(side_effect=RuntimeError("listener")))

        assert await user.get_username() is None
