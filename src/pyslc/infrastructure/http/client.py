"""SLChat REST API client."""

import logging
from typing import Any

import httpx

from pyslc.config import ApiConfig, CredentialMode
from pyslc.domain.exceptions import ProtocolError, TransportError

logger = logging.getLogger(__name__)

_FORM_HEADERS = {"Content-Type": "application/x-www-form-urlencoded"}


class SLChatApiClient:
    """HTTP implementation of the ChatApi protocol.

    Reads go to `/api/user/{id}/` and `/api/server/{id}/`; writes are
    form-encoded POSTs to `/api/send`, `/api/new_server` and `/api/change`.
    Depending on the credential mode the token travels as a form field or
    as `token`/`op` cookies.
    """

    def __init__(
        self,
        config: ApiConfig,
        token: str,
        bot_id: str,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: API settings.
            token: Bot token.
            bot_id: Bot account id, sent as the `op` credential.
            client: Optional preconfigured httpx client. The caller keeps
                ownership of a client passed in here.
        """
        self._config = config
        self._token = token
        self._bot_id = str(bot_id)
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=config.timeout_seconds)

    @property
    def credential_mode(self) -> CredentialMode:
        return self._config.credential_mode

    def _headers(self) -> dict[str, str]:
        if self._config.credential_mode is CredentialMode.COOKIE:
            return {"Cookie": f"token={self._token}; op={self._bot_id}"}
        return {}

    def _with_token(self, form: dict[str, str]) -> dict[str, str]:
        if self._config.credential_mode is CredentialMode.FORM:
            return {**form, "token": self._token}
        return form

    async def _request(
        self,
        method: str,
        path: str,
        operation: str,
        data: dict[str, str] | None = None,
    ) -> httpx.Response:
        if self._client.is_closed:
            raise TransportError(f"{method} {path} failed: client is closed", operation)
        url = f"{self._config.base_url}{path}"
        headers = self._headers()
        if data is not None:
            headers.update(_FORM_HEADERS)

        try:
            response = await self._client.request(
                method, url, data=data, headers=headers or None
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise TransportError(
                f"{method} {path} failed: ({status}) {e.response.reason_phrase}",
                operation,
                status_code=status,
            ) from e
        except httpx.TimeoutException as e:
            raise TransportError(f"{method} {path} timed out", operation) from e
        except httpx.RequestError as e:
            raise TransportError(f"{method} {path} failed: {e}", operation) from e

        logger.debug("%s %s -> %d", method, path, response.status_code)
        return response

    async def _get_json(self, path: str, operation: str) -> dict[str, Any]:
        response = await self._request("GET", path, operation)
        try:
            payload = response.json()
        except ValueError as e:
            # JSONDecodeError and UnicodeDecodeError
            raise ProtocolError(f"GET {path} returned invalid JSON", operation) from e
        if not isinstance(payload, dict):
            raise ProtocolError(f"GET {path} did not return a JSON object", operation)
        return payload

    async def get_user(self, user_id: str) -> dict[str, Any]:
        """Fetch a user's profile object.

        Args:
            user_id: Account id.

        Returns:
            Decoded JSON object.

        Raises:
            TransportError: The request failed or returned an error status.
            ProtocolError: The body is not a JSON object.
        """
        return await self._get_json(f"/api/user/{user_id}/", "get_user")

    async def get_server(self, server_id: str) -> dict[str, Any]:
        """Fetch a server object with its `messages` list (oldest first).

        Raises:
            TransportError: The request failed or returned an error status.
            ProtocolError: The body is not a JSON object.
        """
        return await self._get_json(f"/api/server/{server_id}/", "get_server")

    async def send_message(self, server_id: str, message: str) -> None:
        """Post a message to a server."""
        await self._request(
            "POST",
            "/api/send",
            "send",
            data=self._with_token({"message": message, "server_id": str(server_id)}),
        )

    async def join_server(self, server_id: str) -> None:
        """Add the bot to a server."""
        await self._request(
            "POST",
            "/api/new_server",
            "join",
            data=self._with_token({"server_id": str(server_id)}),
        )

    async def change_profile(self, change_key: str, change_value: str) -> None:
        """Change a profile property of the bot.

        Args:
            change_key: Remote field key, `profile_img` or `nickname`.
            change_value: New value.
        """
        form = {"change_key": change_key, "change_value": change_value}
        if self._config.credential_mode is CredentialMode.COOKIE:
            # The cookie-era endpoint also expects the credentials in the body
            form.update({"token": self._token, "op": self._bot_id})
        else:
            form = self._with_token(form)
        await self._request("POST", "/api/change", "change", data=form)

    async def close(self) -> None:
        """Close the underlying httpx client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()
