"""
Auth Client - talks to the auth API over HTTP.
"""

import logging
from typing import Any, Dict, Optional, Tuple

import httpx

from ..models import LoginResponse, UserIdentity, VerifyResponse

logger = logging.getLogger(__name__)

TIMEOUT_MESSAGE = "Request timeout. Please check your connection."
CONNECTION_MESSAGE = "Connection error. Please try again."


class AuthClientError(Exception):
    """Base class for auth client failures; ``str(e)`` is shown to the user."""


class AuthRejectedError(AuthClientError):
    """The auth API answered with an error."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class AuthConnectionError(AuthClientError):
    """The auth API could not be reached."""


class AuthTimeoutError(AuthConnectionError):
    """The auth API did not answer in time; the request was abandoned."""


class AuthClient:
    """
    Thin async client for the ``/auth?action=...`` endpoint.

    Each call opens its own ``httpx.AsyncClient``; ``transport`` lets tests
    route requests to an in-process app or a mock.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 15.0,
        path: str = "/auth",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.path = path
        self.transport = transport

    async def _request(
        self,
        method: str,
        action: str,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> Tuple[int, Dict[str, Any]]:
        query = {"action": action, **(params or {})}
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, timeout=self.timeout, transport=self.transport
            ) as client:
                resp = await client.request(method, self.path, params=query, json=json)
        except httpx.TimeoutException as e:
            logger.warning(f"Auth request timed out: action={action}")
            raise AuthTimeoutError(TIMEOUT_MESSAGE) from e
        except httpx.HTTPError as e:
            logger.warning(f"Auth request failed: action={action}: {e!r}")
            raise AuthConnectionError(CONNECTION_MESSAGE) from e

        try:
            data = resp.json()
        except ValueError:
            data = None
        if not isinstance(data, dict):
            data = {}
        return resp.status_code, data

    async def login(self, username: str, password: str) -> LoginResponse:
        status_code, data = await self._request(
            "POST", "login", json={"username": username, "password": password}
        )
        if data.get("success"):
            return LoginResponse.model_validate(data)
        raise AuthRejectedError(data.get("error") or "Login failed", status_code)

    async def register(self, username: str, email: str, password: str) -> str:
        """Returns the server's confirmation message."""
        status_code, data = await self._request(
            "POST", "register", json={"username": username, "email": email, "password": password}
        )
        if data.get("success"):
            return data.get("message") or "User registered successfully"
        raise AuthRejectedError(data.get("error") or "Registration failed", status_code)

    async def verify(self, token: str) -> Optional[UserIdentity]:
        """Returns the token's user, or None if the server does not accept it."""
        _, data = await self._request("GET", "verify", params={"token": token})
        if not data.get("valid"):
            return None
        return VerifyResponse.model_validate(data).user

    async def logout(self, token: str) -> None:
        await self._request("POST", "logout", json={"token": token})
