"""
Session Client - holds the login token and user identity in the local store.

Stored identity is trusted for immediate use and re-verified against the auth
API afterwards; a rejected token tears the session down.
"""

import json
import logging
from typing import Optional

from pydantic import ValidationError

from ..models import Session, UserIdentity
from .auth_client import AuthClient, AuthClientError, AuthRejectedError
from .local_store import KeyValueStore

logger = logging.getLogger(__name__)

KEY_LOGGED_IN = "isLoggedIn"
KEY_TOKEN = "authToken"
KEY_USER = "userData"
KEY_THEME = "theme"

MIN_PASSWORD_LENGTH = 6


def chats_key(user_id: str) -> str:
    """Local store key of a user's conversation list."""
    return f"chats_{user_id}"


class SessionClient:
    """Login state of one client, persisted across restarts."""

    def __init__(self, store: KeyValueStore, auth: AuthClient):
        self.store = store
        self.auth = auth

    @property
    def token(self) -> Optional[str]:
        return self.store.get_item(KEY_TOKEN) or None

    def is_logged_in(self) -> bool:
        return self.store.get_item(KEY_LOGGED_IN) == "true" and self.token is not None

    def current_user(self) -> Optional[UserIdentity]:
        """The locally stored identity, without asking the server."""
        raw = self.store.get_item(KEY_USER)
        if not raw:
            return None
        try:
            return UserIdentity.model_validate_json(raw)
        except ValidationError:
            logger.warning("Discarding malformed stored user data")
            return None

    def current_session(self) -> Optional[Session]:
        token, user = self.token, self.current_user()
        if not self.is_logged_in() or token is None or user is None:
            return None
        return Session(token=token, user=user)

    def _remember(self, token: str, user: UserIdentity) -> None:
        self.store.set_item(KEY_TOKEN, token)
        self.store.set_item(KEY_USER, user.model_dump_json())
        self.store.set_item(KEY_LOGGED_IN, "true")

    def remember_user(self, user: UserIdentity) -> None:
        self.store.set_item(KEY_USER, user.model_dump_json())

    async def login(self, username: str, password: str) -> Session:
        """
        Log in and persist the session.

        Raises:
            AuthRejectedError: Bad credentials or missing fields
            AuthTimeoutError: No answer within the client timeout
            AuthConnectionError: The auth API could not be reached
        """
        result = await self.auth.login(username, password)
        self._remember(result.token, result.user)
        logger.info(f"Logged in as {result.user.username}")
        return Session(token=result.token, user=result.user)

    async def register(self, username: str, email: str, password: str) -> str:
        """
        Create an account; the caller still has to log in afterwards.

        Raises:
            AuthRejectedError: Password too short, or the server refused
            AuthConnectionError: The auth API could not be reached
        """
        if len(password) < MIN_PASSWORD_LENGTH:
            raise AuthRejectedError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
        return await self.auth.register(username, email, password)

    async def verify(self) -> Optional[UserIdentity]:
        """
        Ask the auth API whether the stored token is still valid.

        Returns:
            The server's view of the user, or None if the token is rejected

        Raises:
            AuthConnectionError: The auth API could not be reached
        """
        token = self.token
        if token is None:
            return None
        return await self.auth.verify(token)

    async def resume(self) -> bool:
        """
        Pick up a stored session: keep it if the server accepts the token,
        tear it down otherwise (including when the server is unreachable).
        """
        if not self.is_logged_in():
            return False
        try:
            user = await self.verify()
        except AuthClientError:
            user = None
        if user is None:
            self.clear()
            return False
        return True

    async def logout(self) -> None:
        """Invalidate the token server-side if possible, then forget the session."""
        token = self.token
        if token is not None:
            try:
                await self.auth.logout(token)
            except AuthClientError as e:
                logger.warning(f"Server logout failed, clearing local session anyway: {e}")
        self.clear()

    def clear(self) -> None:
        """Forget the session. Conversations and theme stay in the store."""
        for key in (KEY_LOGGED_IN, KEY_TOKEN, KEY_USER):
            self.store.remove_item(key)

    def theme(self) -> Optional[str]:
        return self.store.get_item(KEY_THEME)

    def set_theme(self, theme: str) -> None:
        self.store.set_item(KEY_THEME, theme)
