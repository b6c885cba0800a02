"""
User Storage - the credential store.

One JSON document per user under ``users/`` plus three lookup indexes
(username, email and auth token to user_id). Username, email and token are
unique; a user holds at most one token at a time.
"""

import asyncio
import json
import logging
import uuid
from typing import Any, Dict, Optional
from datetime import datetime, timezone

from ..core.errors import StorageError
from .interface import StorageInterface

logger = logging.getLogger(__name__)

_DATETIME_FIELDS = ('created_at', 'updated_at', 'last_login')


class DuplicateUserError(StorageError):
    """Raised when a username or email is already taken."""

    def __init__(self, field: str):
        super().__init__(f"{field} already exists")
        self.field = field


class UserStorage:
    """
    Manages persistent storage of user records.
    All writes are serialized so index updates never interleave.
    """

    def __init__(self, storage: StorageInterface):
        """
        Initialize user storage.

        Args:
            storage: StorageInterface implementation (typically LocalStorage)
        """
        self.storage = storage
        self.users_dir = "users"
        self._index_paths = {
            "username": f"{self.users_dir}/index/username.json",
            "email": f"{self.users_dir}/index/email.json",
            "auth_token": f"{self.users_dir}/index/auth_token.json",
        }
        self._write_lock = asyncio.Lock()

    def _user_path(self, user_id: str) -> str:
        return f"{self.users_dir}/{user_id}.json"

    async def _read_json(self, path: str) -> Optional[Any]:
        try:
            content = await self.storage.load(path)
        except (OSError, ValueError) as e:
            raise StorageError(f"Failed to read {path}") from e
        if content is None:
            return None
        try:
            return json.loads(content.decode('utf-8'))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise StorageError(f"Corrupt document at {path}") from e

    async def _write_json(self, path: str, data: Any) -> None:
        content = json.dumps(data, indent=2, ensure_ascii=False, default=str)
        if not await self.storage.save(path, content):
            raise StorageError(f"Failed to write {path}")

    async def _load_index(self, name: str) -> Dict[str, str]:
        return await self._read_json(self._index_paths[name]) or {}

    async def _save_index(self, name: str, index: Dict[str, str]) -> None:
        await self._write_json(self._index_paths[name], index)

    @staticmethod
    def _from_document(document: Dict[str, Any]) -> Dict[str, Any]:
        user = dict(document)
        for field in _DATETIME_FIELDS:
            if user.get(field):
                user[field] = datetime.fromisoformat(user[field])
        return user

    @staticmethod
    def _to_document(user: Dict[str, Any]) -> Dict[str, Any]:
        document = dict(user)
        for field in _DATETIME_FIELDS:
            if isinstance(document.get(field), datetime):
                document[field] = document[field].isoformat()
        return document

    async def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        """
        Get user by user_id.

        Returns:
            Optional[Dict]: User record or None if not found
        """
        document = await self._read_json(self._user_path(user_id))
        if document is None:
            return None
        return self._from_document(document)

    async def _get_by_index(self, name: str, key: str) -> Optional[Dict[str, Any]]:
        index = await self._load_index(name)
        user_id = index.get(key)
        if user_id is None:
            return None
        return await self.get_user(user_id)

    async def get_user_by_username(self, username: str) -> Optional[Dict[str, Any]]:
        """Get user by exact username."""
        return await self._get_by_index("username", username)

    async def get_user_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        """Get user by exact email."""
        return await self._get_by_index("email", email)

    async def get_user_by_token(self, token: str) -> Optional[Dict[str, Any]]:
        """Get the user currently holding ``token``."""
        user = await self._get_by_index("auth_token", token)
        # The user document is the source of truth; a stale index entry is ignored.
        if user is None or user.get("auth_token") != token:
            return None
        return user

    async def email_exists(self, email: str) -> bool:
        return email in await self._load_index("email")

    async def username_exists(self, username: str) -> bool:
        return username in await self._load_index("username")

    async def create_user(self, username: str, email: str, hashed_password: str) -> Dict[str, Any]:
        """
        Create a new user without a token.

        Raises:
            DuplicateUserError: If the email or username is already taken
            StorageError: If the record could not be written
        """
        async with self._write_lock:
            email_index = await self._load_index("email")
            if email in email_index:
                raise DuplicateUserError("email")
            username_index = await self._load_index("username")
            if username in username_index:
                raise DuplicateUserError("username")

            now = datetime.now(timezone.utc)
            user = {
                "user_id": str(uuid.uuid4()),
                "username": username,
                "email": email,
                "hashed_password": hashed_password,
                "auth_token": None,
                "last_login": None,
                "created_at": now,
                "updated_at": now,
            }
            previous_indexes = {"email": dict(email_index), "username": dict(username_index)}
            email_index[email] = user["user_id"]
            username_index[username] = user["user_id"]
            try:
                await self._write_json(self._user_path(user["user_id"]), self._to_document(user))
                await self._save_index("email", email_index)
                await self._save_index("username", username_index)
            except StorageError:
                await self._undo_create(user["user_id"], previous_indexes)
                raise

        logger.info(f"User created: {username}", extra={"extra_fields": {"user_id": user["user_id"]}})
        return user

    async def _undo_create(self, user_id: str, previous_indexes: Dict[str, Dict[str, str]]) -> None:
        """Put the indexes back and drop the user document of a failed create."""
        for name, index in previous_indexes.items():
            try:
                await self._save_index(name, index)
            except StorageError:
                logger.error(f"Could not restore {name} index after failed create of user {user_id}")
        if not await self.storage.delete(self._user_path(user_id)):
            logger.warning(f"No user document to remove after failed create of user {user_id}")

    async def set_auth_token(self, user_id: str, token: str) -> Dict[str, Any]:
        """
        Give ``user_id`` a new token and stamp ``last_login``.
        The user's previous token, if any, stops resolving.

        Raises:
            StorageError: If the user is missing or the write fails
        """
        async with self._write_lock:
            user = await self.get_user(user_id)
            if user is None:
                raise StorageError(f"User {user_id} not found")

            token_index = await self._load_index("auth_token")
            previous = user.get("auth_token")
            if previous:
                token_index.pop(previous, None)

            now = datetime.now(timezone.utc)
            user.update(auth_token=token, last_login=now, updated_at=now)
            await self._write_json(self._user_path(user_id), self._to_document(user))

            token_index[token] = user_id
            await self._save_index("auth_token", token_index)

        return user

    async def clear_auth_token(self, token: str) -> Optional[str]:
        """
        Clear ``token`` from whichever user holds it.

        Returns:
            Optional[str]: The affected user_id, or None if no user held it
        """
        async with self._write_lock:
            token_index = await self._load_index("auth_token")
            user_id = token_index.pop(token, None)
            if user_id is None:
                return None

            user = await self.get_user(user_id)
            if user is not None and user.get("auth_token") == token:
                user.update(auth_token=None, updated_at=datetime.now(timezone.utc))
                await self._write_json(self._user_path(user_id), self._to_document(user))
            await self._save_index("auth_token", token_index)

        return user_id


# Global user storage instance
_user_storage: Optional[UserStorage] = None


def init_user_storage(storage: StorageInterface) -> UserStorage:
    """
    Initialize the global user storage instance.

    Args:
        storage: StorageInterface implementation backing the credential store
    """
    global _user_storage
    _user_storage = UserStorage(storage)
    return _user_storage


def get_user_storage() -> UserStorage:
    """
    Get the global user storage instance.

    Raises:
        RuntimeError: If user storage has not been initialized
    """
    if _user_storage is None:
        raise RuntimeError("User storage not initialized. Call init_user_storage() first.")
    return _user_storage
