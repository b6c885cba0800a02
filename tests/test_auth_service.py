"""
Unit tests for the auth service and the credential store beneath it.
"""

import pytest
from unittest.mock import AsyncMock

from shanti.core.errors import (
    AuthenticationFailed,
    Conflict,
    PersistenceError,
    StorageError,
    ValidationFailed,
)
from shanti.models import LoginRequest, LogoutRequest, RegisterRequest
from shanti.storage import DuplicateUserError


async def _register(service, username="alice", email="alice@example.com", password="secret123"):
    return await service.register(RegisterRequest(username=username, email=email, password=password))


class TestRegister:
    """Tests for AuthService.register."""

    @pytest.mark.asyncio
    async def test_register_success(self, auth_service, user_storage):
        result = await _register(auth_service)
        assert result.success is True
        assert result.message == "User registered successfully"

        user = await user_storage.get_user_by_username("alice")
        assert user["email"] == "alice@example.com"
        assert user["auth_token"] is None
        assert user["hashed_password"] != "secret123"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field", ["username", "email", "password"])
    async def test_register_missing_field(self, auth_service, field):
        values = {"username": "bob", "email": "bob@example.com", "password": "secret123"}
        values[field] = ""
        with pytest.raises(ValidationFailed, match="All fields required"):
            await auth_service.register(RegisterRequest(**values))

    @pytest.mark.asyncio
    async def test_register_invalid_email(self, auth_service):
        with pytest.raises(ValidationFailed, match="Invalid email format"):
            await _register(auth_service, email="not-an-email")

    @pytest.mark.asyncio
    async def test_register_duplicate_email_different_username(self, auth_service):
        await _register(auth_service)
        with pytest.raises(Conflict, match="Email already exists"):
            await _register(auth_service, username="alice2")

    @pytest.mark.asyncio
    async def test_register_duplicate_username_different_email(self, auth_service):
        await _register(auth_service)
        with pytest.raises(Conflict, match="Username already exists"):
            await _register(auth_service, email="other@example.com")

    @pytest.mark.asyncio
    async def test_register_email_checked_before_username(self, auth_service):
        await _register(auth_service)
        with pytest.raises(Conflict, match="Email already exists"):
            await _register(auth_service)

    @pytest.mark.asyncio
    async def test_register_race_maps_to_conflict(self, auth_service, user_storage):
        user_storage.email_exists = AsyncMock(return_value=False)
        user_storage.username_exists = AsyncMock(return_value=False)
        user_storage.create_user = AsyncMock(side_effect=DuplicateUserError("username"))
        with pytest.raises(Conflict, match="Username already exists"):
            await _register(auth_service)

    @pytest.mark.asyncio
    async def test_register_storage_failure(self, auth_service, user_storage):
        user_storage.create_user = AsyncMock(side_effect=StorageError("disk full"))
        with pytest.raises(PersistenceError) as exc_info:
            await _register(auth_service)
        assert exc_info.value.message == "Registration failed"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("failing_path", [
        "users/index/username.json",
        "users/index/email.json",
    ])
    async def test_failed_write_leaves_no_trace(self, auth_service, user_storage, failing_path):
        storage = user_storage.storage
        real_save = storage.save

        async def save(path, content):
            if path == failing_path:
                return False
            return await real_save(path, content)

        storage.save = save
        with pytest.raises(PersistenceError):
            await _register(auth_service)
        storage.save = real_save

        assert not await user_storage.email_exists("alice@example.com")
        assert not await user_storage.username_exists("alice")
        assert list((storage.base_dir / "users").glob("*.json")) == []

        result = await _register(auth_service)
        assert result.success is True
        assert len(list((storage.base_dir / "users").glob("*.json"))) == 1


class TestLogin:
    """Tests for AuthService.login."""

    @pytest.mark.asyncio
    async def test_login_success(self, auth_service):
        await _register(auth_service)
        result = await auth_service.login(LoginRequest(username="alice", password="secret123"))

        assert result.success is True
        assert len(result.token) == 64
        int(result.token, 16)  # hex encoded
        assert result.user.username == "alice"

        verified = await auth_service.verify(result.token)
        assert verified.valid is True
        assert verified.user == result.user

    @pytest.mark.asyncio
    async def test_login_sets_last_login(self, auth_service, user_storage):
        await _register(auth_service)
        await auth_service.login(LoginRequest(username="alice", password="secret123"))
        user = await user_storage.get_user_by_username("alice")
        assert user["last_login"] is not None

    @pytest.mark.asyncio
    async def test_new_login_invalidates_previous_token(self, auth_service):
        await _register(auth_service)
        first = await auth_service.login(LoginRequest(username="alice", password="secret123"))
        second = await auth_service.login(LoginRequest(username="alice", password="secret123"))

        assert first.token != second.token
        assert (await auth_service.verify(first.token)).valid is False
        assert (await auth_service.verify(second.token)).valid is True

    @pytest.mark.asyncio
    async def test_wrong_password_and_unknown_user_look_identical(self, auth_service):
        await _register(auth_service)
        with pytest.raises(AuthenticationFailed) as wrong_password:
            await auth_service.login(LoginRequest(username="alice", password="wrong-pass"))
        with pytest.raises(AuthenticationFailed) as unknown_user:
            await auth_service.login(LoginRequest(username="nobody", password="secret123"))
        assert wrong_password.value.message == unknown_user.value.message == "Invalid credentials"

    @pytest.mark.asyncio
    async def test_username_match_is_exact(self, auth_service):
        await _register(auth_service)
        with pytest.raises(AuthenticationFailed):
            await auth_service.login(LoginRequest(username="Alice", password="secret123"))

    @pytest.mark.asyncio
    async def test_login_missing_fields(self, auth_service):
        with pytest.raises(ValidationFailed, match="Username and password required"):
            await auth_service.login(LoginRequest(username="alice", password=""))

    @pytest.mark.asyncio
    async def test_login_storage_failure(self, auth_service, user_storage):
        user_storage.get_user_by_username = AsyncMock(side_effect=StorageError("unreadable"))
        with pytest.raises(PersistenceError) as exc_info:
            await auth_service.login(LoginRequest(username="alice", password="secret123"))
        assert exc_info.value.message == "Database error"


class TestLogoutAndVerify:
    """Tests for AuthService.logout and AuthService.verify."""

    @pytest.mark.asyncio
    async def test_logout_then_verify_is_invalid(self, auth_service):
        await _register(auth_service)
        login = await auth_service.login(LoginRequest(username="alice", password="secret123"))

        result = await auth_service.logout(LogoutRequest(token=login.token))
        assert result.success is True
        assert (await auth_service.verify(login.token)).valid is False

    @pytest.mark.asyncio
    async def test_logout_is_idempotent(self, auth_service):
        await _register(auth_service)
        login = await auth_service.login(LoginRequest(username="alice", password="secret123"))

        assert (await auth_service.logout(LogoutRequest(token=login.token))).success is True
        assert (await auth_service.logout(LogoutRequest(token=login.token))).success is True
        assert (await auth_service.logout(LogoutRequest(token="unknown"))).success is True
        assert (await auth_service.logout(LogoutRequest(token=""))).success is True

    @pytest.mark.asyncio
    async def test_logout_clears_stored_token(self, auth_service, user_storage):
        await _register(auth_service)
        login = await auth_service.login(LoginRequest(username="alice", password="secret123"))
        await auth_service.logout(LogoutRequest(token=login.token))

        user = await user_storage.get_user_by_username("alice")
        assert user["auth_token"] is None

    @pytest.mark.asyncio
    async def test_verify_unknown_token_leaks_nothing(self, auth_service):
        result = await auth_service.verify("deadbeef")
        assert result.valid is False
        assert result.user is None

    @pytest.mark.asyncio
    async def test_verify_requires_token(self, auth_service):
        with pytest.raises(AuthenticationFailed, match="Token required"):
            await auth_service.verify("")


class TestUserStorage:
    """Tests for the credential store indexes."""

    @pytest.mark.asyncio
    async def test_create_user_rejects_duplicates(self, user_storage):
        await user_storage.create_user("carol", "carol@example.com", "hash")
        with pytest.raises(DuplicateUserError) as exc_info:
            await user_storage.create_user("carol2", "carol@example.com", "hash")
        assert exc_info.value.field == "email"
        with pytest.raises(DuplicateUserError) as exc_info:
            await user_storage.create_user("carol", "carol2@example.com", "hash")
        assert exc_info.value.field == "username"

    @pytest.mark.asyncio
    async def test_lookup_by_email(self, user_storage):
        created = await user_storage.create_user("dave", "dave@example.com", "hash")
        found = await user_storage.get_user_by_email("dave@example.com")
        assert found["user_id"] == created["user_id"]

    @pytest.mark.asyncio
    async def test_token_round_trip(self, user_storage):
        created = await user_storage.create_user("erin", "erin@example.com", "hash")
        await user_storage.set_auth_token(created["user_id"], "tok-1")
        assert (await user_storage.get_user_by_token("tok-1"))["username"] == "erin"

        assert await user_storage.clear_auth_token("tok-1") == created["user_id"]
        assert await user_storage.get_user_by_token("tok-1") is None
        assert await user_storage.clear_auth_token("tok-1") is None

    @pytest.mark.asyncio
    async def test_corrupt_document_raises_storage_error(self, user_storage):
        await user_storage.storage.save("users/index/username.json", "{not json")
        with pytest.raises(StorageError):
            await user_storage.get_user_by_username("anyone")
