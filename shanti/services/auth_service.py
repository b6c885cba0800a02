"""
Auth Service - login, logout, token verification and registration against
the credential store.
"""

import logging
from typing import Optional

from ..core.errors import (
    AuthenticationFailed,
    Conflict,
    PersistenceError,
    StorageError,
    ValidationFailed,
)
from ..models import (
    LoginRequest,
    LoginResponse,
    LogoutRequest,
    LogoutResponse,
    RegisterRequest,
    RegisterResponse,
    UserIdentity,
    VerifyResponse,
)
from ..storage.user_storage import DuplicateUserError, UserStorage
from ..utils.auth import generate_auth_token, get_password_hash, is_valid_email, verify_password

logger = logging.getLogger(__name__)


class AuthService:
    """
    Stateless request handler over a ``UserStorage``.

    Each user holds at most one token: logging in replaces the previous one.
    Tokens never expire on their own.
    """

    def __init__(self, users: UserStorage):
        self.users = users

    async def login(self, request: LoginRequest) -> LoginResponse:
        """
        Check credentials and issue a fresh token.

        Raises:
            ValidationFailed: Username or password missing
            AuthenticationFailed: Unknown user or wrong password (same message)
            PersistenceError: The credential store failed
        """
        if not request.username or not request.password:
            raise ValidationFailed("Username and password required")

        try:
            user = await self.users.get_user_by_username(request.username)
            if user is None:
                logger.debug(f"Login failed: unknown user {request.username!r}")
                raise AuthenticationFailed("Invalid credentials")
            if not verify_password(request.password, user["hashed_password"]):
                logger.debug(f"Login failed: wrong password for {request.username!r}")
                raise AuthenticationFailed("Invalid credentials")

            token = generate_auth_token()
            await self.users.set_auth_token(user["user_id"], token)
        except StorageError as e:
            raise PersistenceError("Database error") from e

        logger.info(f"User logged in: {user['username']}", extra={"extra_fields": {"user_id": user["user_id"]}})
        return LoginResponse(
            token=token,
            user=UserIdentity(id=user["user_id"], username=user["username"]),
        )

    async def logout(self, request: LogoutRequest) -> LogoutResponse:
        """Clear the token if someone holds it. Always succeeds."""
        if request.token:
            try:
                user_id = await self.users.clear_auth_token(request.token)
            except StorageError:
                logger.warning("Logout could not clear token", exc_info=True)
            else:
                if user_id is not None:
                    logger.info("User logged out", extra={"extra_fields": {"user_id": user_id}})
        return LogoutResponse()

    async def verify(self, token: Optional[str]) -> VerifyResponse:
        """
        Resolve a token to its user.

        Returns:
            VerifyResponse: ``valid=False`` without user data for unknown tokens

        Raises:
            AuthenticationFailed: No token supplied
            PersistenceError: The credential store failed
        """
        if not token:
            raise AuthenticationFailed("Token required")

        try:
            user = await self.users.get_user_by_token(token)
        except StorageError as e:
            raise PersistenceError("Database error") from e

        if user is None:
            return VerifyResponse(valid=False)
        return VerifyResponse(
            valid=True,
            user=UserIdentity(id=user["user_id"], username=user["username"]),
        )

    async def register(self, request: RegisterRequest) -> RegisterResponse:
        """
        Create an account. Email uniqueness is checked before username.

        Raises:
            ValidationFailed: A field is empty or the email is malformed
            Conflict: Email or username already taken
            PersistenceError: The credential store failed
        """
        if not request.username or not request.email or not request.password:
            raise ValidationFailed("All fields required")
        if not is_valid_email(request.email):
            raise ValidationFailed("Invalid email format")

        try:
            if await self.users.email_exists(request.email):
                raise Conflict("Email already exists")
            if await self.users.username_exists(request.username):
                raise Conflict("Username already exists")

            await self.users.create_user(
                username=request.username,
                email=request.email,
                hashed_password=get_password_hash(request.password),
            )
        except DuplicateUserError as e:
            # Lost a race with a concurrent registration
            message = "Email already exists" if e.field == "email" else "Username already exists"
            raise Conflict(message) from e
        except StorageError as e:
            raise PersistenceError("Registration failed") from e

        return RegisterResponse(message="User registered successfully")
