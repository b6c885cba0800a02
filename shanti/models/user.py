"""
User Models - request and response records of the auth API.
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict


class UserIdentity(BaseModel):
    """The minimal user identity shared with clients."""
    id: str
    username: str


class AuthPayload(BaseModel):
    """
    Base for request bodies. Unknown keys are ignored, numbers are read as
    their decimal text, and absent, null or structured fields read as empty
    strings, so emptiness checks see one shape.
    """
    model_config = ConfigDict(extra="ignore")

    @staticmethod
    def _as_text(value: object) -> str:
        if isinstance(value, str):
            return value
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return ""

    @classmethod
    def from_body(cls, body: object) -> "AuthPayload":
        if not isinstance(body, dict):
            body = {}
        fields = {
            name: cls._as_text(value)
            for name, value in body.items()
            if name in cls.model_fields
        }
        return cls(**fields)


class LoginRequest(AuthPayload):
    username: str = ""
    password: str = ""


class LogoutRequest(AuthPayload):
    token: str = ""


class RegisterRequest(AuthPayload):
    username: str = ""
    email: str = ""
    password: str = ""


class LoginResponse(BaseModel):
    success: bool = True
    token: str
    user: UserIdentity


class LogoutResponse(BaseModel):
    success: bool = True


class VerifyResponse(BaseModel):
    valid: bool
    user: Optional[UserIdentity] = None


class RegisterResponse(BaseModel):
    success: bool = True
    message: str
