"""Models module."""

from .user import (
    UserIdentity, LoginRequest, LogoutRequest, RegisterRequest,
    LoginResponse, LogoutResponse, VerifyResponse, RegisterResponse,
)
from .session import Session, Message, Conversation, DEFAULT_TITLE, DEFAULT_PREVIEW

__all__ = [
    'UserIdentity', 'LoginRequest', 'LogoutRequest', 'RegisterRequest',
    'LoginResponse', 'LogoutResponse', 'VerifyResponse', 'RegisterResponse',
    'Session', 'Message', 'Conversation', 'DEFAULT_TITLE', 'DEFAULT_PREVIEW',
]
