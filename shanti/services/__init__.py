"""Services module - business logic behind the API."""

from .auth_service import AuthService

__all__ = ['AuthService']
