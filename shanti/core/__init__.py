"""Core module - errors, fallback responses and logging."""

from .errors import (
    AuthAPIError,
    AuthenticationFailed,
    Conflict,
    PersistenceError,
    StorageError,
    ValidationFailed,
)
from .fallback import FallbackResponder

__all__ = [
    'AuthAPIError', 'AuthenticationFailed', 'Conflict', 'PersistenceError',
    'StorageError', 'ValidationFailed', 'FallbackResponder',
]
