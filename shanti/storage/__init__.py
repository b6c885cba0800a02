"""Storage module - the credential store and the backends it persists to."""

from .interface import StorageInterface
from .local_storage import LocalStorage
from .user_storage import DuplicateUserError, UserStorage, init_user_storage, get_user_storage

__all__ = [
    'StorageInterface', 'LocalStorage', 'DuplicateUserError', 'UserStorage',
    'init_user_storage', 'get_user_storage',
]
