"""Chat client - session handling, local conversation store and chat controller."""

from .auth_client import (
    AuthClient,
    AuthClientError,
    AuthConnectionError,
    AuthRejectedError,
    AuthTimeoutError,
)
from .chat_controller import ChatController, ChatState
from .chat_store import ChatStore
from .local_store import FileStore, KeyValueStore, MemoryStore
from .session import SessionClient
from .view import ChatView

__all__ = [
    'AuthClient', 'AuthClientError', 'AuthConnectionError', 'AuthRejectedError',
    'AuthTimeoutError', 'ChatController', 'ChatState', 'ChatStore', 'FileStore',
    'KeyValueStore', 'MemoryStore', 'SessionClient', 'ChatView',
]
