"""
Session and Chat Models - client-side state persisted in the local store.
"""

from datetime import datetime, timezone
from typing import List, Literal
from pydantic import BaseModel, ConfigDict, Field

from .user import UserIdentity

DEFAULT_TITLE = "New Chat"
DEFAULT_PREVIEW = "Start a conversation..."

Sender = Literal["user", "assistant"]


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class Session(BaseModel):
    """Token and identity held by the client."""
    token: str
    user: UserIdentity


class Message(BaseModel):
    """A chat message. Immutable once appended."""
    model_config = ConfigDict(frozen=True)

    content: str
    sender: Sender
    timestamp: str = Field(default_factory=_now_iso)


class Conversation(BaseModel):
    """A conversation thread owned by one user's chat store."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str = DEFAULT_TITLE
    preview: str = DEFAULT_PREVIEW
    messages: List[Message] = Field(default_factory=list)
    created_at: str = Field(default_factory=_now_iso, alias="createdAt")

    @property
    def has_user_message(self) -> bool:
        return any(message.sender == "user" for message in self.messages)
