"""
Chat Store - one user's conversations, persisted in the local store.

The list lives under ``chats_<user id>`` so switching accounts never shows
another user's history. Newest conversations come first. Every mutation is
written back before the method returns.
"""

import logging
import time
from typing import Callable, List, Optional

from pydantic import TypeAdapter, ValidationError

from ..models import DEFAULT_TITLE, Conversation, Message
from ..models.session import Sender
from .local_store import KeyValueStore
from .session import chats_key

logger = logging.getLogger(__name__)

TITLE_LENGTH = 30
PREVIEW_LENGTH = 50

_conversation_list = TypeAdapter(List[Conversation])


def _truncate(text: str, length: int) -> str:
    return text if len(text) <= length else text[:length] + "..."


class ChatStore:
    """
    Conversation list of a single user plus the id of the open conversation.
    """

    def __init__(self, store: KeyValueStore, user_id: str, clock: Callable[[], float] = time.time):
        self.store = store
        self.user_id = user_id
        self.key = chats_key(user_id)
        self.conversations: List[Conversation] = []
        self.current_id: Optional[str] = None
        self._clock = clock

    def _read(self) -> List[Conversation]:
        raw = self.store.get_item(self.key)
        if not raw:
            return []
        try:
            return _conversation_list.validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Discarding unreadable conversation list for user {self.user_id}: {e}")
            return []

    def save(self) -> None:
        self.store.set_item(
            self.key,
            _conversation_list.dump_json(self.conversations, by_alias=True).decode('utf-8'),
        )

    def load(self) -> Conversation:
        """
        Read the persisted list and open the newest conversation, creating
        one if the list is empty.
        """
        self.conversations = self._read()
        if not self.conversations:
            return self.create_conversation()
        self.current_id = self.conversations[0].id
        return self.conversations[0]

    @property
    def current(self) -> Optional[Conversation]:
        return self.get(self.current_id) if self.current_id else None

    def get(self, conversation_id: str) -> Optional[Conversation]:
        return next((c for c in self.conversations if c.id == conversation_id), None)

    def _new_id(self) -> str:
        # Millisecond timestamp, bumped if two conversations share a millisecond
        candidate = int(self._clock() * 1000)
        taken = {c.id for c in self.conversations}
        while str(candidate) in taken:
            candidate += 1
        return str(candidate)

    def create_conversation(self) -> Conversation:
        """Prepend an empty conversation and make it current."""
        conversation = Conversation(id=self._new_id())
        self.conversations.insert(0, conversation)
        self.current_id = conversation.id
        self.save()
        return conversation

    def load_conversation(self, conversation_id: str) -> Optional[Conversation]:
        """Make ``conversation_id`` current. Unknown ids change nothing."""
        conversation = self.get(conversation_id)
        if conversation is None:
            return None
        self.current_id = conversation_id
        return conversation

    def delete_conversation(self, conversation_id: str) -> Conversation:
        """
        Remove a conversation. If it was current, the newest remaining one
        becomes current, or a fresh one is created when none remain.

        Returns:
            The current conversation after the deletion
        """
        self.conversations = [c for c in self.conversations if c.id != conversation_id]
        self.save()

        if self.current_id == conversation_id or self.current is None:
            if self.conversations:
                self.current_id = self.conversations[0].id
            else:
                return self.create_conversation()
        return self.current

    def rename_from_first_message(self, conversation_id: str, message: str) -> bool:
        """
        Derive title and preview from ``message`` while the conversation
        still has the default title. Returns True if it was renamed.
        """
        conversation = self.get(conversation_id)
        if conversation is None or conversation.title != DEFAULT_TITLE:
            return False
        conversation.title = _truncate(message, TITLE_LENGTH)
        conversation.preview = _truncate(message, PREVIEW_LENGTH)
        self.save()
        return True

    def append_message(self, conversation_id: str, content: str, sender: Sender) -> Message:
        """
        Append a message and persist the whole list.

        Raises:
            KeyError: Unknown conversation id
        """
        conversation = self.get(conversation_id)
        if conversation is None:
            raise KeyError(f"Unknown conversation: {conversation_id}")

        first_user_message = sender == "user" and not conversation.has_user_message
        message = Message(content=content, sender=sender)
        conversation.messages.append(message)
        if first_user_message:
            self.rename_from_first_message(conversation_id, content)
        self.save()
        return message

    def clear_conversation(self, conversation_id: str) -> None:
        """Drop every message of a conversation; its title stays."""
        conversation = self.get(conversation_id)
        if conversation is None:
            return
        conversation.messages = []
        self.save()
