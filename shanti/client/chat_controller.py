"""
Chat Controller - drives a chat session: auth check on start, conversation
management, and the send/receive cycle with the inference service.
"""

import logging
from enum import Enum
from typing import Optional

from ..core.fallback import FallbackResponder
from ..llm.base import LLMMessage, LLMProvider, LLMResponseError
from ..models import Conversation
from .auth_client import AuthConnectionError
from .chat_store import ChatStore
from .session import SessionClient
from .view import ChatView

logger = logging.getLogger(__name__)


class ChatState(str, Enum):
    IDLE = "idle"
    AWAITING_RESPONSE = "awaiting_response"


class ChatController:
    """
    One user's chat session.

    Replies come from ``llm_provider`` when one is configured. Any failure of
    the inference call, or no provider at all, is answered by the fallback
    responder instead; ``send_message`` never surfaces inference errors.
    """

    def __init__(
        self,
        session: SessionClient,
        llm_provider: Optional[LLMProvider] = None,
        view: Optional[ChatView] = None,
        responder: Optional[FallbackResponder] = None,
    ):
        self.session = session
        self.llm_provider = llm_provider
        self.view = view or ChatView()
        self.responder = responder or FallbackResponder()
        self.chats: Optional[ChatStore] = None
        self.state = ChatState.IDLE
        self.dark_mode = False

    async def start(self) -> bool:
        """
        Open the chat for the stored session.

        Stored identity is rendered right away, then the token is checked
        with the auth API. Returns False if the user has to log in.
        """
        if not self.session.is_logged_in():
            self.view.redirect_to_login()
            return False

        self._apply_stored_theme()

        user = self.session.current_user()
        if user is not None:
            self._open_chats(user.id)
            self.view.show_profile(user)

        try:
            verified = await self.session.verify()
        except AuthConnectionError:
            logger.warning("Session verification failed, keeping local session")
            return self.chats is not None

        if verified is None:
            logger.info("Stored token rejected, logging out")
            await self.logout()
            return False

        if user is None:
            self.session.remember_user(verified)
            self._open_chats(verified.id)
            self.view.show_profile(verified)
        return True

    def _open_chats(self, user_id: str) -> None:
        self.chats = ChatStore(self.session.store, user_id)
        self.chats.load()
        self._render_current()

    def _require_chats(self) -> ChatStore:
        if self.chats is None:
            raise RuntimeError("Chat controller not started")
        return self.chats

    def _render_current(self) -> None:
        chats = self._require_chats()
        self.view.render_history(chats.conversations, chats.current_id)
        self.view.clear_messages()
        conversation = chats.current
        if conversation is None or not conversation.messages:
            self.view.show_welcome()
            return
        for message in conversation.messages:
            self.view.show_message(message.content, message.sender)

    def new_conversation(self) -> Conversation:
        conversation = self._require_chats().create_conversation()
        self._render_current()
        return conversation

    def open_conversation(self, conversation_id: str) -> Optional[Conversation]:
        conversation = self._require_chats().load_conversation(conversation_id)
        if conversation is not None:
            self._render_current()
        return conversation

    def delete_conversation(self, conversation_id: str) -> Conversation:
        chats = self._require_chats()
        was_current = chats.current_id == conversation_id
        current = chats.delete_conversation(conversation_id)
        if was_current:
            self._render_current()
        else:
            self.view.render_history(chats.conversations, chats.current_id)
        return current

    def clear_conversation(self) -> None:
        """Empty the open conversation."""
        chats = self._require_chats()
        if chats.current_id is None:
            return
        chats.clear_conversation(chats.current_id)
        self.view.clear_messages()
        self.view.show_welcome()

    async def send_message(self, text: str) -> Optional[str]:
        """
        Send a user message and return the reply.

        Blank input is ignored and returns None. The reply is stored in the
        conversation the message was sent from, even if another one has been
        opened in the meantime.
        """
        message = text.strip()
        if not message:
            return None

        chats = self._require_chats()
        conversation = chats.current
        if conversation is None:
            conversation = chats.create_conversation()

        title_before = conversation.title
        chats.append_message(conversation.id, message, "user")
        self.view.show_message(message, "user")
        if conversation.title != title_before:
            self.view.render_history(chats.conversations, chats.current_id)

        self.state = ChatState.AWAITING_RESPONSE
        self.view.set_input_enabled(False)
        self.view.show_typing()
        try:
            reply = await self._get_reply(message)
        finally:
            self.view.hide_typing()
            self.state = ChatState.IDLE
            self.view.set_input_enabled(True)

        if chats.get(conversation.id) is None:
            logger.info(f"Conversation {conversation.id} was deleted before the reply arrived")
            return reply

        chats.append_message(conversation.id, reply, "assistant")
        if chats.current_id == conversation.id:
            self.view.show_message(reply, "assistant")
        return reply

    async def _get_reply(self, message: str) -> str:
        if self.llm_provider is None:
            return self.responder.respond(message)

        try:
            response = await self.llm_provider.chat_completion([LLMMessage.text("user", message)])
            if not response.content.strip():
                raise LLMResponseError("Empty completion")
            return response.content
        except Exception as e:
            logger.warning(
                f"Inference failed, using fallback reply: {e!r}",
                extra={"extra_fields": {"error": str(e)}}
            )
            return self.responder.respond(message)

    def _apply_stored_theme(self) -> None:
        self.dark_mode = self.session.theme() == "dark"
        self.view.apply_theme(self.dark_mode)

    def toggle_theme(self) -> bool:
        """Flip between dark and light; returns True if dark is now on."""
        self.dark_mode = not self.dark_mode
        self.session.set_theme("dark" if self.dark_mode else "light")
        self.view.apply_theme(self.dark_mode)
        return self.dark_mode

    async def logout(self) -> None:
        """End the session; stored conversations are kept."""
        await self.session.logout()
        self.chats = None
        self.view.redirect_to_login()
