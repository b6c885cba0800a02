"""
Chat View - rendering hooks called by the chat controller.

The base class renders nothing; front ends override the hooks they need.
"""

from typing import List, Optional

from ..models import Conversation, UserIdentity
from ..models.session import Sender


class ChatView:
    """No-op renderer."""

    def show_profile(self, user: UserIdentity) -> None:
        pass

    def render_history(self, conversations: List[Conversation], current_id: Optional[str]) -> None:
        pass

    def clear_messages(self) -> None:
        pass

    def show_welcome(self) -> None:
        """Placeholder shown instead of an empty thread."""
        pass

    def show_message(self, content: str, sender: Sender) -> None:
        pass

    def show_typing(self) -> None:
        pass

    def hide_typing(self) -> None:
        pass

    def set_input_enabled(self, enabled: bool) -> None:
        pass

    def apply_theme(self, dark: bool) -> None:
        pass

    def redirect_to_login(self) -> None:
        pass
