"""
Terminal front end for the chat client.

Run with ``python -m shanti.channels.terminal`` (or the ``shanti-chat``
script). Lines starting with ``/`` are commands, see ``HELP``.
"""

import asyncio
import logging
from typing import List, Optional

from ..client import (
    AuthClient,
    AuthClientError,
    ChatController,
    ChatView,
    FileStore,
    SessionClient,
)
from ..config import settings
from ..core.logging_config import setup_logging
from ..llm import create_llm_provider_from_settings
from ..models import Conversation, UserIdentity

logger = logging.getLogger(__name__)

HELP = """Commands:
  /new            start a new conversation
  /list           list conversations
  /open <id>      open a conversation
  /delete <id>    delete a conversation
  /clear          clear the open conversation
  /theme          toggle dark/light theme
  /logout         log out
  /quit           exit"""


class TerminalView(ChatView):
    """Prints to stdout."""

    def __init__(self):
        self.logged_out = False

    def show_profile(self, user: UserIdentity) -> None:
        print(f"Signed in as {user.username}")

    def render_history(self, conversations: List[Conversation], current_id: Optional[str]) -> None:
        for conversation in conversations:
            marker = "*" if conversation.id == current_id else " "
            print(f" {marker} {conversation.id}  {conversation.title}  ({conversation.preview})")

    def show_welcome(self) -> None:
        print("Welcome to AI Assistant. Ask me anything, or type /help.")

    def show_message(self, content: str, sender: str) -> None:
        prefix = "you" if sender == "user" else "ai"
        print(f"[{prefix}] {content}")

    def show_typing(self) -> None:
        print("[ai] ...")

    def apply_theme(self, dark: bool) -> None:
        print(f"Theme: {'dark' if dark else 'light'}")

    def redirect_to_login(self) -> None:
        self.logged_out = True


async def _prompt(text: str) -> str:
    return (await asyncio.to_thread(input, text)).strip()


async def _authenticate(session: SessionClient) -> bool:
    """Log in or register until a session exists. False if the user gives up."""
    while not session.is_logged_in():
        choice = (await _prompt("[l]ogin, [r]egister or [q]uit? ")).lower()
        try:
            if choice.startswith("l"):
                username = await _prompt("username: ")
                password = await _prompt("password: ")
                await session.login(username, password)
            elif choice.startswith("r"):
                username = await _prompt("username: ")
                email = await _prompt("email: ")
                password = await _prompt("password: ")
                print(await session.register(username, email, password))
                print("Registration successful! Please sign in.")
            elif choice.startswith("q"):
                return False
        except AuthClientError as e:
            print(f"Error: {e}")
    return True


async def _handle_command(controller: ChatController, line: str) -> bool:
    """Run a slash command. Returns False when the loop should stop."""
    command, _, argument = line.partition(" ")
    argument = argument.strip()

    if command == "/quit":
        return False
    if command == "/help":
        print(HELP)
    elif command == "/new":
        controller.new_conversation()
    elif command == "/list":
        controller.view.render_history(controller.chats.conversations, controller.chats.current_id)
    elif command == "/open":
        if controller.open_conversation(argument) is None:
            print(f"No conversation {argument!r}")
    elif command == "/delete":
        controller.delete_conversation(argument)
    elif command == "/clear":
        controller.clear_conversation()
    elif command == "/theme":
        controller.toggle_theme()
    elif command == "/logout":
        await controller.logout()
        return False
    else:
        print(f"Unknown command {command}, type /help")
    return True


async def run() -> None:
    store = FileStore(settings.client_storage_path)
    auth = AuthClient(settings.auth_base_url, timeout=settings.auth_timeout_seconds)
    session = SessionClient(store, auth)

    if session.is_logged_in() and not await session.resume():
        print("Your session has expired, please sign in again.")
    if not await _authenticate(session):
        return

    view = TerminalView()
    controller = ChatController(
        session,
        llm_provider=create_llm_provider_from_settings(settings),
        view=view,
    )
    if not await controller.start():
        return

    while not view.logged_out:
        line = await _prompt("> ")
        if line.startswith("/"):
            if not await _handle_command(controller, line):
                break
            continue
        await controller.send_message(line)


def main() -> None:
    setup_logging(settings)
    try:
        asyncio.run(run())
    except (KeyboardInterrupt, EOFError):
        pass


if __name__ == "__main__":
    main()
