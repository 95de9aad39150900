"""Session controller.

Owns the Session value: which chat is active, the working copy of its
messages, and the idle/sending state of the send protocol. Every mutation
is written through to the chat store.
"""

import asyncio
import logging
from collections.abc import Awaitable
from typing import TypeVar

from ..assistant.base import AssistantClient
from ..chats.base import ChatStore
from ..chats.models import ChatSummary, Message
from ..config import (
    DEFAULT_CHAT_TITLE,
    DEFAULT_REPLY_TIMEOUT,
    FALLBACK_REPLY,
    TITLE_ELLIPSIS,
    TITLE_MAX_LENGTH,
)
from ..exceptions import ChatNotFoundError, InvalidInputError
from ..prompts import get_system_prompt
from .models import PersistOutcome, SendResult, SendState, SendStatus, Session

logger = logging.getLogger(__name__)

T = TypeVar("T")


def derive_title(text: str) -> str:
    """Chat title from a message: first 30 characters, ellipsis if longer.

    >>> derive_title("What is the capital of Karnataka?")
    'What is the capital of Karnata...'
    """
    if len(text) > TITLE_MAX_LENGTH:
        return text[:TITLE_MAX_LENGTH] + TITLE_ELLIPSIS
    return text


class SessionController:
    """Drives chat selection and the send protocol against a ChatStore.

    Only one send runs at a time; a send requested while another is in
    flight is dropped, not queued. The assistant reply always goes to the
    chat that was active when the send started, even if the user switched
    chats in the meantime.

    Usage:
        controller = SessionController(store, assistant)
        await controller.load()
        result = await controller.send("Namaskara!")
        render(controller.session)
    """

    def __init__(
        self,
        store: ChatStore,
        assistant: AssistantClient,
        system_prompt: str | None = None,
        reply_timeout: float | None = DEFAULT_REPLY_TIMEOUT
    ):
        """Initialize the controller.

        Args:
            store: Chat store (local or remote)
            assistant: Assistant completion client
            system_prompt: Fixed system prompt (defaults to the packaged prompt)
            reply_timeout: Seconds to wait for the assistant before falling back
        """
        self._store = store
        self._assistant = assistant
        self._system_prompt = system_prompt if system_prompt is not None else get_system_prompt()
        self._reply_timeout = reply_timeout
        self._session = Session()
        self._user_titled: set[str] = set()

    @property
    def session(self) -> Session:
        return self._session

    @property
    def is_sending(self) -> bool:
        return self._session.is_sending

    # Selection

    async def load(self) -> Session:
        """Read the chat list and select its first entry."""
        session = self._session
        session.chats = []
        session.active_chat_id = None
        session.messages = []
        session.available = await self._store.is_available()

        if not session.available:
            logger.info("No auth token, presenting an empty session")
            return session

        session.chats = await self._store.list_chats()
        await self._select_front()
        return session

    async def refresh(self) -> Session:
        """Re-read the chat list, keeping the selection if it still exists."""
        session = self._session
        session.available = await self._store.is_available()
        if not session.available:
            session.chats = []
            session.active_chat_id = None
            session.messages = []
            return session

        session.chats = await self._store.list_chats()
        if session.active_chat is None:
            await self._select_front()
        return session

    async def select_chat(self, chat_id: str) -> Session:
        """Make a chat active, replacing the working copy with its stored messages.

        Raises:
            ChatNotFoundError: If the chat is not in the list or was deleted
                from the store (the stale entry is dropped first)
        """
        if not any(chat.id == chat_id for chat in self._session.chats):
            raise ChatNotFoundError(chat_id)

        try:
            await self._activate(chat_id)
        except ChatNotFoundError:
            logger.warning("Chat %s vanished from the store", chat_id)
            self._drop(chat_id)
            await self._select_front()
            raise
        return self._session

    async def _activate(self, chat_id: str) -> None:
        session = self._session
        session.active_chat_id = chat_id
        pending = session.messages = []
        chat = await self._store.get_chat(chat_id)
        # Another selection may have happened while the store was read
        if session.active_chat_id != chat_id or session.messages is not pending:
            return
        messages = list(chat.messages)
        # A reply that landed during the read may be missing from the snapshot
        if pending and messages[-len(pending):] != pending:
            messages.extend(pending)
        session.messages = messages

    async def _select_front(self) -> None:
        session = self._session
        if session.chats:
            await self._activate(session.chats[0].id)
        else:
            session.active_chat_id = None
            session.messages = []

    def _drop(self, chat_id: str) -> None:
        self._session.chats = [chat for chat in self._session.chats if chat.id != chat_id]
        self._user_titled.discard(chat_id)

    def _set_title(self, chat_id: str, title: str) -> None:
        for chat in self._session.chats:
            if chat.id == chat_id:
                chat.title = title

    # Chat lifecycle

    async def new_chat(self, title: str = DEFAULT_CHAT_TITLE) -> ChatSummary:
        """Create an empty chat at the front of the list and select it."""
        chat = await self._store.create_chat(title)
        summary = chat.summary()
        session = self._session
        session.chats.insert(0, summary)
        session.active_chat_id = chat.id
        session.messages = []
        return summary

    async def delete_chat(self, chat_id: str) -> Session:
        """Delete a chat. Deleting the active chat selects the new front of the list."""
        await self._store.delete_chat(chat_id)
        was_active = self._session.active_chat_id == chat_id
        self._drop(chat_id)
        if was_active:
            await self._select_front()
        return self._session

    async def rename_chat(self, chat_id: str, title: str) -> ChatSummary:
        """Set a title explicitly. The first message will not overwrite it."""
        if not title.strip():
            raise InvalidInputError("Chat title must not be empty")
        summary = await self._store.update_title(chat_id, title)
        self._user_titled.add(chat_id)
        self._set_title(chat_id, summary.title)
        return summary

    # Send protocol

    async def send(self, text: str) -> SendResult:
        """Send a user message and collect the assistant's reply.

        The user message is appended to the working copy before any store
        or network call. Assistant failures are absorbed into a fallback
        reply; store write failures are logged and recorded in the result,
        never rolled back.

        Args:
            text: What the user typed

        Returns:
            SendResult describing what happened

        Raises:
            AskAIError: Only if a chat had to be created and the store refused
        """
        if not text.strip():
            return SendResult(status=SendStatus.REJECTED_EMPTY)
        if self.is_sending:
            logger.debug("Send rejected, another send is in flight")
            return SendResult(status=SendStatus.REJECTED_BUSY)

        self._session.state = SendState.SENDING
        try:
            return await self._run_send(text)
        finally:
            self._session.state = SendState.IDLE

    async def _run_send(self, text: str) -> SendResult:
        session = self._session
        if not await self._store.is_available():
            return SendResult(status=SendStatus.UNAVAILABLE)

        if session.active_chat_id is None:
            chat = await self._store.create_chat(derive_title(text))
            session.chats.insert(0, chat.summary())
            session.active_chat_id = chat.id
            session.messages = []

        chat_id = session.active_chat_id
        result = SendResult(status=SendStatus.REPLIED, chat_id=chat_id)
        first_message = not session.messages

        user_message = Message.user(text)
        session.messages.append(user_message)
        result.user_message = user_message
        await self._persist(result, "append_message", chat_id,
                            self._store.append_message(chat_id, user_message))

        if first_message and chat_id not in self._user_titled:
            title = derive_title(text)
            self._set_title(chat_id, title)
            await self._persist(result, "update_title", chat_id,
                                self._store.update_title(chat_id, title))

        reply_text = await self._ask(chat_id, text)
        if reply_text is None:
            result.status = SendStatus.FALLBACK
            reply_text = FALLBACK_REPLY

        reply = Message.assistant(reply_text)
        result.reply = reply
        if session.active_chat_id == chat_id:
            session.messages.append(reply)
        await self._persist(result, "append_message", chat_id,
                            self._store.append_message(chat_id, reply))
        return result

    async def _ask(self, chat_id: str, text: str) -> str | None:
        """Ask the assistant; None means it failed."""
        try:
            return await asyncio.wait_for(
                self._assistant.ask(text, self._system_prompt),
                timeout=self._reply_timeout
            )
        except asyncio.TimeoutError:
            logger.warning("Assistant timed out after %ss for chat %s", self._reply_timeout, chat_id)
        except Exception as e:
            logger.warning("Assistant request failed for chat %s: %s", chat_id, e)
        return None

    async def _persist(
        self,
        result: SendResult,
        operation: str,
        chat_id: str,
        write: Awaitable[T]
    ) -> T | None:
        """Await a store write and record its outcome without raising."""
        try:
            value = await write
        except Exception as e:
            logger.error("Failed to persist %s for chat %s: %s", operation, chat_id, e)
            result.persisted.append(PersistOutcome(operation, chat_id, ok=False, error=e))
            return None
        result.persisted.append(PersistOutcome(operation, chat_id, ok=True))
        return value
