"""Abstract base class for chat stores.

This module defines the interface shared by the local and remote chat
stores. The abstraction hides:
- Where conversations are durably kept (device storage or HTTP API)
- Serialization format
- How chats are scoped to their owner
"""

from abc import ABC, abstractmethod
from typing import Any

from .models import Chat, ChatSummary, Message


class ChatStore(ABC):
    """Abstract chat store.

    Every mutating operation leaves the persisted representation consistent
    with its return value before it completes.

    Supports async context manager protocol:
        async with store:
            chats = await store.list_chats()
    """

    @abstractmethod
    async def connect(self) -> None:
        """Initialize the store."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Release the store's resources."""

    @abstractmethod
    async def is_available(self) -> bool:
        """Whether an auth token is present, i.e. any chats can be read or written."""

    @abstractmethod
    async def list_chats(self) -> list[ChatSummary]:
        """List chats, most recently created first.

        Returns an empty list when the store is unavailable.
        """

    @abstractmethod
    async def create_chat(self, title: str) -> Chat:
        """Create a chat and insert it at the front of the list.

        Raises:
            SessionUnavailableError: If no auth token is present
        """

    @abstractmethod
    async def delete_chat(self, chat_id: str) -> None:
        """Delete a chat and all its messages. Deleting an absent chat is a no-op."""

    @abstractmethod
    async def get_chat(self, chat_id: str) -> Chat:
        """Get a chat with its full message sequence.

        Raises:
            ChatNotFoundError: If the chat does not exist
        """

    @abstractmethod
    async def append_message(self, chat_id: str, message: Message) -> Message:
        """Append a message to a chat.

        Raises:
            ChatNotFoundError: If the chat was deleted
            InvalidInputError: If the message role is not user/assistant
        """

    @abstractmethod
    async def update_title(self, chat_id: str, title: str) -> ChatSummary:
        """Replace a chat's title.

        Raises:
            ChatNotFoundError: If the chat does not exist
        """

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Get the backend type identifier."""

    async def __aenter__(self) -> "ChatStore":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.disconnect()
