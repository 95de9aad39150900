"""Data models for chats.

These models define the structure of chats and messages independent of
the storage backend used.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..exceptions import InvalidInputError


class Role(str, Enum):
    """Author of a message."""

    USER = "user"
    ASSISTANT = "assistant"


class Message(BaseModel):
    """A single message in a chat. Messages are never edited."""

    model_config = ConfigDict(frozen=True)

    role: Role = Field(description="Who wrote the message: 'user' or 'assistant'")
    content: str = Field(description="Message text")

    @classmethod
    def user(cls, content: str) -> "Message":
        return cls(role=Role.USER, content=content)

    @classmethod
    def assistant(cls, content: str) -> "Message":
        return cls(role=Role.ASSISTANT, content=content)


class ChatSummary(BaseModel):
    """Chat list entry without messages."""

    id: str = Field(description="Opaque chat identifier")
    title: str = Field(description="Short human label")
    created_at: datetime | None = Field(
        default=None,
        description="Creation time (assigned by the remote store only)"
    )


class Chat(ChatSummary):
    """A chat with its full, ordered message sequence."""

    messages: list[Message] = Field(default_factory=list)

    def summary(self) -> ChatSummary:
        """Drop the messages."""
        return ChatSummary(id=self.id, title=self.title, created_at=self.created_at)


def coerce_message(value: Any) -> Message:
    """Validate a message crossing the store boundary.

    Args:
        value: A Message, or a mapping with 'role' and 'content'

    Returns:
        Validated Message

    Raises:
        InvalidInputError: If the role is not 'user'/'assistant' or fields are missing
    """
    if isinstance(value, Message):
        return value
    try:
        return Message.model_validate(value)
    except ValidationError as e:
        raise InvalidInputError(f"Invalid message: {e}") from e
