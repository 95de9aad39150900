"""Data models for the chat session.

Hides the internal representation of the active selection and the
working copy of the active chat's messages.
"""

from dataclasses import dataclass, field
from enum import Enum

from ..chats.models import ChatSummary, Message


class SendState(str, Enum):
    """Whether a send is in flight."""

    IDLE = "idle"
    SENDING = "sending"


class SendStatus(str, Enum):
    """How a send request ended."""

    REPLIED = "replied"                # Assistant answered
    FALLBACK = "fallback"              # Assistant failed, fallback message appended
    REJECTED_EMPTY = "rejected_empty"  # Blank text, nothing happened
    REJECTED_BUSY = "rejected_busy"    # Another send in flight, nothing happened
    UNAVAILABLE = "unavailable"        # Not authenticated, nothing happened


@dataclass
class PersistOutcome:
    """Result of one store write made during a send."""

    operation: str  # "append_message" or "update_title"
    chat_id: str
    ok: bool
    error: Exception | None = None


@dataclass
class SendResult:
    """Everything a send did, for the caller to inspect."""

    status: SendStatus
    chat_id: str | None = None
    user_message: Message | None = None
    reply: Message | None = None
    persisted: list[PersistOutcome] = field(default_factory=list)

    @property
    def accepted(self) -> bool:
        """Whether the send ran (as opposed to being rejected)."""
        return self.status in (SendStatus.REPLIED, SendStatus.FALLBACK)

    @property
    def fully_persisted(self) -> bool:
        """Whether every store write succeeded."""
        return all(outcome.ok for outcome in self.persisted)


@dataclass
class Session:
    """The state the rendering layer draws from.

    ``active_chat_id`` is either None or the id of an entry in ``chats``.
    ``messages`` is the working copy of the active chat and may run ahead
    of the store when a write failed.
    """

    chats: list[ChatSummary] = field(default_factory=list)
    active_chat_id: str | None = None
    messages: list[Message] = field(default_factory=list)
    state: SendState = SendState.IDLE
    available: bool = False

    @property
    def active_chat(self) -> ChatSummary | None:
        for chat in self.chats:
            if chat.id == self.active_chat_id:
                return chat
        return None

    @property
    def is_sending(self) -> bool:
        return self.state == SendState.SENDING
