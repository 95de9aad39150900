"""
askai: client-side session manager for multi-conversation "Ask AI" chat.

Chats are kept either on the device (namespaced by a hash of the auth
token) or in a remote conversation store; a session controller runs the
optimistic send protocol against an assistant completion endpoint.
"""

__version__ = "0.1.0"

from .assistant import AssistantClient, create_assistant_client
from .auth import DeviceTokenSource, StaticTokenSource, TokenSource
from .chats import Chat, ChatStore, ChatSummary, Message, Role, create_chat_store
from .devices import DeviceStore, InMemoryDeviceStore, SQLiteDeviceStore
from .exceptions import (
    AskAIError,
    ChatNotFoundError,
    InvalidInputError,
    SessionExpiredError,
    SessionUnavailableError,
    TransportError,
)
from .identity import derive_key
from .session import SendResult, SendStatus, Session, SessionController, derive_title

__all__ = [
    "AskAIError",
    "AssistantClient",
    "Chat",
    "ChatNotFoundError",
    "ChatStore",
    "ChatSummary",
    "DeviceStore",
    "DeviceTokenSource",
    "InMemoryDeviceStore",
    "InvalidInputError",
    "Message",
    "Role",
    "SQLiteDeviceStore",
    "SendResult",
    "SendStatus",
    "Session",
    "SessionController",
    "SessionExpiredError",
    "SessionUnavailableError",
    "StaticTokenSource",
    "TokenSource",
    "TransportError",
    "create_assistant_client",
    "create_chat_store",
    "derive_key",
    "derive_title",
]
