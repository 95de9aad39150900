"""Chat storage module for askai.

Provides the local (device) and remote (HTTP) chat stores behind one interface.
"""

from .base import ChatStore
from .factory import create_chat_store
from .local import LocalChatStore
from .models import Chat, ChatSummary, Message, Role
from .remote import RemoteChatStore

__all__ = [
    "Chat",
    "ChatStore",
    "ChatSummary",
    "LocalChatStore",
    "Message",
    "RemoteChatStore",
    "Role",
    "create_chat_store",
]
