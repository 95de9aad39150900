"""Factory for creating chat stores."""

from typing import Any

from ..config import STORE_LOCAL, STORE_REMOTE
from .base import ChatStore


def create_chat_store(
    backend: str = STORE_LOCAL,
    **kwargs: Any
) -> ChatStore:
    """Create a chat store.

    Args:
        backend: Backend type ("local" or "remote")
        **kwargs: Backend-specific configuration
            For local:
                - device: DeviceStore (required)
                - tokens: TokenSource (required)
                - clock: Callable[[], float]
            For remote:
                - tokens: TokenSource (required)
                - base_url: str
                - timeout: float
                - client: httpx.AsyncClient

    Returns:
        ChatStore instance

    Raises:
        ValueError: If backend type is not supported
    """
    if backend == STORE_LOCAL:
        from .local import LocalChatStore
        return LocalChatStore(**kwargs)

    elif backend == STORE_REMOTE:
        from .remote import RemoteChatStore
        return RemoteChatStore(**kwargs)

    raise ValueError(
        f"Unsupported chat store backend: {backend}. "
        f"Supported backends: {STORE_LOCAL}, {STORE_REMOTE}"
    )
