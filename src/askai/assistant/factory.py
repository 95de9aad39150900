from typing import Any

from ..config import ASSISTANT_HTTP, ASSISTANT_OPENAI
from .base import AssistantClient
from .providers import HTTPAssistantClient, OpenAIAssistantClient


def create_assistant_client(backend: str = ASSISTANT_HTTP, **config: Any) -> AssistantClient:
    """Create an assistant client instance.

    This factory function hides the instantiation logic for different backends.

    Args:
        backend: Backend type ('http', 'openai')
        **config: Backend-specific configuration
            For http:
                - url: str (default: 'http://127.0.0.1:8000/ask')
                - timeout: float
                - client: httpx.AsyncClient
            For openai:
                - api_key: str (required)
                - model: str (default: 'gpt-4o-mini')
                - base_url: str | None

    Returns:
        Initialized assistant client

    Raises:
        ValueError: If backend type is not supported
        TypeError: If required configuration is missing

    Examples:
        >>> client = create_assistant_client("http", url="http://127.0.0.1:8000/ask")

        >>> client = create_assistant_client(
        ...     "openai",
        ...     api_key="sk-...",
        ...     model="gpt-4o-mini"
        ... )
    """
    backend_lower = backend.lower()

    if backend_lower == ASSISTANT_HTTP:
        return HTTPAssistantClient(**config)

    if backend_lower == ASSISTANT_OPENAI:
        if "api_key" not in config:
            raise TypeError("OpenAI assistant requires 'api_key' in config")
        return OpenAIAssistantClient(**config)

    raise ValueError(
        f"Unsupported assistant backend: {backend}. "
        f"Supported backends: '{ASSISTANT_HTTP}', '{ASSISTANT_OPENAI}'"
    )
