from .base import AssistantClient
from .factory import create_assistant_client
from .providers import HTTPAssistantClient, OpenAIAssistantClient

__all__ = [
    "AssistantClient",
    "create_assistant_client",
    "HTTPAssistantClient",
    "OpenAIAssistantClient",
]
