from .endpoint import HTTPAssistantClient
from .openai import OpenAIAssistantClient

__all__ = ["HTTPAssistantClient", "OpenAIAssistantClient"]
