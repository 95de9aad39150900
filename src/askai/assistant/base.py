from abc import ABC, abstractmethod
from typing import Any


class AssistantClient(ABC):
    """Abstract base class for assistant completion clients.

    This module hides the design decision of which completion service
    answers the user. Implementations must handle:
    - Client setup and authentication
    - Request/response format conversion
    - Mapping every transport failure onto TransportError

    A call is a single request/response: no streaming, no retry.

    Supports async context manager protocol for proper resource cleanup:
        async with client:
            reply = await client.ask("Hello", system_prompt)
    """

    @abstractmethod
    async def ask(self, user_text: str, system_prompt: str) -> str:
        """Ask the assistant a single question.

        Args:
            user_text: The user's utterance, sent as typed
            system_prompt: Fixed instructions, passed through unmodified

        Returns:
            The assistant's reply text

        Raises:
            TransportError: On network failure, non-success status or malformed reply
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections or resources."""
        pass

    async def __aenter__(self) -> "AssistantClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
