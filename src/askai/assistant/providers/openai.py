from typing import Any

from openai import AsyncOpenAI, OpenAIError

from ...exceptions import TransportError
from ..base import AssistantClient


class OpenAIAssistantClient(AssistantClient):
    """Assistant answered directly by an OpenAI-compatible chat completion.

    Hidden design decisions:
    - OpenAI API client initialization
    - Message format conversion (system prompt + one user turn)
    - Wrapping SDK errors in TransportError
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        base_url: str | None = None,
        temperature: float = 0.7,
        **client_kwargs: Any
    ):
        """Initialize OpenAI assistant.

        Args:
            api_key: OpenAI API key
            model: Chat model to use
            base_url: Optional custom API base URL
            temperature: Sampling temperature
            **client_kwargs: Additional kwargs for AsyncOpenAI client
        """
        self._model = model
        self._temperature = temperature
        self._client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            **client_kwargs
        )

    @property
    def model(self) -> str:
        """Get the model name."""
        return self._model

    async def ask(self, user_text: str, system_prompt: str) -> str:
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_text},
        ]

        try:
            completion = await self._client.chat.completions.create(
                model=self._model,
                messages=messages,
                temperature=self._temperature,
            )
        except OpenAIError as e:
            raise TransportError(f"OpenAI request failed: {e}") from e

        if not completion.choices:
            raise TransportError("OpenAI returned no choices")
        return completion.choices[0].message.content or ""

    async def close(self) -> None:
        """Close the OpenAI client."""
        await self._client.close()
