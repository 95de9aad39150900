import logging

import httpx

from ...config import DEFAULT_ASK_URL, DEFAULT_HTTP_TIMEOUT
from ...exceptions import TransportError
from ..base import AssistantClient

logger = logging.getLogger(__name__)


class HTTPAssistantClient(AssistantClient):
    """Assistant reached through the ``/ask`` completion endpoint.

    Hidden design decisions:
    - Request body ``{"message", "system_prompt"}``
    - Reply extraction from ``{"response"}``
    - Treating any non-2xx status as failure
    """

    def __init__(
        self,
        url: str = DEFAULT_ASK_URL,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        client: httpx.AsyncClient | None = None
    ):
        """Initialize the endpoint client.

        Args:
            url: Completion endpoint URL
            timeout: Request timeout in seconds
            client: Optional preconfigured httpx client
        """
        self._url = url
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def url(self) -> str:
        return self._url

    async def ask(self, user_text: str, system_prompt: str) -> str:
        payload = {"message": user_text, "system_prompt": system_prompt}

        try:
            response = await self._client.post(self._url, json=payload)
        except httpx.HTTPError as e:
            raise TransportError(f"Assistant request failed: {e}") from e

        if response.is_error:
            raise TransportError(
                f"Assistant endpoint returned {response.status_code}",
                status_code=response.status_code
            )

        try:
            data = response.json()
        except ValueError as e:
            raise TransportError(f"Assistant returned invalid JSON: {e}") from e

        reply = data.get("response") if isinstance(data, dict) else None
        if not isinstance(reply, str):
            raise TransportError("Assistant reply is missing the 'response' field")

        logger.debug("Assistant replied with %d characters", len(reply))
        return reply

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()
