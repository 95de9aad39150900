"""Remote chat store.

Each operation is an independent call to the conversation API,
authenticated with a bearer credential. Messages are not embedded in the
chat list and are fetched per chat.
"""

import logging
from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError

from ..auth import TokenSource
from ..config import DEFAULT_API_URL, DEFAULT_HTTP_TIMEOUT
from ..exceptions import (
    ChatNotFoundError,
    InvalidInputError,
    SessionExpiredError,
    SessionUnavailableError,
    TransportError,
)
from .base import ChatStore
from .models import Chat, ChatSummary, Message, coerce_message

logger = logging.getLogger(__name__)

_SUMMARY = TypeAdapter(ChatSummary)
_SUMMARIES = TypeAdapter(list[ChatSummary])
_MESSAGES = TypeAdapter(list[Message])


class RemoteChatStore(ChatStore):
    """Chat store backed by the HTTP conversation API.

    Hidden design decisions:
    - Endpoint layout and payload shapes
    - Bearer authentication
    - Mapping of HTTP statuses onto ChatNotFoundError / SessionExpiredError / TransportError
    """

    def __init__(
        self,
        tokens: TokenSource,
        base_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        client: httpx.AsyncClient | None = None
    ):
        """Initialize the remote store.

        Args:
            tokens: Source of the bearer token
            base_url: API root, e.g. http://127.0.0.1:8000
            timeout: Per-request timeout in seconds
            client: Optional preconfigured client (its base_url is used as-is)
        """
        self._tokens = tokens
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def connect(self) -> None:
        pass

    async def disconnect(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        chat_id: str | None = None
    ) -> httpx.Response:
        """Send an authenticated request and map failure statuses to errors."""
        token = await self._tokens.get_token()
        if not token:
            raise SessionUnavailableError()

        try:
            response = await self._client.request(
                method,
                path,
                json=json,
                headers={"Authorization": f"Bearer {token}"}
            )
        except httpx.HTTPError as e:
            raise TransportError(f"{method} {path} failed: {e}") from e

        logger.debug("%s %s -> %s", method, path, response.status_code)

        if response.status_code == 401:
            raise SessionExpiredError()
        if response.status_code == 404 and chat_id is not None:
            raise ChatNotFoundError(chat_id)
        if response.is_error:
            raise TransportError(
                f"{method} {path} returned {response.status_code}",
                status_code=response.status_code
            )
        return response

    @staticmethod
    def _parse(response: httpx.Response, adapter: TypeAdapter) -> Any:
        try:
            return adapter.validate_python(response.json())
        except (ValueError, ValidationError) as e:
            raise InvalidInputError(f"Malformed response from {response.request.url}: {e}") from e

    async def is_available(self) -> bool:
        return bool(await self._tokens.get_token())

    async def list_chats(self) -> list[ChatSummary]:
        if not await self.is_available():
            return []
        response = await self._request("GET", "/chats")
        chats = self._parse(response, _SUMMARIES)
        if all(chat.created_at for chat in chats):
            chats.sort(key=lambda chat: chat.created_at, reverse=True)
        return chats

    async def create_chat(self, title: str) -> Chat:
        response = await self._request("POST", "/chats", json={"title": title})
        summary = self._parse(response, _SUMMARY)
        logger.debug("Created chat %s", summary.id)
        return Chat(**summary.model_dump())

    async def delete_chat(self, chat_id: str) -> None:
        try:
            await self._request("DELETE", f"/chats/{chat_id}", chat_id=chat_id)
        except ChatNotFoundError:
            logger.debug("Chat %s already deleted", chat_id)

    async def get_chat(self, chat_id: str) -> Chat:
        if not await self.is_available():
            raise ChatNotFoundError(chat_id)
        response = await self._request("GET", f"/chats/{chat_id}", chat_id=chat_id)
        summary = self._parse(response, _SUMMARY)
        response = await self._request("GET", f"/chats/{chat_id}/messages", chat_id=chat_id)
        messages = self._parse(response, _MESSAGES)
        return Chat(**summary.model_dump(), messages=messages)

    async def append_message(self, chat_id: str, message: Message) -> Message:
        message = coerce_message(message)
        await self._request(
            "POST",
            f"/chats/{chat_id}/messages",
            json=message.model_dump(mode="json"),
            chat_id=chat_id
        )
        return message

    async def update_title(self, chat_id: str, title: str) -> ChatSummary:
        response = await self._request(
            "PATCH",
            f"/chats/{chat_id}",
            json={"title": title},
            chat_id=chat_id
        )
        return self._parse(response, _SUMMARY)

    @property
    def backend_type(self) -> str:
        return "remote"
