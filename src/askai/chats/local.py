"""Local chat store.

Keeps the whole chat list of one namespace, messages included, as a single
JSON document in device storage. Every mutation re-serializes the whole list
under a per-store lock.
"""

import asyncio
import logging
import time
from collections.abc import Callable

from pydantic import TypeAdapter, ValidationError

from ..auth import TokenSource
from ..devices import DeviceStore
from ..exceptions import ChatNotFoundError, InvalidInputError, SessionUnavailableError
from ..identity import derive_key, namespace_storage_key
from .base import ChatStore
from .models import Chat, ChatSummary, Message, coerce_message

logger = logging.getLogger(__name__)

_CHAT_LIST = TypeAdapter(list[Chat])


class LocalChatStore(ChatStore):
    """Chat store persisted in device storage, namespaced by token hash.

    Two tokens never see each other's chats: each one's list lives under
    its own ``chats_<namespace key>`` entry.
    """

    def __init__(
        self,
        device: DeviceStore,
        tokens: TokenSource,
        clock: Callable[[], float] = time.time
    ):
        """Initialize the local store.

        Args:
            device: Device key-value storage
            tokens: Source of the auth token used to derive the namespace
            clock: Time source in seconds; chat ids are its millisecond value
        """
        self._device = device
        self._tokens = tokens
        self._clock = clock
        # Serializes load-modify-save so overlapping writes never drop each other
        self._lock = asyncio.Lock()

    async def connect(self) -> None:
        await self._device.connect()

    async def disconnect(self) -> None:
        await self._device.disconnect()

    async def _storage_key(self) -> str | None:
        key = derive_key(await self._tokens.get_token())
        return namespace_storage_key(key) if key else None

    async def _load(self) -> list[Chat]:
        storage_key = await self._storage_key()
        if storage_key is None:
            return []
        return await self._read(storage_key)

    async def _read(self, storage_key: str) -> list[Chat]:
        raw = await self._device.get_item(storage_key)
        if not raw:
            return []
        try:
            return _CHAT_LIST.validate_json(raw)
        except ValidationError as e:
            raise InvalidInputError(f"Corrupted chat list under {storage_key}: {e}") from e

    async def _load_for_write(self) -> tuple[str, list[Chat]]:
        storage_key = await self._storage_key()
        if storage_key is None:
            raise SessionUnavailableError()
        return storage_key, await self._read(storage_key)

    async def _save(self, storage_key: str, chats: list[Chat]) -> None:
        payload = _CHAT_LIST.dump_json(chats, exclude_none=True).decode("utf-8")
        await self._device.set_item(storage_key, payload)

    def _new_id(self, chats: list[Chat]) -> str:
        taken = {chat.id for chat in chats}
        candidate = int(self._clock() * 1000)
        while str(candidate) in taken:
            candidate += 1
        return str(candidate)

    @staticmethod
    def _find(chats: list[Chat], chat_id: str) -> Chat:
        for chat in chats:
            if chat.id == chat_id:
                return chat
        raise ChatNotFoundError(chat_id)

    async def is_available(self) -> bool:
        return await self._storage_key() is not None

    async def list_chats(self) -> list[ChatSummary]:
        return [chat.summary() for chat in await self._load()]

    async def create_chat(self, title: str) -> Chat:
        async with self._lock:
            storage_key, chats = await self._load_for_write()
            chat = Chat(id=self._new_id(chats), title=title)
            await self._save(storage_key, [chat, *chats])
        logger.debug("Created chat %s", chat.id)
        return chat

    async def delete_chat(self, chat_id: str) -> None:
        async with self._lock:
            storage_key, chats = await self._load_for_write()
            remaining = [chat for chat in chats if chat.id != chat_id]
            if len(remaining) == len(chats):
                return
            await self._save(storage_key, remaining)
        logger.debug("Deleted chat %s", chat_id)

    async def get_chat(self, chat_id: str) -> Chat:
        return self._find(await self._load(), chat_id)

    async def append_message(self, chat_id: str, message: Message) -> Message:
        message = coerce_message(message)
        async with self._lock:
            storage_key, chats = await self._load_for_write()
            chat = self._find(chats, chat_id)
            chat.messages.append(message)
            await self._save(storage_key, chats)
        return message

    async def update_title(self, chat_id: str, title: str) -> ChatSummary:
        async with self._lock:
            storage_key, chats = await self._load_for_write()
            chat = self._find(chats, chat_id)
            chat.title = title
            await self._save(storage_key, chats)
        return chat.summary()

    @property
    def backend_type(self) -> str:
        return "local"
