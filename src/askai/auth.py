"""Auth token sources.

The token is an opaque capability: presence means "authenticated".
Nothing here inspects or validates it.
"""

from abc import ABC, abstractmethod

from .devices import DeviceStore
from .config import ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY


class TokenSource(ABC):
    """Supplies the current auth token."""

    @abstractmethod
    async def get_token(self) -> str | None:
        """Current token, or None when not authenticated."""


class StaticTokenSource(TokenSource):
    """A fixed token (or none)."""

    def __init__(self, token: str | None = None):
        self._token = token or None

    async def get_token(self) -> str | None:
        return self._token


class DeviceTokenSource(TokenSource):
    """Token kept in device storage under ``access_token``."""

    def __init__(self, device: DeviceStore):
        self._device = device

    async def get_token(self) -> str | None:
        return await self._device.get_item(ACCESS_TOKEN_KEY) or None

    async def login(self, access_token: str, refresh_token: str | None = None) -> None:
        """Store the tokens returned by the auth service."""
        await self._device.set_item(ACCESS_TOKEN_KEY, access_token)
        if refresh_token:
            await self._device.set_item(REFRESH_TOKEN_KEY, refresh_token)

    async def logout(self) -> None:
        """Forget both tokens. Locally persisted chats stay on the device."""
        await self._device.remove_item(ACCESS_TOKEN_KEY)
        await self._device.remove_item(REFRESH_TOKEN_KEY)
