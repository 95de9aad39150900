"""Device key-value storage.

String-keyed, string-valued storage standing in for the browser's local
storage. The local chat store and the device token source sit on top of it.
"""

from abc import ABC, abstractmethod
from pathlib import Path

import aiosqlite


class DeviceStore(ABC):
    """Abstract string key-value store."""

    @abstractmethod
    async def connect(self) -> None:
        """Open the store."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the store."""

    @abstractmethod
    async def get_item(self, key: str) -> str | None:
        """Get a value, or None if the key is absent."""

    @abstractmethod
    async def set_item(self, key: str, value: str) -> None:
        """Set a value, replacing any previous one."""

    @abstractmethod
    async def remove_item(self, key: str) -> None:
        """Remove a key. Removing an absent key is a no-op."""

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Get the backend type identifier."""


class InMemoryDeviceStore(DeviceStore):
    """Dict-backed device store (session-only).

    Data is lost when the application exits.
    Suitable for single-session use or testing.
    """

    def __init__(self, items: dict[str, str] | None = None):
        self._items: dict[str, str] = dict(items or {})

    async def connect(self) -> None:
        pass

    async def disconnect(self) -> None:
        pass

    async def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    async def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        """All keys currently stored."""
        return list(self._items)

    @property
    def backend_type(self) -> str:
        return "memory"


class SQLiteDeviceStore(DeviceStore):
    """SQLite-backed device store.

    Keeps every item as a row of a single table in a database file,
    so data survives across runs.
    """

    def __init__(self, path: str | Path = "./askai_device.db"):
        self._db_path = Path(path)
        self._connection: aiosqlite.Connection | None = None

    async def connect(self) -> None:
        """Open the database and create the items table."""
        if self._connection is not None:
            return
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._connection = await aiosqlite.connect(self._db_path)
        await self._connection.execute("""
            CREATE TABLE IF NOT EXISTS items (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            )
        """)
        await self._connection.commit()

    async def disconnect(self) -> None:
        if self._connection:
            await self._connection.close()
            self._connection = None

    def _require_connection(self) -> aiosqlite.Connection:
        if self._connection is None:
            raise RuntimeError("Device store not connected. Call connect() first.")
        return self._connection

    async def get_item(self, key: str) -> str | None:
        conn = self._require_connection()
        async with conn.execute("SELECT value FROM items WHERE key = ?", (key,)) as cursor:
            row = await cursor.fetchone()
        return row[0] if row else None

    async def set_item(self, key: str, value: str) -> None:
        conn = self._require_connection()
        await conn.execute("""
            INSERT INTO items (key, value) VALUES (?, ?)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value
        """, (key, value))
        await conn.commit()

    async def remove_item(self, key: str) -> None:
        conn = self._require_connection()
        await conn.execute("DELETE FROM items WHERE key = ?", (key,))
        await conn.commit()

    @property
    def backend_type(self) -> str:
        return "sqlite"
