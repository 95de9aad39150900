"""Provider factory functions for CLI.

Centralizes creation of the device store, token source, chat store and
assistant client from environment variables. Hides configuration details
from command implementations.
"""

import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from rich.console import Console

from ..assistant import AssistantClient, create_assistant_client
from ..auth import DeviceTokenSource, StaticTokenSource, TokenSource
from ..chats import ChatStore, create_chat_store
from ..config import (
    ASSISTANT_HTTP,
    ASSISTANT_OPENAI,
    DEFAULT_API_URL,
    DEFAULT_ASK_URL,
    DEFAULT_REPLY_TIMEOUT,
    STORE_LOCAL,
    STORE_REMOTE,
)
from ..devices import DeviceStore, SQLiteDeviceStore
from ..session import SessionController

_console = Console()


def get_device() -> DeviceStore:
    """Create the device store from environment variables.

    Environment variables:
        ASKAI_DB_PATH: SQLite file (default: ~/.askai/device.db)
    """
    path = os.getenv("ASKAI_DB_PATH") or Path.home() / ".askai" / "device.db"
    return SQLiteDeviceStore(path)


def get_tokens(device: DeviceStore) -> TokenSource:
    """Create the token source.

    Environment variables:
        ASKAI_ACCESS_TOKEN: Fixed token; when unset the token saved by
            ``askai login`` in the device store is used
    """
    token = os.getenv("ASKAI_ACCESS_TOKEN")
    if token:
        return StaticTokenSource(token)
    return DeviceTokenSource(device)


def get_store(device: DeviceStore, tokens: TokenSource, console: Console | None = None) -> ChatStore:
    """Create the chat store from environment variables.

    Environment variables:
        ASKAI_STORE: 'local' or 'remote' (default: local)
        ASKAI_API_URL: Conversation API root for the remote store
    """
    import typer

    con = console or _console
    backend = os.getenv("ASKAI_STORE", STORE_LOCAL).lower()

    if backend == STORE_LOCAL:
        return create_chat_store(STORE_LOCAL, device=device, tokens=tokens)

    if backend == STORE_REMOTE:
        return create_chat_store(
            STORE_REMOTE,
            tokens=tokens,
            base_url=os.getenv("ASKAI_API_URL", DEFAULT_API_URL)
        )

    con.print(f"[red]Error: Unknown chat store: {backend}[/red]")
    raise typer.Exit(code=1)


def get_assistant(console: Console | None = None) -> AssistantClient:
    """Create the assistant client from environment variables.

    Environment variables:
        ASKAI_ASSISTANT: 'http' or 'openai' (default: http)
        ASKAI_ASK_URL: Completion endpoint for the http assistant
        OPENAI_API_KEY: OpenAI API key (for openai assistant)
        OPENAI_CHAT_MODEL: OpenAI model (default: gpt-4o-mini)
    """
    import typer

    con = console or _console
    backend = os.getenv("ASKAI_ASSISTANT", ASSISTANT_HTTP).lower()

    if backend == ASSISTANT_HTTP:
        return create_assistant_client(ASSISTANT_HTTP, url=os.getenv("ASKAI_ASK_URL", DEFAULT_ASK_URL))

    if backend == ASSISTANT_OPENAI:
        api_key = os.getenv("OPENAI_API_KEY")
        if not api_key:
            con.print("[red]Error: OPENAI_API_KEY not set in environment[/red]")
            raise typer.Exit(code=1)
        model = os.getenv("OPENAI_CHAT_MODEL", "gpt-4o-mini")
        return create_assistant_client(ASSISTANT_OPENAI, api_key=api_key, model=model)

    con.print(f"[red]Error: Unknown assistant backend: {backend}[/red]")
    raise typer.Exit(code=1)


def get_reply_timeout() -> float:
    """ASKAI_REPLY_TIMEOUT in seconds (default: 60)."""
    return float(os.getenv("ASKAI_REPLY_TIMEOUT", str(DEFAULT_REPLY_TIMEOUT)))


@asynccontextmanager
async def open_controller(console: Console | None = None) -> AsyncIterator[SessionController]:
    """Wire a loaded SessionController and release everything afterwards."""
    device = get_device()
    tokens = get_tokens(device)
    store = get_store(device, tokens, console)
    assistant = get_assistant(console)

    await device.connect()
    try:
        await store.connect()
        controller = SessionController(store, assistant, reply_timeout=get_reply_timeout())
        await controller.load()
        yield controller
    finally:
        await assistant.close()
        await store.disconnect()
        await device.disconnect()
