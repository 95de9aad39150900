"""Pytest configuration and shared fixtures."""
import asyncio
import json
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from askai.assistant import AssistantClient
from askai.auth import StaticTokenSource
from askai.chats import LocalChatStore, RemoteChatStore
from askai.devices import InMemoryDeviceStore
from askai.exceptions import TransportError
from askai.session import SessionController

API_URL = "http://api.test"
SYSTEM_PROMPT = "Reply in the user's language."


class FakeClock:
    """Clock advancing one second per call, so chat ids are distinct and ordered."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        self.now += 1
        return self.now


class ScriptedAssistant(AssistantClient):
    """Assistant returning canned replies, optionally held until released."""

    def __init__(self, replies: list[str] | None = None, fail: bool = False):
        self.replies = list(replies or [])
        self.fail = fail
        self.calls: list[tuple[str, str]] = []
        self.gate: asyncio.Event | None = None
        self.started = asyncio.Event()

    def hold(self) -> None:
        """Make the next ask() wait until release() is called."""
        self.gate = asyncio.Event()

    def release(self) -> None:
        self.gate.set()

    async def ask(self, user_text: str, system_prompt: str) -> str:
        self.calls.append((user_text, system_prompt))
        self.started.set()
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise TransportError("Assistant endpoint returned 500", status_code=500)
        if self.replies:
            return self.replies.pop(0)
        return f"echo: {user_text}"

    async def close(self) -> None:
        pass


class FakeConversationAPI:
    """In-memory conversation API served through httpx.MockTransport."""

    def __init__(self, token: str = "remote-token"):
        self.token = token
        self.chats: dict[str, dict] = {}
        self.messages: dict[str, list[dict]] = {}
        self.requests: list[httpx.Request] = []
        self.fail_message_posts = False
        self._next_id = 1
        self._clock = datetime(2026, 1, 1, tzinfo=timezone.utc)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=API_URL, transport=httpx.MockTransport(self.handler))

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.headers.get("Authorization") != f"Bearer {self.token}":
            return httpx.Response(401, json={"detail": "Invalid token"})

        parts = request.url.path.strip("/").split("/")
        body = json.loads(request.content) if request.content else {}

        if parts == ["chats"]:
            if request.method == "GET":
                # Deliberately oldest first; the client orders the list
                return httpx.Response(200, json=list(self.chats.values()))
            if request.method == "POST":
                chat_id = f"c{self._next_id}"
                self._next_id += 1
                self._clock += timedelta(minutes=1)
                chat = {"id": chat_id, "title": body["title"], "created_at": self._clock.isoformat()}
                self.chats[chat_id] = chat
                self.messages[chat_id] = []
                return httpx.Response(201, json=chat)

        chat_id = parts[1] if len(parts) > 1 else None
        if chat_id not in self.chats:
            return httpx.Response(404, json={"detail": "Chat not found"})

        if len(parts) == 2:
            if request.method == "GET":
                return httpx.Response(200, json=self.chats[chat_id])
            if request.method == "DELETE":
                del self.chats[chat_id]
                del self.messages[chat_id]
                return httpx.Response(204)
            if request.method == "PATCH":
                self.chats[chat_id]["title"] = body["title"]
                return httpx.Response(200, json=self.chats[chat_id])

        if len(parts) == 3 and parts[2] == "messages":
            if request.method == "GET":
                return httpx.Response(200, json=self.messages[chat_id])
            if request.method == "POST":
                if self.fail_message_posts:
                    return httpx.Response(503, json={"detail": "Unavailable"})
                self.messages[chat_id].append({"role": body["role"], "content": body["content"]})
                return httpx.Response(201, json=body)

        return httpx.Response(405)


@pytest.fixture
def device():
    """Return an empty in-memory device store."""
    return InMemoryDeviceStore()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def local_store(device, clock):
    """Return a local chat store for one authenticated user."""
    return LocalChatStore(device, StaticTokenSource("alice-token"), clock=clock)


@pytest.fixture
def api():
    return FakeConversationAPI()


@pytest.fixture
async def remote_store(api):
    """Return a remote chat store talking to the fake API."""
    async with api.client() as client:
        yield RemoteChatStore(StaticTokenSource(api.token), client=client)


@pytest.fixture
def assistant():
    return ScriptedAssistant()


@pytest.fixture(params=["local", "remote"])
async def any_store(request, device, clock, api):
    """Each test using this fixture runs once per store variant."""
    if request.param == "local":
        yield LocalChatStore(device, StaticTokenSource("alice-token"), clock=clock)
    else:
        async with api.client() as client:
            yield RemoteChatStore(StaticTokenSource(api.token), client=client)


@pytest.fixture
def make_controller(assistant):
    """Return a factory building a controller over a given store."""
    def _make(store, assistant_client=None, **kwargs):
        kwargs.setdefault("system_prompt", SYSTEM_PROMPT)
        return SessionController(store, assistant_client or assistant, **kwargs)
    return _make


@pytest.fixture
def api_url():
    return API_URL


@pytest.fixture
def system_prompt():
    return SYSTEM_PROMPT


@pytest.fixture
def make_assistant():
    """Return the ScriptedAssistant class for tests needing their own instance."""
    return ScriptedAssistant
