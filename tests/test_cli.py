"""Tests for the askai command line interface."""
import json

import httpx
import pytest
from typer.testing import CliRunner

from askai.assistant import HTTPAssistantClient
from askai.auth import StaticTokenSource
from askai.chats import RemoteChatStore
from askai.cli import app, providers
from askai.config import FALLBACK_REPLY

runner = CliRunner()


class FakeAskEndpoint:
    """Assistant endpoint echoing the message back, or failing with ``status``."""

    def __init__(self):
        self.status = 200
        self.seen: list[dict] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        self.seen.append(payload)
        if self.status != 200:
            return httpx.Response(self.status, json={"detail": "Internal error"})
        return httpx.Response(200, json={"response": f"echo: {payload['message']}"})


@pytest.fixture(autouse=True)
def cli_env(tmp_path, monkeypatch):
    """Point the CLI at a throwaway device database."""
    monkeypatch.setenv("ASKAI_DB_PATH", str(tmp_path / "device.db"))
    monkeypatch.setenv("ASKAI_STORE", "local")
    monkeypatch.setenv("ASKAI_ASSISTANT", "http")
    monkeypatch.delenv("ASKAI_ACCESS_TOKEN", raising=False)


@pytest.fixture
def endpoint(monkeypatch):
    """Route the CLI's assistant through a MockTransport."""
    fake = FakeAskEndpoint()

    def _get_assistant(console=None):
        client = httpx.AsyncClient(transport=httpx.MockTransport(fake.handler))
        return HTTPAssistantClient("http://assistant.test/ask", client=client)

    monkeypatch.setattr(providers, "get_assistant", _get_assistant)
    return fake


def _created_id(output: str) -> str:
    return output.strip().split()[-1]


def test_chats_requires_login():
    result = runner.invoke(app, ["chats"])

    assert result.exit_code == 0
    assert "Not logged in" in result.output


def test_login_new_and_list():
    assert runner.invoke(app, ["login", "--token", "alice-token"]).exit_code == 0

    empty = runner.invoke(app, ["chats"])
    assert "No conversations yet" in empty.output

    created = runner.invoke(app, ["new", "Trip to Coorg"])
    assert created.exit_code == 0
    assert "Created chat" in created.output

    listed = runner.invoke(app, ["chats"])
    assert "Trip to Coorg" in listed.output


def test_rename_show_and_delete():
    runner.invoke(app, ["login", "--token", "alice-token"])
    chat_id = _created_id(runner.invoke(app, ["new"]).output)

    assert runner.invoke(app, ["rename", chat_id, "Renamed chat"]).exit_code == 0
    shown = runner.invoke(app, ["show", chat_id])
    assert "Renamed chat" in shown.output

    assert runner.invoke(app, ["delete", chat_id, "--yes"]).exit_code == 0
    assert "No conversations yet" in runner.invoke(app, ["chats"]).output


def test_show_missing_chat_fails():
    runner.invoke(app, ["login", "--token", "alice-token"])
    result = runner.invoke(app, ["show", "does-not-exist"])

    assert result.exit_code == 1
    assert "Chat not found" in result.output


def test_logout_hides_chats():
    runner.invoke(app, ["login", "--token", "alice-token"])
    runner.invoke(app, ["new", "Private"])

    assert runner.invoke(app, ["logout"]).exit_code == 0
    assert "Not logged in" in runner.invoke(app, ["chats"]).output


def test_tokens_do_not_share_chats(monkeypatch):
    runner.invoke(app, ["login", "--token", "alice-token"])
    runner.invoke(app, ["new", "Alice only"])

    monkeypatch.setenv("ASKAI_ACCESS_TOKEN", "bob-token")
    assert "Alice only" not in runner.invoke(app, ["chats"]).output


def test_ask_prints_reply(endpoint):
    runner.invoke(app, ["login", "--token", "alice-token"])

    result = runner.invoke(app, ["ask", "Namaskara Bengaluru"])

    assert result.exit_code == 0
    assert "echo: Namaskara Bengaluru" in result.output
    assert endpoint.seen[0]["message"] == "Namaskara Bengaluru"
    assert "Kannada" in endpoint.seen[0]["system_prompt"]
    assert "Namaskara Bengaluru" in runner.invoke(app, ["chats"]).output


def test_ask_into_existing_chat(endpoint):
    runner.invoke(app, ["login", "--token", "alice-token"])
    chat_id = _created_id(runner.invoke(app, ["new", "Travel"]).output)
    runner.invoke(app, ["new", "Newer"])

    assert runner.invoke(app, ["ask", "--chat", chat_id, "Mysore palace"]).exit_code == 0

    shown = runner.invoke(app, ["show", chat_id])
    assert "Mysore palace" in shown.output
    assert "echo: Mysore palace" in shown.output


def test_ask_falls_back_when_assistant_fails(endpoint):
    endpoint.status = 500
    runner.invoke(app, ["login", "--token", "alice-token"])

    result = runner.invoke(app, ["ask", "Hello"])

    assert result.exit_code == 0
    assert FALLBACK_REPLY in result.output
    assert len(endpoint.seen) == 1


def test_ask_requires_login(endpoint):
    result = runner.invoke(app, ["ask", "Hello"])

    assert result.exit_code == 0
    assert "Not logged in" in result.output
    assert endpoint.seen == []


def test_ask_reports_expired_session(endpoint, api, api_url, monkeypatch):
    """Test that a 401 while saving the exchange asks the user to log in again."""
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "POST" and request.url.path.endswith("/messages"):
            return httpx.Response(401, json={"detail": "Token expired"})
        return api.handler(request)

    def _get_store(device, tokens, console=None):
        client = httpx.AsyncClient(base_url=api_url, transport=httpx.MockTransport(handler))
        return RemoteChatStore(StaticTokenSource(api.token), client=client)

    monkeypatch.setattr(providers, "get_store", _get_store)

    result = runner.invoke(app, ["ask", "Hello"])

    assert result.exit_code == 0
    assert "echo: Hello" in result.output
    assert "Session expired" in result.output
    assert "askai login" in result.output


def test_chat_session(endpoint):
    runner.invoke(app, ["login", "--token", "alice-token"])

    result = runner.invoke(app, ["chat"], input="/new\nNamaskara Bengaluru\n/list\n/quit\n")

    assert result.exit_code == 0
    assert "Started chat" in result.output
    assert "echo: Namaskara Bengaluru" in result.output
    assert "Goodbye" in result.output
    assert "Namaskara Bengaluru" in runner.invoke(app, ["chats"]).output


def test_chat_switch_and_delete(endpoint):
    runner.invoke(app, ["login", "--token", "alice-token"])
    chat_id = _created_id(runner.invoke(app, ["new", "Old"]).output)
    runner.invoke(app, ["ask", "--chat", chat_id, "Coorg coffee"])
    runner.invoke(app, ["new", "Newer"])

    script = f"/switch {chat_id}\n/delete {chat_id}\n/switch {chat_id}\n/quit\n"
    result = runner.invoke(app, ["chat"], input=script)

    assert result.exit_code == 0
    assert "echo: Coorg coffee" in result.output
    assert f"Deleted chat {chat_id}" in result.output
    assert "Chat not found" in result.output
    assert "Coorg coffee" not in runner.invoke(app, ["chats"]).output


def test_chat_ends_on_end_of_input(endpoint):
    runner.invoke(app, ["login", "--token", "alice-token"])

    result = runner.invoke(app, ["chat"], input="hi\n")

    assert result.exit_code == 0
    assert "echo: hi" in result.output
    assert "Goodbye" in result.output


def test_chat_requires_login(endpoint):
    result = runner.invoke(app, ["chat"])

    assert result.exit_code == 1
    assert "Not logged in" in result.output
