import io
from typing import Any

import pytest
from rich.console import Console

from config.settings import settings
from ask_cli.context import ContextManager
from ask_cli.history import HistoryManager


class FakeChat:
    """Chat session returning scripted replies; exceptions in the script are raised."""

    def __init__(self, replies: list[Any]) -> None:
        self.replies = list(replies)
        self.sent: list[str] = []

    def _next(self, text: str) -> Any:
        self.sent.append(text)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    def send(self, text: str) -> str:
        return self._next(text)

    def send_stream(self, text: str):
        reply = self._next(text)
        return iter(reply)


class FakeClient:
    """Stands in for GeminiClient."""

    model = "gemini-test"

    def __init__(self, reply: Any = "ok", chunks: Any = None, chat_replies: list[Any] | None = None) -> None:
        self.reply = reply
        self.chunks = chunks
        self.chat = FakeChat(chat_replies or [])
        self.calls: list[dict[str, Any]] = []
        self.chat_history: list[Any] | None = None

    def generate(self, messages, params=None, system_instruction=None) -> str:
        self.calls.append({"messages": list(messages), "params": params, "system_instruction": system_instruction})
        if isinstance(self.reply, Exception):
            raise self.reply
        return self.reply

    def stream(self, messages, params=None, system_instruction=None):
        self.calls.append({"messages": list(messages), "params": params, "system_instruction": system_instruction})
        return self.chunks

    def start_chat(self, history, params=None, system_instruction=None) -> FakeChat:
        self.chat_history = list(history)
        return self.chat


def scripted(*answers: Any):
    """Build an ``ask`` callable that returns (or raises) the given answers in order."""
    queue = list(answers)

    def ask(prompt: str) -> str:
        answer = queue.pop(0)
        if isinstance(answer, BaseException) or (isinstance(answer, type) and issubclass(answer, BaseException)):
            raise answer
        return answer

    return ask


@pytest.fixture
def output():
    return io.StringIO()


@pytest.fixture
def console(output):
    return Console(file=output, width=120, color_system=None)


@pytest.fixture
def history(tmp_path):
    return HistoryManager(path=tmp_path / "history.json", load_pairs=10, keep_pairs=20)


@pytest.fixture
def contexts(tmp_path, console):
    return ContextManager(
        local_path=tmp_path / "context.local",
        general_path=tmp_path / "context.general",
        console=console,
    )


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Run in an empty directory with every state file inside it."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("HISTORY_FILE", raising=False)
    monkeypatch.delenv("LOCAL_CONTEXT_FILE", raising=False)
    monkeypatch.setattr(settings, "history_file", tmp_path / ".ask_history.json")
    monkeypatch.setattr(settings, "local_context_file", tmp_path / ".ask_context.local")
    monkeypatch.setattr(settings, "general_context_file", tmp_path / ".ask_context.general")
    monkeypatch.setattr(settings, "gemini_api_key", None)
    monkeypatch.setattr(settings, "default_model", None)
    return tmp_path
