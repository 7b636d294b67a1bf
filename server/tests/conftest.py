import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
root_str = str(ROOT)
if root_str not in sys.path:
    sys.path.insert(0, root_str)

from boussole.config import AIConfig  # noqa: E402
from boussole.errors import StorageError  # noqa: E402
from boussole.services.cache import InsightCache  # noqa: E402
from boussole.services.storage import MemoryStorage  # noqa: E402


class FakeClock:
    """Epoch-ms clock the tests move by hand."""

    def __init__(self, now: int = 1_700_000_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now


class StubClient:
    """Stands in for GenerativeClient; records every prompt it receives."""

    def __init__(self, reply: str = "", error: Exception = None, chunks=None):
        self.reply = reply
        self.error = error
        self.chunks = list(chunks or [])
        self.prompts = []
        self.messages = None

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply

    async def stream(self, messages):
        self.messages = list(messages)
        for chunk in self.chunks:
            yield chunk
        if self.error is not None:
            raise self.error


class BrokenStorage:
    """Storage whose every operation fails, like a full or corrupt medium."""

    def get_item(self, key):
        raise StorageError("corrupt")

    def set_item(self, key, value):
        raise StorageError("quota exceeded")

    def remove_item(self, key):
        raise StorageError("corrupt")

    def keys(self):
        raise StorageError("corrupt")


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def cache(storage, clock):
    return InsightCache(storage, clock=clock)


@pytest.fixture
def broken_storage():
    return BrokenStorage()


@pytest.fixture
def config():
    return AIConfig(api_key="test-key")


@pytest.fixture
def no_key_config():
    return AIConfig(api_key="")


@pytest.fixture
def make_client():
    return StubClient


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch, tmp_path):
    """Keep the developer's .env and API keys out of the tests."""
    monkeypatch.chdir(tmp_path)
    for key in (
        "VITE_API_KEY",
        "API_KEY",
        "GEMINI_API_KEY",
        "VITE_SUPABASE_URL",
        "VITE_SUPABASE_ANON_KEY",
        "SUPABASE_URL",
        "SUPABASE_ANON_KEY",
    ):
        monkeypatch.delenv(key, raising=False)
