"""
Pytest configuration and shared fixtures.
"""

import pytest
import sys
from pathlib import Path

# Set asyncio mode
pytest_plugins = ('pytest_asyncio',)

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from playground.context import PlaygroundContext  # noqa: E402
from playground.streaming.transport import SessionUsage  # noqa: E402


def pytest_configure(config):
    config.option.asyncio_mode = "auto"


@pytest.fixture
def playground_home(tmp_path):
    """A throwaway data directory for storages."""
    home = tmp_path / ".ai-playground"
    home.mkdir()
    return home


class ScriptedTransport:
    """
    Stands in for HttpxChatTransport and replays canned replies in order.

    A reply is a string (one delta), a list of deltas, or an exception to
    raise. Items in a list may themselves be exceptions, raised after the
    earlier deltas have been yielded. When `hold` is set to an asyncio.Event
    the stream pauses after its first delta until the event fires.
    """

    def __init__(self):
        self.replies = []
        self.payloads = []
        self.hold = None
        self.connection_ok = True
        self.models = None
        self.closed = False
        self.usage = SessionUsage()

    def queue(self, *replies):
        self.replies.extend(replies)

    def _next(self):
        reply = self.replies.pop(0) if self.replies else "ok"
        if isinstance(reply, (str, Exception)):
            return [reply]
        return list(reply)

    async def stream_chat(self, provider, api_key, payload):
        self.payloads.append(payload)
        for index, item in enumerate(self._next()):
            if isinstance(item, Exception):
                raise item
            yield item
            if index == 0 and self.hold is not None:
                await self.hold.wait()

    async def complete(self, provider, api_key, payload):
        self.payloads.append(payload)
        text = ""
        for item in self._next():
            if isinstance(item, Exception):
                raise item
            text += item
        return text

    async def test_connection(self, provider, api_key):
        return self.connection_ok

    async def fetch_models(self, provider, api_key):
        return self.models

    async def aclose(self):
        self.closed = True


@pytest.fixture
def transport():
    return ScriptedTransport()


@pytest.fixture
def context(playground_home, transport):
    """Application root wired to the scripted transport, with an OpenAI key saved."""
    ctx = PlaygroundContext(home=playground_home, transport=transport)
    ctx.credentials.save("openai", "sk-test")
    return ctx
