import asyncio
import json
import socket
from pathlib import Path

import pytest

from tts_bridge.dispatcher import Dispatcher
from tts_bridge.scripts import ScriptSynchronizer


@pytest.fixture
def scripts_dir(tmp_path: Path) -> Path:
    """Fresh, existing script directory per test."""
    path = tmp_path / "scripts"
    path.mkdir()
    return path


@pytest.fixture
def synchronizer(scripts_dir: Path) -> ScriptSynchronizer:
    return ScriptSynchronizer(scripts_dir)


@pytest.fixture
def dispatcher(synchronizer: ScriptSynchronizer) -> Dispatcher:
    return Dispatcher(synchronizer, console_history=10)


class FakeGame:
    """Stands in for the game's command port and records what it receives."""

    def __init__(self) -> None:
        self.received: list[bytes] = []
        self.server: asyncio.Server | None = None
        self._got_data = asyncio.Event()

    @property
    def port(self) -> int:
        assert self.server is not None
        return self.server.sockets[0].getsockname()[1]

    async def start(self) -> None:
        self.server = await asyncio.start_server(self._on_connect, "127.0.0.1", 0)

    async def _on_connect(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        data = await reader.read()
        self.received.append(data)
        self._got_data.set()
        writer.close()

    async def next_message(self, timeout: float = 2.0) -> dict:
        await asyncio.wait_for(self._got_data.wait(), timeout)
        self._got_data.clear()
        return json.loads(self.received[-1])

    async def stop(self) -> None:
        if self.server is not None:
            self.server.close()
            await self.server.wait_closed()


@pytest.fixture
async def game():
    fake = FakeGame()
    await fake.start()
    yield fake
    await fake.stop()


@pytest.fixture
def closed_port() -> int:
    """A local port with nothing listening on it."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]
