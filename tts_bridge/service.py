"""Wires the protocol engine together from one Settings value."""

from __future__ import annotations

import logging

from .commands import CommandForwarder
from .config import Settings
from .connection import ConnectionManager
from .dispatcher import Dispatcher
from .scripts import ScriptSynchronizer

logger = logging.getLogger(__name__)


class Bridge:
    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.synchronizer = ScriptSynchronizer(settings.scripts_dir)
        self.dispatcher = Dispatcher(self.synchronizer, settings.console_history)
        self.connections = ConnectionManager(
            self.dispatcher,
            game_host=settings.host,
            game_port=settings.game_port,
            framing=settings.framing,
            idle_timeout=settings.idle_timeout,
            dial_timeout=settings.dial_timeout,
        )
        self.commands = CommandForwarder(self.connections, self.synchronizer)

    async def start(self) -> None:
        """Create the script directory and start listening. Either failing is fatal."""
        self.synchronizer.ensure_directory()
        logger.info(f"Mirroring scripts into {self.synchronizer.directory}")
        await self.connections.listen(self.settings.host, self.settings.ide_port)

    async def stop(self) -> None:
        await self.connections.close()
        logger.info("Bridge stopped")
