"""Command forwarder: the outbound half of the protocol.

Each call builds one command, dials the game and writes it. Failures are
raised as DialError or WriteError and never retried.
"""

from __future__ import annotations

import asyncio
import logging

from .codec import encode
from .connection import ConnectionManager
from .errors import WriteError
from .models import Command, Operation, ScriptState
from .scripts import ScriptSynchronizer

logger = logging.getLogger(__name__)

GLOBAL_GUID = "-1"


class CommandForwarder:
    def __init__(self, connections: ConnectionManager, synchronizer: ScriptSynchronizer) -> None:
        self.connections = connections
        self.synchronizer = synchronizer

    async def send(
        self,
        operation: int,
        *,
        guid: str | None = None,
        script: str | None = None,
        custom_message: str | None = None,
        script_states: list[ScriptState] | None = None,
    ) -> int:
        """Send one command. Returns the number of bytes written."""
        command = Command(
            message_id=int(operation),
            guid=guid,
            script=script,
            custom_message=custom_message,
            script_states=script_states,
        )
        data = encode(command)
        _, writer = await self.connections.open_outbound()
        try:
            writer.write(data)
            await writer.drain()
        except OSError as e:
            raise WriteError(f"Could not send operation {operation} to game: {e}") from e
        finally:
            writer.close()
            try:
                await writer.wait_closed()
            except OSError as e:
                logger.debug(f"Error while closing outbound connection: {e}")
        logger.info(f"Sent operation {operation} ({len(data)} bytes)")
        return len(data)

    async def push_scripts(self) -> int:
        """Send every mirrored script back to the game. Returns the object count."""
        states = await asyncio.to_thread(self.synchronizer.collect)
        await self.send(Operation.SEND_SCRIPT_DATA, script_states=states)
        return len(states)

    async def execute_lua(self, code: str, guid: str = GLOBAL_GUID) -> int:
        return await self.send(Operation.EXEC_LUA_CODE, guid=guid, script=code)

    async def send_custom_message(self, text: str) -> int:
        return await self.send(Operation.SEND_CUSTOM_MESSAGE, custom_message=text)
