"""Socket lifecycle for both directions.

Inbound: an asyncio server accepts game connections; each connection gets its
own task that decodes messages in arrival order and dispatches them. File
work runs in a worker thread so a slow disk only stalls that connection.

Outbound: every command dials the game port fresh. A failed dial raises
DialError to the caller and never touches the listener.
"""

from __future__ import annotations

import asyncio
import logging

from .codec import END_OF_STREAM, EnvelopeReader, Framing
from .dispatcher import Dispatcher
from .errors import DecodeError, DialError

logger = logging.getLogger(__name__)


class ConnectionManager:
    def __init__(
        self,
        dispatcher: Dispatcher,
        game_host: str = "127.0.0.1",
        game_port: int = 39999,
        framing: Framing = Framing.STRUCTURAL,
        idle_timeout: float | None = None,
        dial_timeout: float = 5.0,
    ) -> None:
        self.dispatcher = dispatcher
        self.game_host = game_host
        self.game_port = game_port
        self.framing = Framing(framing)
        self.idle_timeout = idle_timeout
        self.dial_timeout = dial_timeout
        self._server: asyncio.Server | None = None
        self._connections: set[asyncio.Task] = set()

    @property
    def port(self) -> int | None:
        """Port the listener is bound to (useful when listening on port 0)."""
        if self._server is None or not self._server.sockets:
            return None
        return self._server.sockets[0].getsockname()[1]

    @property
    def active_connections(self) -> int:
        return len(self._connections)

    async def listen(self, host: str, port: int) -> None:
        """Bind and start accepting. Bind errors propagate; they are fatal."""
        self._server = await asyncio.start_server(self._on_connect, host, port)
        logger.info(f"Listening for the game on {host}:{self.port}")

    async def close(self) -> None:
        server, self._server = self._server, None
        if server is not None:
            server.close()
        # wait_closed() also waits on live connections, so end them first.
        tasks = list(self._connections)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        if server is not None:
            await server.wait_closed()

    async def _on_connect(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        task = asyncio.current_task()
        if task is not None:
            self._connections.add(task)
        try:
            await self.handle_connection(reader, writer)
        finally:
            if task is not None:
                self._connections.discard(task)

    async def handle_connection(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        peer = writer.get_extra_info("peername")
        logger.info(f"Started handling connection from {peer}")
        stream = EnvelopeReader(reader, self.framing, self.idle_timeout)
        try:
            while True:
                item = await stream.decode_next()
                if item is END_OF_STREAM:
                    logger.info(f"Connection from {peer} closed by peer")
                    break
                if isinstance(item, DecodeError):
                    logger.warning(f"Skipping malformed message from {peer}: {item.reason}")
                    continue
                try:
                    await asyncio.to_thread(self.dispatcher.dispatch, item)
                except Exception:
                    logger.exception(f"Handler failed for messageID {item.message_id} from {peer}")
        except TimeoutError:
            logger.warning(f"Closing idle connection from {peer} after {self.idle_timeout}s")
        except OSError as e:
            logger.warning(f"Connection from {peer} failed: {e}")
        finally:
            writer.close()
            try:
                await writer.wait_closed()
            except OSError as e:
                logger.debug(f"Error while closing connection from {peer}: {e}")

    async def open_outbound(self) -> tuple[asyncio.StreamReader, asyncio.StreamWriter]:
        """Dial the game's command port."""
        try:
            return await asyncio.wait_for(
                asyncio.open_connection(self.game_host, self.game_port),
                self.dial_timeout,
            )
        except (OSError, TimeoutError) as e:
            raise DialError(f"Could not connect to game at {self.game_host}:{self.game_port}: {e}") from e
