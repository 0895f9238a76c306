"""Routes decoded envelopes to their handler by message type.

Only NEW_OBJECT and LOAD_GAME touch the script mirror. Console-style
messages (print, error, custom, return) are logged and kept in a short
history; save/create notifications are logged. Unknown tags are ignored.
"""

from __future__ import annotations

import logging
from collections import deque
from datetime import datetime, timezone
from typing import Any, Callable

from .models import Envelope, MessageType
from .scripts import ScriptSynchronizer

logger = logging.getLogger(__name__)

Handler = Callable[[Envelope], None]


class Dispatcher:
    def __init__(self, synchronizer: ScriptSynchronizer, console_history: int = 200) -> None:
        self.synchronizer = synchronizer
        self.console: deque[dict[str, Any]] = deque(maxlen=console_history)
        self._handlers: dict[MessageType, Handler] = {
            MessageType.NEW_OBJECT: self._on_new_object,
            MessageType.LOAD_GAME: self._on_load_game,
            MessageType.PRINT: self._on_console,
            MessageType.ERROR: self._on_console,
            MessageType.CUSTOM: self._on_console,
            MessageType.RETURN: self._on_console,
            MessageType.USER_SAVED: self._on_notice,
            MessageType.USER_CREATED_OBJECT: self._on_notice,
        }
        missing = set(MessageType) - set(self._handlers)
        if missing:
            raise RuntimeError(f"No handler for {sorted(m.name for m in missing)}")

    def dispatch(self, envelope: Envelope) -> MessageType | None:
        """Run the handler for this envelope. Returns the matched type, if any."""
        msg_type = envelope.type
        if msg_type is None:
            logger.info(f"Ignoring message with unknown messageID {envelope.message_id}")
            return None
        self._handlers[msg_type](envelope)
        return msg_type

    def _on_new_object(self, envelope: Envelope) -> None:
        states = envelope.states
        written = self.synchronizer.apply(states)
        logger.info(f"NEW_OBJECT: {len(states)} objects, {len(written)} files written")

    def _on_load_game(self, envelope: Envelope) -> None:
        states = envelope.states
        written = self.synchronizer.resync(states)
        logger.info(f"LOAD_GAME: resynced {len(states)} objects, {len(written)} files written")

    def _on_console(self, envelope: Envelope) -> None:
        msg_type = MessageType(envelope.message_id)
        text = envelope.message or ""
        if msg_type is MessageType.ERROR:
            logger.error(f"[game] {text}")
        else:
            logger.info(f"[game {msg_type.name.lower()}] {text}")
        self.console.append({
            "type": msg_type.name,
            "message": text,
            "ts": datetime.now(timezone.utc).isoformat(),
        })

    def _on_notice(self, envelope: Envelope) -> None:
        logger.info(f"[game] {MessageType(envelope.message_id).name}")
