"""Error taxonomy for the bridge.

DecodeError is returned by the codec as a value so a bad payload never ends
a connection. DialError and WriteError surface to command callers.
FileIOError wraps a single failed file operation inside a batch.
"""

from __future__ import annotations


class BridgeError(Exception):
    """Base class for all bridge errors."""


class DecodeError(BridgeError):
    """A payload on the inbound stream could not be decoded or validated."""

    def __init__(self, reason: str, payload: str = "") -> None:
        super().__init__(reason)
        self.reason = reason
        self.payload = payload

    def __repr__(self) -> str:
        return f"DecodeError({self.reason!r}, payload={self.payload[:80]!r})"


class DialError(BridgeError):
    """The outbound connection to the game could not be established."""


class WriteError(BridgeError):
    """The outbound connection was established but the write failed."""


class FileIOError(BridgeError):
    """A single script file could not be written or removed."""

    def __init__(self, path: str, cause: BaseException | str) -> None:
        super().__init__(f"{path}: {cause}")
        self.path = path
        self.cause = cause
