"""Wire models for both directions of the game <-> editor protocol.

Inbound (game -> bridge):

    {"messageID": 0, "scriptStates": [{"name", "guid", "script", "ui"?}], "message"?}

Outbound (bridge -> game):

    {"messageID": 3, "guid"?, "script"?, "customMessage"?, "scriptStates"?}

Pydantic validates every inbound payload; a payload that fails validation is
reported by the codec as a DecodeError and skipped.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class MessageType(IntEnum):
    """Inbound message tags sent by the game."""

    NEW_OBJECT = 0
    LOAD_GAME = 1
    PRINT = 2
    ERROR = 3
    CUSTOM = 4
    RETURN = 5
    USER_SAVED = 6
    USER_CREATED_OBJECT = 7


class Operation(IntEnum):
    """Outbound command tags understood by the game."""

    GET_ALL = 0
    SEND_SCRIPT_DATA = 1
    SEND_CUSTOM_MESSAGE = 2
    EXEC_LUA_CODE = 3


class ScriptState(BaseModel):
    """One scriptable object: identity plus its Lua source and optional UI."""

    name: str
    guid: str
    script: str
    ui: str | None = None  # absent or "" means no .xml file

    @property
    def base_name(self) -> str:
        return base_name(self.name, self.guid)

    @property
    def has_ui(self) -> bool:
        return bool(self.ui)


def base_name(name: str, guid: str) -> str:
    """Filesystem base name for an object.

    ("Card", "abc123") -> "Card_abc123"
    """
    return f"{name}_{guid}"


class Envelope(BaseModel):
    """A decoded inbound message."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    message_id: int = Field(alias="messageID")
    script_states: list[ScriptState] | None = Field(default=None, alias="scriptStates")
    message: str | None = None

    @field_validator("message_id", mode="before")
    @classmethod
    def reject_bool_tag(cls, value: Any) -> Any:
        # JSON true would otherwise coerce to 1 (LOAD_GAME) and wipe the mirror.
        if isinstance(value, bool):
            raise ValueError("messageID must be an integer, not a boolean")
        return value

    @property
    def type(self) -> MessageType | None:
        """The closed message tag, or None for an out-of-range value."""
        try:
            return MessageType(self.message_id)
        except ValueError:
            return None

    @property
    def states(self) -> list[ScriptState]:
        return list(self.script_states or [])


class Command(BaseModel):
    """An outbound command. Unset optional fields are never serialized."""

    model_config = ConfigDict(populate_by_name=True)

    message_id: int = Field(alias="messageID")
    script_states: list[ScriptState] | None = Field(default=None, alias="scriptStates")
    custom_message: str | None = Field(default=None, alias="customMessage")
    guid: str | None = None
    script: str | None = None

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
