"""Bridge settings: defaults, overridden by environment (and .env), then CLI."""

import os
from dataclasses import asdict, dataclass, field, replace
from pathlib import Path
from typing import Any

from .codec import Framing

DEFAULT_SCRIPTS_DIR = Path(__file__).parent.parent / "scripts"


@dataclass(frozen=True)
class Settings:
    host: str = "127.0.0.1"
    ide_port: int = 39998       # we listen here for the game
    game_port: int = 39999      # the game listens here for commands
    api_port: int = 39997       # HTTP command API
    scripts_dir: Path = field(default=DEFAULT_SCRIPTS_DIR)
    framing: Framing = Framing.STRUCTURAL
    idle_timeout: float | None = None
    dial_timeout: float = 5.0
    console_history: int = 200

    @classmethod
    def from_env(cls, env: dict[str, str] | None = None) -> "Settings":
        """Build settings from environment variables. Unset or empty keeps the default."""
        env = dict(os.environ) if env is None else env
        values: dict[str, Any] = {}

        def get(key: str) -> str | None:
            value = env.get(key, "").strip()
            return value or None

        if (v := get("BRIDGE_HOST")) is not None:
            values["host"] = v
        for key, attr in (("IDE_PORT", "ide_port"), ("GAME_PORT", "game_port"), ("API_PORT", "api_port")):
            if (v := get(key)) is not None:
                values[attr] = _port(key, v)
        if (v := get("SCRIPTS_DIR")) is not None:
            values["scripts_dir"] = Path(v)
        if (v := get("FRAMING")) is not None:
            values["framing"] = _framing(v)
        if (v := get("IDLE_TIMEOUT")) is not None:
            values["idle_timeout"] = _positive("IDLE_TIMEOUT", v)
        if (v := get("DIAL_TIMEOUT")) is not None:
            values["dial_timeout"] = _positive("DIAL_TIMEOUT", v)
        if (v := get("CONSOLE_HISTORY")) is not None:
            values["console_history"] = int(_positive("CONSOLE_HISTORY", v))
        return cls(**values)

    def override(self, **fields: Any) -> "Settings":
        """Copy with the given fields replaced; None values are ignored."""
        return replace(self, **{k: v for k, v in fields.items() if v is not None})

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["scripts_dir"] = str(self.scripts_dir)
        data["framing"] = self.framing.value
        return data


def _port(key: str, value: str) -> int:
    try:
        port = int(value)
    except ValueError:
        raise ValueError(f"{key} must be an integer, got {value!r}")
    if not 0 <= port <= 65535:
        raise ValueError(f"{key} out of range: {port}")
    return port


def _positive(key: str, value: str) -> float:
    try:
        number = float(value)
    except ValueError:
        raise ValueError(f"{key} must be a number, got {value!r}")
    if number <= 0:
        raise ValueError(f"{key} must be positive, got {number}")
    return number


def _framing(value: str) -> Framing:
    try:
        return Framing(value.lower())
    except ValueError:
        options = ", ".join(f.value for f in Framing)
        raise ValueError(f"FRAMING must be one of {options}, got {value!r}")
