"""On-disk mirror of the game's scripted objects.

Layout:
  scripts/
    <name>_<guid>.lua    Lua source, always written
    <name>_<guid>.xml    UI markup, written only when the object has UI

The guid is the real identity; the name is only there so humans can find
files. Two objects deriving the same base name overwrite each other.

apply() never removes a .xml file. An object that loses its UI keeps the old
markup on disk until the next full reset() (LOAD_GAME).

Every mutation takes the same lock, so a reset arriving on one connection
cannot interleave with an apply running for another.
"""

from __future__ import annotations

import logging
import shutil
import threading
from pathlib import Path
from typing import Iterable

from .errors import FileIOError
from .models import ScriptState

logger = logging.getLogger(__name__)

SCRIPT_SUFFIX = ".lua"
UI_SUFFIX = ".xml"


class ScriptSynchronizer:
    def __init__(self, directory: Path) -> None:
        self._dir = Path(directory)
        self._lock = threading.Lock()

    @property
    def directory(self) -> Path:
        return self._dir

    def ensure_directory(self) -> None:
        """Create the script directory. Failure here is fatal at startup."""
        self._dir.mkdir(parents=True, exist_ok=True)

    def _path_for(self, base: str, suffix: str) -> Path:
        path = self._dir / f"{base}{suffix}"
        # Names like "../x" or "a/b" would land outside the mirror.
        if path.parent != self._dir or path.name != f"{base}{suffix}":
            raise FileIOError(str(path), "name escapes the script directory")
        return path

    def _write(self, path: Path, text: str) -> None:
        try:
            path.write_text(text, encoding="utf-8")
        except (OSError, ValueError) as e:
            raise FileIOError(str(path), e) from e

    # -- mutations --

    def reset(self) -> int:
        """Remove every entry in the directory. Returns how many were removed."""
        with self._lock:
            return self._reset()

    def apply(self, states: Iterable[ScriptState]) -> list[Path]:
        """Upsert each object's files. Returns the paths actually written."""
        with self._lock:
            return self._apply(states)

    def resync(self, states: Iterable[ScriptState]) -> list[Path]:
        """Full reset followed by apply, as one locked unit."""
        with self._lock:
            self._reset()
            return self._apply(states)

    def _reset(self) -> int:
        removed = 0
        try:
            entries = list(self._dir.iterdir())
        except OSError as e:
            logger.error(f"Could not list script directory {self._dir}: {e}")
            return 0
        for entry in entries:
            try:
                if entry.is_dir() and not entry.is_symlink():
                    shutil.rmtree(entry)
                else:
                    entry.unlink()
                removed += 1
            except OSError as e:
                logger.error(f"Could not remove {entry}: {e}")
        logger.info(f"Cleared {removed} entries from {self._dir}")
        return removed

    def _apply(self, states: Iterable[ScriptState]) -> list[Path]:
        written: list[Path] = []
        for state in states:
            try:
                written.extend(self._apply_one(state))
            except FileIOError as e:
                logger.error(f"Skipping {state.name} ({state.guid}): {e}")
        return written

    def _apply_one(self, state: ScriptState) -> list[Path]:
        base = state.base_name
        script_path = self._path_for(base, SCRIPT_SUFFIX)
        ui_path = self._path_for(base, UI_SUFFIX) if state.has_ui else None

        self._write(script_path, state.script)
        written = [script_path]
        if ui_path is not None:
            self._write(ui_path, state.ui or "")
            written.append(ui_path)
        logger.debug(f"Wrote {', '.join(p.name for p in written)}")
        return written

    # -- reads --

    def list_files(self) -> list[str]:
        """File names currently in the mirror, sorted."""
        if not self._dir.is_dir():
            return []
        return sorted(p.name for p in self._dir.iterdir() if p.is_file())

    def collect(self) -> list[ScriptState]:
        """Read the mirror back into script states.

        The guid is whatever follows the last "_" in the file stem, which is
        how base names are built. Files that don't fit that shape are skipped.
        """
        states: list[ScriptState] = []
        with self._lock:
            if not self._dir.is_dir():
                return states
            for path in sorted(self._dir.glob(f"*{SCRIPT_SUFFIX}")):
                name, sep, guid = path.stem.rpartition("_")
                if not sep or not guid:
                    logger.warning(f"Ignoring {path.name}: not named <name>_<guid>{SCRIPT_SUFFIX}")
                    continue
                try:
                    script = path.read_text(encoding="utf-8")
                    ui_path = path.with_suffix(UI_SUFFIX)
                    ui = ui_path.read_text(encoding="utf-8") if ui_path.is_file() else None
                except (OSError, UnicodeDecodeError) as e:
                    logger.error(f"Could not read {path.name}: {e}")
                    continue
                states.append(ScriptState(name=name, guid=guid, script=script, ui=ui))
        return states
