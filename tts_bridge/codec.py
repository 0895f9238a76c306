"""Envelope codec: byte stream <-> protocol messages.

The game writes JSON documents back to back, sometimes without any separator,
so the default framing finds the end of each document by scanning brackets
(string literals and escapes respected) rather than by splitting on newlines.
Newline framing is kept for producers that write one document per line.

Decoding never raises for bad input. A payload that is not valid JSON, or
that is valid JSON but not a valid envelope, comes back as a DecodeError
value and decoding resumes at the next boundary. A closing bracket that does
not match the innermost open one ends the bad payload right there.
"""

from __future__ import annotations

import asyncio
import codecs
import json
from collections import deque
from enum import Enum

from pydantic import ValidationError

from .errors import DecodeError
from .models import Command, Envelope

READ_CHUNK_SIZE = 65536
MAX_PENDING_CHARS = 4 * 1024 * 1024

_MATCHING = {"{": "}", "[": "]"}


class Framing(str, Enum):
    STRUCTURAL = "structural"
    NEWLINE = "newline"


class EndOfStream:
    """Marker returned once the peer has closed its side of the stream."""

    def __repr__(self) -> str:
        return "END_OF_STREAM"


END_OF_STREAM = EndOfStream()

Decoded = Envelope | DecodeError


def parse_envelope(raw: str) -> Decoded:
    """Parse and validate a single framed payload."""
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        return DecodeError(f"invalid JSON: {e}", raw)
    try:
        return Envelope.model_validate(data)
    except ValidationError as e:
        return DecodeError(f"invalid envelope ({e.error_count()} validation errors)", raw)


def encode(command: Command) -> bytes:
    """Serialize an outbound command. The trailing newline suits both framings."""
    text = json.dumps(command.to_wire(), ensure_ascii=False, separators=(",", ":"))
    return (text + "\n").encode("utf-8")


class EnvelopeDecoder:
    """Incremental decoder. Feed it bytes, collect envelopes and errors.

    Text held for an unfinished payload is capped at max_pending characters;
    past that the buffered text is dropped as one DecodeError.
    """

    def __init__(self, framing: Framing = Framing.STRUCTURAL, max_pending: int = MAX_PENDING_CHARS) -> None:
        self.framing = Framing(framing)
        self.max_pending = max_pending
        self._utf8 = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buf = ""
        self._reset_scan()

    def _reset_scan(self) -> None:
        self._pos = 0
        self._open: list[str] = []
        self._in_string = False
        self._escape = False

    @property
    def pending(self) -> str:
        """Text received but not yet framed into a payload."""
        return self._buf

    def feed(self, data: bytes) -> list[Decoded]:
        self._buf += self._utf8.decode(data)
        return self._drain(final=False)

    def finish(self) -> list[Decoded]:
        """Flush at end of stream. A truncated trailing payload is an error."""
        self._buf += self._utf8.decode(b"", final=True)
        return self._drain(final=True)

    def _drain(self, final: bool) -> list[Decoded]:
        out: list[Decoded] = []
        next_payload = self._next_structural if self.framing is Framing.STRUCTURAL else self._next_line
        while True:
            item = next_payload(final)
            if item is None:
                return out
            out.append(item)

    def _drop_pending(self) -> DecodeError:
        raw, self._buf = self._buf, ""
        self._reset_scan()
        return DecodeError(f"payload exceeds {self.max_pending} characters", raw)

    # -- structural framing --

    def _next_structural(self, final: bool) -> Decoded | None:
        if self._pos == 0:
            self._buf = self._buf.lstrip()
            if not self._buf:
                return None
            if self._buf[0] not in "{[":
                return self._skip_garbage()
        scanned = self._scan()
        if scanned is None:
            if final:
                raw, self._buf = self._buf, ""
                self._reset_scan()
                return DecodeError("truncated payload at end of stream", raw)
            if len(self._buf) > self.max_pending:
                return self._drop_pending()
            return None
        end, balanced = scanned
        raw, self._buf = self._buf[:end], self._buf[end:]
        self._reset_scan()
        if not balanced:
            return DecodeError(f"mismatched {raw[-1]!r} in payload", raw)
        return parse_envelope(raw)

    def _skip_garbage(self) -> DecodeError:
        starts = [i for i in (self._buf.find("{"), self._buf.find("[")) if i >= 0]
        cut = min(starts) if starts else len(self._buf)
        raw, self._buf = self._buf[:cut], self._buf[cut:]
        return DecodeError("unexpected data between documents", raw)

    def _scan(self) -> tuple[int, bool] | None:
        """Advance the bracket scanner.

        Returns (end, True) once the value closes, (end, False) right after a
        closer that doesn't match the innermost open bracket, or None if more
        input is needed.
        """
        text = self._buf
        i = self._pos
        while i < len(text):
            ch = text[i]
            i += 1
            if self._in_string:
                if self._escape:
                    self._escape = False
                elif ch == "\\":
                    self._escape = True
                elif ch == '"':
                    self._in_string = False
            elif ch == '"':
                self._in_string = True
            elif ch in _MATCHING:
                self._open.append(_MATCHING[ch])
            elif ch in "}]":
                if self._open.pop() != ch:
                    return i, False
                if not self._open:
                    return i, True
        self._pos = i
        return None

    # -- newline framing --

    def _next_line(self, final: bool) -> Decoded | None:
        while True:
            idx = self._buf.find("\n")
            if idx < 0:
                if final and self._buf.strip():
                    raw, self._buf = self._buf, ""
                    return parse_envelope(raw)
                if final:
                    self._buf = ""
                    return None
                if len(self._buf) > self.max_pending:
                    return self._drop_pending()
                return None
            line, self._buf = self._buf[:idx], self._buf[idx + 1:]
            if line.strip():
                return parse_envelope(line)


class EnvelopeReader:
    """Pulls decoded messages off an asyncio stream one at a time.

    decode_next() returns an Envelope, a DecodeError, or END_OF_STREAM.
    With idle_timeout set, a read that waits longer raises TimeoutError.
    """

    def __init__(
        self,
        reader: asyncio.StreamReader,
        framing: Framing = Framing.STRUCTURAL,
        idle_timeout: float | None = None,
    ) -> None:
        self._reader = reader
        self._decoder = EnvelopeDecoder(framing)
        self._idle_timeout = idle_timeout
        self._pending: deque[Decoded] = deque()
        self._eof = False

    async def _read(self) -> bytes:
        if self._idle_timeout is None:
            return await self._reader.read(READ_CHUNK_SIZE)
        return await asyncio.wait_for(self._reader.read(READ_CHUNK_SIZE), self._idle_timeout)

    async def decode_next(self) -> Decoded | EndOfStream:
        while not self._pending:
            if self._eof:
                return END_OF_STREAM
            chunk = await self._read()
            if chunk:
                self._pending.extend(self._decoder.feed(chunk))
            else:
                self._eof = True
                self._pending.extend(self._decoder.finish())
        return self._pending.popleft()
