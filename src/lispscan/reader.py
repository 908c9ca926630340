"""UTF-8 rune reader with one rune of lookahead and position tracking."""

from __future__ import annotations

import io
from typing import BinaryIO

from lispscan.errors import ErrorReporter, SourceReadError
from lispscan.tokens import Position

_BUF_LEN = 1024
_UTF_MAX = 4  # maximum bytes in one encoded rune

Source = BinaryIO | bytes | bytearray | str


class PositionTracker:
    """Offset, line and column of the next unconsumed rune."""

    def __init__(self) -> None:
        self.offset = 0
        self.line = 1
        self.column = 1

    def advance(self, ch: str, width: int) -> None:
        self.offset += width
        if ch == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1

    def snapshot(self, filename: str = "") -> Position:
        return Position(filename, self.offset, self.line, self.column)


def _sequence_length(lead: int) -> int:
    """Encoded length implied by a UTF-8 lead byte, 0 if it cannot start a rune."""
    if 0xC2 <= lead <= 0xDF:
        return 2
    if 0xE0 <= lead <= 0xEF:
        return 3
    if 0xF0 <= lead <= 0xF4:
        return 4
    return 0


class RuneReader:
    """Decode runes from a byte source.

    ``peek()`` buffers exactly one rune; ``next()`` consumes it and advances
    the position. Both return ``""`` at end of input. Malformed bytes decode
    to U+FFFD one byte at a time and are reported, never raised.
    """

    def __init__(
        self,
        source: Source,
        reporter: ErrorReporter | None = None,
        filename: str = "",
        chunk_size: int = _BUF_LEN,
    ) -> None:
        if isinstance(source, str):
            source = source.encode("utf-8")
        if isinstance(source, (bytes, bytearray)):
            source = io.BytesIO(bytes(source))
        self.filename = filename
        self._src = source
        # read1 returns what is already buffered instead of waiting for a full chunk
        self._read = getattr(source, "read1", source.read)
        self._chunk_size = max(chunk_size, _UTF_MAX)
        self._reporter = reporter if reporter is not None else ErrorReporter()
        self._tracker = PositionTracker()
        self._buf = b""
        self._pos = 0
        self._eof = False
        self._started = False
        # One rune of lookahead: (rune, encoded width), None when empty
        self._la: str | None = None
        self._la_width = 0

    def position(self) -> Position:
        """Position of the next unconsumed rune."""
        return self._tracker.snapshot(self.filename)

    def peek(self) -> str:
        """Return the next rune without consuming it."""
        if self._la is None:
            ch, width = self._decode()
            if ch == "\ufeff" and not self._started:
                # Leading byte order mark is not part of the text
                self._pos += width
                ch, width = self._decode()
            self._started = True
            if ch == "\0":
                self._reporter.report("invalid character NUL", self.position())
            self._la = ch
            self._la_width = width
        return self._la

    def next(self) -> str:
        """Consume and return the next rune."""
        ch = self.peek()
        if ch:
            self._pos += self._la_width
            self._tracker.advance(ch, self._la_width)
            self._la = None
        return ch

    # ------------------------------------------------------------------
    # Byte buffer
    # ------------------------------------------------------------------

    def _fill(self, n: int) -> None:
        """Buffer at least n unread bytes unless the source is exhausted."""
        while not self._eof and len(self._buf) - self._pos < n:
            try:
                chunk = self._read(self._chunk_size)
            except OSError as exc:
                raise SourceReadError(f"read error: {exc}", self.position()) from exc
            if chunk is None:
                # Non-blocking source with nothing ready yet; not end of input
                raise SourceReadError(
                    "read error: no data available", self.position()
                ) from BlockingIOError("no data available")
            if not chunk:
                self._eof = True
                break
            self._buf = self._buf[self._pos :] + chunk
            self._pos = 0

    def _decode(self) -> tuple[str, int]:
        if self._pos >= len(self._buf):
            self._fill(1)
            if self._pos >= len(self._buf):
                return "", 0

        lead = self._buf[self._pos]
        if lead < 0x80:
            return chr(lead), 1

        width = _sequence_length(lead)
        if len(self._buf) - self._pos < width:
            self._fill(width)
        try:
            ch = self._buf[self._pos : self._pos + width].decode("utf-8")
        except UnicodeDecodeError:
            ch = ""
        if len(ch) != 1:
            self._reporter.report("invalid UTF-8 encoding", self.position())
            return "\ufffd", 1
        return ch, width
