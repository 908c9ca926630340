"""Lexical error records, the error counter, and source failures."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from lispscan.tokens import Position

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ScanError:
    """A non-fatal lexical error: malformed input at a source position."""

    message: str
    position: Position

    def __str__(self) -> str:
        return f"{self.position}: {self.message}"

    def format(self, source: str | None = None) -> str:
        """Render the error, with the offending source line when source is given."""
        pos = self.position
        line_num = str(pos.line)
        gutter_width = len(line_num) + 1
        result = f"error: {self.message}\n{' ' * gutter_width}--> {pos}"
        if source is None or not pos.is_valid():
            return result

        lines = source.splitlines(keepends=True)
        line_idx = pos.line - 1
        if 0 <= line_idx < len(lines):
            source_line = lines[line_idx].rstrip("\n").rstrip("\r")
        else:
            source_line = ""

        blank_gutter = " " * gutter_width + "|"
        line_gutter = f"{line_num:>{gutter_width - 1}} |"
        pad = " " * (pos.column - 1)

        return (
            f"{result}\n"
            f"{blank_gutter}\n"
            f"{line_gutter} {source_line}\n"
            f"{blank_gutter} {pad}^"
        )


ErrorHandler = Callable[[ScanError], None]


def log_error(error: ScanError) -> None:
    """Default error handler: log the error and keep scanning."""
    logger.warning("%s: %s", error.position, error.message)


class ErrorReporter:
    """Counts lexical errors and forwards each one to a handler."""

    def __init__(self, handler: ErrorHandler | None = None) -> None:
        self.count = 0
        self.handler: ErrorHandler = handler or log_error

    def report(self, message: str, position: Position) -> None:
        self.count += 1
        self.handler(ScanError(message, position))


class SourceReadError(OSError):
    """The underlying byte source failed; distinct from reaching EOF."""

    def __init__(self, message: str, position: Position) -> None:
        self.message = message
        self.position = position
        super().__init__(f"{position}: {message}")
