"""Shared test fixtures and helpers."""

from __future__ import annotations

import io

import pytest

from lispscan.errors import ScanError
from lispscan.scanner import Scanner, tokenize
from lispscan.tokens import EOF, Token


@pytest.fixture
def lex():
    """Return a helper that tokenizes source and returns tokens (excluding EOF)."""

    def _lex(source: str | bytes, **options) -> list[Token]:
        tokens = tokenize(source, "test.lisp", **options)
        # Strip trailing EOF for convenience
        return [t for t in tokens if t.type != EOF]

    return _lex


@pytest.fixture
def errors() -> list[ScanError]:
    """A list to pass as error_handler, collecting reported errors."""
    return []


@pytest.fixture
def scanner(errors):
    """Return a factory for Scanners whose errors go to the errors fixture."""

    def _make(source: str | bytes, **options) -> Scanner:
        options.setdefault("error_handler", errors.append)
        return Scanner(source, "test.lisp", **options)

    return _make


def assert_types(tokens: list[Token], expected: list[int]) -> None:
    """Assert that the token tags match the expected list."""
    actual = [t.type for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"


def assert_texts(tokens: list[Token], expected: list[str]) -> None:
    """Assert that the token texts match the expected list."""
    actual = [t.text for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"


def scan_all(s: Scanner) -> list[tuple[int, str]]:
    """Scan to EOF and return (tag, text) pairs."""
    result = []
    tok = s.scan()
    while tok != EOF:
        result.append((tok, s.token_text()))
        tok = s.scan()
    return result


class FailingStream(io.RawIOBase):
    """Returns some bytes, then fails like a broken pipe."""

    def __init__(self, data: bytes) -> None:
        self._data = data

    def readable(self) -> bool:
        return True

    def read(self, size: int = -1) -> bytes:
        if self._data:
            data, self._data = self._data, b""
            return data
        raise OSError("connection reset")


class ScriptedStream:
    """Answers successive read() calls from a list; None means no data yet."""

    def __init__(self, chunks: list[bytes | None]) -> None:
        self._chunks = list(chunks)

    def read(self, size: int = -1) -> bytes | None:
        return self._chunks.pop(0) if self._chunks else b""
