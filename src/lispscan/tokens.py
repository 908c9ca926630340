"""Token tags, mode bits, positions, and character classification helpers."""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import IntEnum, IntFlag


class TokenType(IntEnum):
    """Named token classes.

    Single-character tokens are reported by their own code point, so every
    named class lives in the negative range and never collides with a rune.
    """

    EOF = -1
    IDENT = -2
    INT = -3
    FLOAT = -4
    STRING = -5
    KEYWORD = -6
    RAW_STRING = -7
    COMMENT = -8


EOF = TokenType.EOF
IDENT = TokenType.IDENT
INT = TokenType.INT
FLOAT = TokenType.FLOAT
STRING = TokenType.STRING
KEYWORD = TokenType.KEYWORD
RAW_STRING = TokenType.RAW_STRING
COMMENT = TokenType.COMMENT

_SKIP_COMMENT = -9


class Mode(IntFlag):
    """Bits selecting which token classes the scanner recognizes."""

    SCAN_IDENTS = 1 << -IDENT
    SCAN_INTS = 1 << -INT
    SCAN_FLOATS = 1 << -FLOAT  # includes ints
    SCAN_STRINGS = 1 << -STRING
    SCAN_KEYWORDS = 1 << -KEYWORD
    SCAN_RAW_STRINGS = 1 << -RAW_STRING
    SCAN_COMMENTS = 1 << -COMMENT
    SKIP_COMMENTS = 1 << -_SKIP_COMMENT  # comments are treated as white space


SCAN_IDENTS = Mode.SCAN_IDENTS
SCAN_INTS = Mode.SCAN_INTS
SCAN_FLOATS = Mode.SCAN_FLOATS
SCAN_STRINGS = Mode.SCAN_STRINGS
SCAN_KEYWORDS = Mode.SCAN_KEYWORDS
SCAN_RAW_STRINGS = Mode.SCAN_RAW_STRINGS
SCAN_COMMENTS = Mode.SCAN_COMMENTS
SKIP_COMMENTS = Mode.SKIP_COMMENTS

SCAN_ALL = (
    SCAN_IDENTS
    | SCAN_INTS
    | SCAN_FLOATS
    | SCAN_STRINGS
    | SCAN_KEYWORDS
    | SCAN_RAW_STRINGS
    | SCAN_COMMENTS
)
LISP_TOKENS = SCAN_ALL | SKIP_COMMENTS

# Mode bit per class name, as used by the CLI and config file
MODE_NAMES: dict[str, Mode] = {
    "idents": SCAN_IDENTS,
    "ints": SCAN_INTS,
    "floats": SCAN_FLOATS,
    "strings": SCAN_STRINGS,
    "keywords": SCAN_KEYWORDS,
    "raw_strings": SCAN_RAW_STRINGS,
    "comments": SCAN_COMMENTS,
}


def whitespace_mask(chars: str) -> int:
    """Build a whitespace bitmask from characters below code point 64."""
    mask = 0
    for ch in chars:
        if ord(ch) >= 64:
            raise ValueError(f"whitespace character {ch!r} is not below U+0040")
        mask |= 1 << ord(ch)
    return mask


LISP_WHITESPACE = whitespace_mask("\t\n\r ")

RAW_DELIMITER = "\u00ac"  # NOT SIGN

_TOKEN_NAMES = {
    EOF: "EOF",
    IDENT: "Ident",
    INT: "Int",
    FLOAT: "Float",
    STRING: "String",
    KEYWORD: "Keyword",
    RAW_STRING: "RawString",
    COMMENT: "Comment",
}


def token_string(tok: int) -> str:
    """Return a printable string for a token tag or Unicode character."""
    name = _TOKEN_NAMES.get(tok)
    if name is not None:
        return name
    if 0 <= tok <= 0x10FFFF:
        return json.dumps(chr(tok), ensure_ascii=False)
    return f"Token({tok})"


@dataclass(frozen=True, slots=True)
class Position:
    """Source position: 0-based byte offset, 1-based line and column.

    A position is valid if line > 0.
    """

    filename: str = ""
    offset: int = 0
    line: int = 0
    column: int = 0

    def is_valid(self) -> bool:
        return self.line > 0

    def __str__(self) -> str:
        name = self.filename or "<input>"
        if self.is_valid():
            return f"{name}:{self.line}:{self.column}"
        return name


@dataclass(frozen=True, slots=True)
class Token:
    """One scanned token: tag, verbatim source text, decoded value, start position."""

    type: int
    text: str
    value: str
    position: Position

    @property
    def is_char(self) -> bool:
        """True for single-character tokens, whose tag is their code point."""
        return self.type >= 0

    @property
    def char(self) -> str | None:
        return chr(self.type) if self.type >= 0 else None


# Identifier special characters: _ $ * + / ? ! < > =
_IDENT_SPECIAL = frozenset("_$*+/?!<>=")


def is_ident_rune(ch: str, i: int) -> bool:
    """Default identifier predicate: may ch appear at index i of an identifier?

    '-' and numerals are only accepted after the first rune.
    """
    if ch in _IDENT_SPECIAL or ch.isalpha():
        return True
    return i > 0 and (ch == "-" or ch.isnumeric())


def is_decimal(ch: str) -> bool:
    """Return True if ch is an ASCII decimal digit."""
    return len(ch) == 1 and "0" <= ch <= "9"


def is_hex_digit(ch: str) -> bool:
    """Return True if ch is a hexadecimal digit."""
    return len(ch) == 1 and ch in "0123456789abcdefABCDEF"


def digit_value(ch: str) -> int:
    """Value of a hex digit, or 16 for anything else."""
    if is_hex_digit(ch):
        return int(ch, 16)
    return 16
