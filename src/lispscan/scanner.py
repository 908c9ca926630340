"""Lisp token scanner: turns a UTF-8 byte stream into classified tokens.

A Scanner is driven by repeated calls to ``scan()``. Each call skips white
space (and comments, when configured to), classifies the token starting at
the next rune, consumes exactly the runes belonging to it, and returns its
tag: one of the ``TokenType`` classes, or the code point of a
single-character token. The token's text and position can then be read
from the scanner.

Malformed input never stops the scan. Each lexical error is counted and
passed to the error handler, and the scanner returns the best-effort token
covering what it consumed.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator

from lispscan.errors import ErrorHandler, ErrorReporter
from lispscan.reader import RuneReader, Source
from lispscan.tokens import (
    COMMENT,
    EOF,
    FLOAT,
    IDENT,
    INT,
    KEYWORD,
    LISP_TOKENS,
    LISP_WHITESPACE,
    RAW_DELIMITER,
    RAW_STRING,
    SCAN_COMMENTS,
    SCAN_FLOATS,
    SCAN_IDENTS,
    SCAN_INTS,
    SCAN_KEYWORDS,
    SCAN_RAW_STRINGS,
    SCAN_STRINGS,
    SKIP_COMMENTS,
    STRING,
    Position,
    Token,
    digit_value,
    is_decimal,
    is_hex_digit,
    is_ident_rune as _default_ident_rune,
)

IdentPredicate = Callable[[str, int], bool]

_SIMPLE_ESCAPES = {
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
    "\\": "\\",
    '"': '"',
}

# Escape letter -> number of hex digits that must follow
_HEX_ESCAPES = {"x": 2, "u": 4, "U": 8}

_OCTAL_DIGITS = frozenset("01234567")

_RADIX_PREFIXES = {"x": 16, "o": 8, "b": 2}

_LITERAL_NAMES = {
    "x": "hexadecimal literal",
    "o": "octal literal",
    "0": "octal literal",
    "b": "binary literal",
}

# Two-rune reader tokens reported as identifiers: ~@ (splice-unquote), #{ (set)
_READER_PAIRS = {"~": "@", "#": "{"}


def _tag(ch: str) -> int:
    return ord(ch) if ch else EOF


def _litname(prefix: str) -> str:
    return _LITERAL_NAMES.get(prefix, "decimal literal")


def _invalid_sep(x: str) -> int:
    """Return the index of the first misplaced '_' in number literal x, or -1.

    A '_' must sit between two digits, or directly after a radix prefix.
    """
    x1 = " "  # prefix char, we only care if it's 'x'
    d = "."  # digit, one of '_', '0' (a digit), or '.' (anything else)
    i = 0

    if len(x) >= 2 and x[0] == "0":
        x1 = x[1].lower()
        if x1 in _RADIX_PREFIXES:
            d = "0"
            i = 2

    while i < len(x):
        p = d
        d = x[i]
        if d == "_":
            if p != "0":
                return i
        elif is_decimal(d) or (x1 == "x" and is_hex_digit(d)):
            d = "0"
        else:
            if p == "_":
                return i - 1
            d = "."
        i += 1

    if d == "_":
        return len(x) - 1
    return -1


class Scanner:
    """Read Lisp tokens from a byte source, one ``scan()`` call at a time.

    Configuration is per instance: ``mode`` selects the recognized token
    classes, ``whitespace`` is a bitmask over code points 0-63 of runes to
    skip, the identifier predicate decides which runes make up identifiers,
    and ``raw_delimiter`` opens and closes raw strings.
    """

    def __init__(
        self,
        source: Source,
        filename: str = "",
        *,
        mode: int = LISP_TOKENS,
        whitespace: int = LISP_WHITESPACE,
        is_ident_rune: IdentPredicate | None = None,
        raw_delimiter: str = RAW_DELIMITER,
        error_handler: ErrorHandler | None = None,
    ) -> None:
        self._errors = ErrorReporter(error_handler)
        self._reader = RuneReader(source, self._errors, filename)
        self.mode = mode
        self.whitespace = whitespace
        self.raw_delimiter = raw_delimiter
        self._is_ident_rune: IdentPredicate = is_ident_rune or _default_ident_rune
        # Start position of the most recently scanned token
        self.position = Position(filename)
        self._buf: list[str] = []
        self._text = ""
        self._value: str | None = None

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @property
    def filename(self) -> str:
        return self._reader.filename

    @filename.setter
    def filename(self, name: str) -> None:
        self._reader.filename = name

    @property
    def error_count(self) -> int:
        """Number of lexical errors reported so far."""
        return self._errors.count

    @property
    def error_handler(self) -> ErrorHandler:
        return self._errors.handler

    @error_handler.setter
    def error_handler(self, handler: ErrorHandler) -> None:
        self._errors.handler = handler

    def set_mode(self, mode: int) -> None:
        self.mode = mode

    def set_whitespace(self, whitespace: int) -> None:
        self.whitespace = whitespace

    def set_is_ident_rune(self, predicate: IdentPredicate | None) -> None:
        """Replace the identifier predicate; None restores the default."""
        self._is_ident_rune = predicate or _default_ident_rune

    def is_ident_rune(self, ch: str, i: int) -> bool:
        return bool(ch) and self._is_ident_rune(ch, i)

    # ------------------------------------------------------------------
    # Rune access
    # ------------------------------------------------------------------

    def peek(self) -> int:
        """Return the next rune's code point (or EOF) without advancing."""
        return _tag(self._reader.peek())

    def next_char(self) -> int:
        """Consume and return the next rune's code point (or EOF)."""
        self._text = ""
        self._value = None
        return _tag(self._reader.next())

    def pos(self) -> Position:
        """Position immediately after the last rune or token read."""
        return self._reader.position()

    def token_text(self) -> str:
        """Verbatim source text of the most recently scanned token."""
        return self._text

    def token_value(self) -> str:
        """Decoded value of the latest string or raw string, else its text."""
        if self._value is not None:
            return self._value
        return self._text

    def _peek(self) -> str:
        return self._reader.peek()

    def _advance(self) -> str:
        ch = self._reader.next()
        self._buf.append(ch)
        return ch

    def _error(self, message: str) -> None:
        self._errors.report(message, self.position)

    # ------------------------------------------------------------------
    # Scanning
    # ------------------------------------------------------------------

    def scan(self) -> int:
        """Scan the next token and return its tag."""
        self._value = None
        ch = self._peek()
        while True:
            while ch and ord(ch) < 64 and self.whitespace & (1 << ord(ch)):
                self._reader.next()
                ch = self._peek()

            self._buf = []
            self.position = self._reader.position()
            if not ch:
                self._text = ""
                return EOF

            if ch == ";" and self.mode & SCAN_COMMENTS:
                self._scan_comment()
                if self.mode & SKIP_COMMENTS:
                    ch = self._peek()
                    continue
                tok = COMMENT
            else:
                tok = self._scan_token(ch)
            break

        self._text = "".join(self._buf)
        return tok

    def _scan_token(self, ch: str) -> int:
        mode = self.mode

        if is_decimal(ch):
            if mode & (SCAN_INTS | SCAN_FLOATS):
                return self._scan_number()
            self._advance()
            return ord(ch)

        if ch == ".":
            self._advance()
            if is_decimal(self._peek()) and mode & SCAN_FLOATS:
                return self._scan_number(seen_dot=True)
            if mode & SCAN_IDENTS and self.is_ident_rune(ch, 0):
                self._scan_identifier(1)
                return IDENT
            return ord(ch)

        if self.is_ident_rune(ch, 0):
            self._advance()
            if mode & SCAN_IDENTS:
                self._scan_identifier(1)
                return IDENT
            return ord(ch)

        if ch == "-":
            return self._scan_minus()

        if ch == '"' and mode & SCAN_STRINGS:
            self._scan_string()
            return STRING

        if ch == self.raw_delimiter and mode & SCAN_RAW_STRINGS:
            self._scan_raw_string()
            return RAW_STRING

        if ch == ":" and mode & SCAN_KEYWORDS:
            self._advance()
            if self.is_ident_rune(self._peek(), 0):
                self._advance()
                self._scan_identifier(1)
                return KEYWORD
            return ord(ch)

        if ch in _READER_PAIRS and mode & SCAN_IDENTS:
            self._advance()
            if self._peek() == _READER_PAIRS[ch]:
                self._advance()
                return IDENT
            return ord(ch)

        self._advance()
        return ord(ch)

    def _scan_identifier(self, i: int) -> None:
        """Consume identifier runes; i is the index of the next rune."""
        ch = self._peek()
        while self.is_ident_rune(ch, i):
            self._advance()
            ch = self._peek()
            i += 1

    def _scan_minus(self) -> int:
        self._advance()  # consume '-'
        ch = self._peek()
        if self.is_ident_rune(ch, 0):
            if self.mode & SCAN_IDENTS:
                self._advance()
                self._scan_identifier(2)
                return IDENT
            return ord("-")
        if is_decimal(ch) and self.mode & (SCAN_INTS | SCAN_FLOATS):
            return self._scan_number()
        # A lone '-' is the subtraction symbol
        if self.mode & SCAN_IDENTS:
            return IDENT
        return ord("-")

    def _scan_comment(self) -> None:
        ch = self._peek()
        while ch and ch != "\n":
            self._advance()
            ch = self._peek()

    # ------------------------------------------------------------------
    # Numbers
    # ------------------------------------------------------------------

    def _digits(self, base: int) -> tuple[int, str | None]:
        """Consume digits and '_' separators.

        Returns (digsep, invalid): bit 0 of digsep is set if a digit was
        seen, bit 1 if a separator was seen; invalid is the first decimal
        digit not valid in base (only checked for bases up to 10).
        """
        digsep = 0
        invalid: str | None = None
        ch = self._peek()
        if base <= 10:
            max_digit = chr(ord("0") + base)
            while is_decimal(ch) or ch == "_":
                if ch == "_":
                    digsep |= 2
                else:
                    digsep |= 1
                    if ch >= max_digit and invalid is None:
                        invalid = ch
                self._advance()
                ch = self._peek()
        else:
            while is_hex_digit(ch) or ch == "_":
                digsep |= 2 if ch == "_" else 1
                self._advance()
                ch = self._peek()
        return digsep, invalid

    def _scan_number(self, seen_dot: bool = False) -> int:
        base = 10
        prefix = ""  # one of "", "x", "o", "b", "0" (legacy octal)
        digsep = 0
        invalid: str | None = None
        tok = INT

        # integer part
        if not seen_dot:
            if self._peek() == "0":
                self._advance()
                letter = self._peek().lower()
                if letter in _RADIX_PREFIXES:
                    self._advance()
                    base = _RADIX_PREFIXES[letter]
                    prefix = letter
                else:
                    base = 8
                    prefix = "0"
                    digsep = 1  # leading 0
            ds, invalid = self._digits(base)
            digsep |= ds
            if self._peek() == "." and self.mode & SCAN_FLOATS:
                self._advance()
                seen_dot = True

        # fractional part
        if seen_dot:
            tok = FLOAT
            if prefix in ("o", "b"):
                self._error(f"invalid radix point in {_litname(prefix)}")
            ds, bad = self._digits(base)
            digsep |= ds
            invalid = invalid or bad

        if not digsep & 1:
            self._error(f"{_litname(prefix)} has no digits")

        # exponent
        ch = self._peek()
        e = ch.lower()
        if e in ("e", "p") and self.mode & SCAN_FLOATS:
            if e == "e" and prefix not in ("", "0"):
                self._error(f"'{ch}' exponent requires decimal mantissa")
            elif e == "p" and prefix != "x":
                self._error(f"'{ch}' exponent requires hexadecimal mantissa")
            self._advance()
            tok = FLOAT
            if self._peek() in ("+", "-"):
                self._advance()
            ds, _ = self._digits(10)
            digsep |= ds
            if not ds & 1:
                self._error("exponent has no digits")
        elif prefix == "x" and tok == FLOAT:
            self._error("hexadecimal mantissa requires a 'p' exponent")

        if tok == INT and invalid is not None:
            self._error(f"invalid digit '{invalid}' in {_litname(prefix)}")

        if digsep & 2:
            text = "".join(self._buf).removeprefix("-")
            if _invalid_sep(text) >= 0:
                self._error("'_' must separate successive digits")

        return tok

    # ------------------------------------------------------------------
    # Strings
    # ------------------------------------------------------------------

    def _scan_string(self) -> None:
        self._advance()  # opening quote
        value: list[str] = []
        while True:
            ch = self._peek()
            if ch == '"':
                self._advance()
                break
            if ch == "\n" or not ch:
                self._error("literal not terminated")
                break
            if ch == "\\":
                self._scan_escape(value)
            else:
                value.append(self._advance())
        self._value = "".join(value)

    def _scan_escape(self, value: list[str]) -> None:
        """Consume one escape sequence and append its decoded rune to value."""
        start = len(self._buf)
        self._advance()  # backslash
        ch = self._peek()

        if ch in _SIMPLE_ESCAPES:
            self._advance()
            value.append(_SIMPLE_ESCAPES[ch])
            return

        if ch in _OCTAL_DIGITS:
            digits = self._scan_digits(8, 3)
            value.append(chr(int(digits, 8)))
            return

        if ch in _HEX_ESCAPES:
            self._advance()
            count = _HEX_ESCAPES[ch]
            digits = self._scan_digits(16, count)
            if len(digits) < count:
                self._error("invalid char escape")
                value.append("".join(self._buf[start:]))
                return
            codepoint = int(digits, 16)
            if codepoint > 0x10FFFF or 0xD800 <= codepoint < 0xE000:
                self._error("escape is invalid Unicode code point")
                value.append("\ufffd")
                return
            value.append(chr(codepoint))
            return

        # Keep the backslash; the rune after it is read as ordinary content.
        # A newline or EOF here is reported by the string loop.
        if ch and ch != "\n":
            self._error("invalid char escape")
        value.append("\\")

    def _scan_digits(self, base: int, n: int) -> str:
        """Consume up to n digits of base and return them."""
        digits: list[str] = []
        while len(digits) < n and digit_value(self._peek()) < base:
            digits.append(self._advance())
        return "".join(digits)

    def _scan_raw_string(self) -> None:
        delimiter = self.raw_delimiter
        self._advance()  # opening delimiter
        value: list[str] = []
        while True:
            ch = self._peek()
            if not ch:
                self._error("literal not terminated")
                break
            self._advance()
            if ch == delimiter:
                if self._peek() != delimiter:
                    break
                self._advance()  # doubled delimiter stands for itself
            value.append(ch)
        self._value = "".join(value)

    # ------------------------------------------------------------------
    # Token stream
    # ------------------------------------------------------------------

    def __iter__(self) -> Iterator[Token]:
        """Yield tokens until EOF (the EOF token itself is not yielded)."""
        while True:
            tok = self.scan()
            if tok == EOF:
                return
            yield Token(tok, self._text, self.token_value(), self.position)


def tokenize(source: Source, filename: str = "", **options) -> list[Token]:
    """Convenience function: scan the whole source and return its tokens.

    The list ends with an EOF token. Keyword options are passed to Scanner.
    """
    scanner = Scanner(source, filename, **options)
    tokens = list(scanner)
    tokens.append(Token(EOF, "", "", scanner.position))
    return tokens
