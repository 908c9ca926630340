"""Lexical scanner for a Lisp-family language."""

from __future__ import annotations

from lispscan.errors import ScanError, SourceReadError
from lispscan.scanner import Scanner, tokenize
from lispscan.tokens import (
    COMMENT,
    EOF,
    FLOAT,
    IDENT,
    INT,
    KEYWORD,
    LISP_TOKENS,
    LISP_WHITESPACE,
    RAW_STRING,
    SCAN_ALL,
    SCAN_COMMENTS,
    SCAN_FLOATS,
    SCAN_IDENTS,
    SCAN_INTS,
    SCAN_KEYWORDS,
    SCAN_RAW_STRINGS,
    SCAN_STRINGS,
    SKIP_COMMENTS,
    STRING,
    Mode,
    Position,
    Token,
    TokenType,
    token_string,
    whitespace_mask,
)

__version__ = "0.1.0"

__all__ = [
    "COMMENT",
    "EOF",
    "FLOAT",
    "IDENT",
    "INT",
    "KEYWORD",
    "LISP_TOKENS",
    "LISP_WHITESPACE",
    "RAW_STRING",
    "SCAN_ALL",
    "SCAN_COMMENTS",
    "SCAN_FLOATS",
    "SCAN_IDENTS",
    "SCAN_INTS",
    "SCAN_KEYWORDS",
    "SCAN_RAW_STRINGS",
    "SCAN_STRINGS",
    "SKIP_COMMENTS",
    "STRING",
    "Mode",
    "Position",
    "ScanError",
    "Scanner",
    "SourceReadError",
    "Token",
    "TokenType",
    "token_string",
    "tokenize",
    "whitespace_mask",
]
