"""Test raw strings: delimiter doubling, multi-line content, custom delimiters."""

import pytest

from lispscan.tokens import IDENT, LISP_TOKENS, RAW_STRING, SCAN_RAW_STRINGS

from tests.conftest import assert_types


class TestRawStrings:
    @pytest.mark.parametrize(
        "source, value",
        [
            ("¬¬", ""),
            ("¬abc¬", "abc"),
            ("¬abc¬¬def¬", "abc¬def"),
            ("¬¬¬¬", "¬"),
            ("¬a\nb¬", "a\nb"),
            ('¬"quoted"¬', '"quoted"'),
            ("¬; no comment¬", "; no comment"),
        ],
    )
    def test_raw_string(self, scanner, errors, source, value):
        s = scanner(source)
        assert s.scan() == RAW_STRING
        assert s.token_text() == source
        assert s.token_value() == value
        assert errors == []

    def test_no_escape_processing(self, lex):
        tokens = lex("¬a\\nb¬")
        assert tokens[0].value == "a\\nb"

    def test_followed_by_tokens(self, lex):
        tokens = lex("(¬x¬ y)")
        assert_types(tokens, [ord("("), RAW_STRING, IDENT, ord(")")])

    def test_position_after_multiline(self, scanner):
        s = scanner("¬a\nb¬ c")
        assert s.scan() == RAW_STRING
        end = s.pos()
        assert (end.line, end.column, end.offset) == (2, 3, 7)
        assert s.scan() == IDENT
        assert (s.position.line, s.position.column, s.position.offset) == (2, 4, 8)


class TestUnterminatedRaw:
    def test_eof(self, scanner, errors):
        s = scanner("¬abc")
        assert s.scan() == RAW_STRING
        assert s.token_value() == "abc"
        assert [e.message for e in errors] == ["literal not terminated"]

    def test_trailing_doubled_delimiter(self, scanner, errors):
        s = scanner("¬abc¬¬")
        assert s.scan() == RAW_STRING
        assert s.token_value() == "abc¬"
        assert len(errors) == 1

    def test_error_at_start(self, scanner, errors):
        s = scanner("x\n  ¬abc")
        s.scan()
        s.scan()
        pos = errors[0].position
        assert (pos.line, pos.column) == (2, 3)


class TestRawDelimiter:
    def test_custom_delimiter(self, lex):
        tokens = lex("`a``b`", raw_delimiter="`")
        assert_types(tokens, [RAW_STRING])
        assert tokens[0].value == "a`b"

    def test_default_delimiter_is_ordinary_with_custom(self, lex):
        tokens = lex("¬", raw_delimiter="`")
        assert_types(tokens, [ord("¬")])

    def test_raw_strings_disabled(self, lex):
        tokens = lex("¬a¬", mode=LISP_TOKENS & ~SCAN_RAW_STRINGS)
        assert_types(tokens, [ord("¬"), IDENT, ord("¬")])
