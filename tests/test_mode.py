"""Test single-character tokens and mode gating of token classes."""

import pytest

from lispscan.tokens import (
    IDENT,
    INT,
    KEYWORD,
    LISP_TOKENS,
    SCAN_IDENTS,
    SCAN_INTS,
    STRING,
    token_string,
)

from tests.conftest import assert_texts, assert_types


class TestSingleCharTokens:
    @pytest.mark.parametrize("ch", list("()[]{}'`^@,\\#~"))
    def test_punctuation(self, lex, ch):
        tokens = lex(ch)
        assert_types(tokens, [ord(ch)])
        assert tokens[0].text == ch
        assert tokens[0].char == ch

    def test_quoted_form(self, lex):
        tokens = lex("'(a b)")
        assert_types(tokens, [ord("'"), ord("("), IDENT, IDENT, ord(")")])

    def test_syntax_quote_and_unquote(self, lex):
        tokens = lex("`(a ~b ~@c)")
        assert_texts(tokens, ["`", "(", "a", "~", "b", "~@", "c", ")"])

    def test_with_meta(self, lex):
        tokens = lex("^{:a 1}")
        assert_types(tokens, [ord("^"), ord("{"), KEYWORD, INT, ord("}")])

    def test_deref(self, lex):
        tokens = lex("@atom")
        assert_types(tokens, [ord("@"), IDENT])


class TestModeGating:
    def test_mode_zero_is_all_characters(self, lex):
        tokens = lex('ab 12 "s"', mode=0)
        assert [t.char for t in tokens] == list('ab12"s"')

    def test_idents_only(self, lex):
        tokens = lex('x 1 "s"', mode=SCAN_IDENTS)
        assert_types(tokens, [IDENT, ord("1"), ord('"'), IDENT, ord('"')])

    def test_ints_only(self, lex):
        tokens = lex("12 ab", mode=SCAN_INTS)
        assert_types(tokens, [INT, ord("a"), ord("b")])

    def test_set_mode_between_scans(self, scanner):
        s = scanner("abc def")
        assert s.scan() == IDENT
        s.set_mode(0)
        assert s.scan() == ord("d")
        s.set_mode(LISP_TOKENS)
        assert s.scan() == IDENT
        assert s.token_text() == "ef"

    def test_disabled_class_never_reported(self, lex):
        source = '(def x "s" 1 2.5 :k ¬r¬) ; c'
        mode = LISP_TOKENS & ~SCAN_IDENTS
        assert IDENT not in [t.type for t in lex(source, mode=mode)]

    def test_full_mode_classes(self, lex):
        tokens = lex('(def x "s")')
        assert [token_string(t.type) for t in tokens] == [
            '"("',
            "Ident",
            "Ident",
            "String",
            '")"',
        ]

    def test_tags_and_texts_from_scan(self, scanner):
        s = scanner('"a" b')
        assert s.scan() == STRING
        assert s.token_text() == '"a"'
        assert s.scan() == IDENT
        assert s.token_text() == "b"
