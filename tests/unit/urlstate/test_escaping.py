# -*- coding: utf-8 -*-
"""Unit tests for the escaper and tokenizer."""

import pytest

from urlstate.format.escaping import Cursor, escape_tokens, find_unescaped, Lexeme, split_escaped, strip_trailing, unescape


class TestEscapeTokens:
    """Test escaping of special tokens."""

    def test_single_char_tokens(self):
        """Every special character gets the escape prefix."""
        assert escape_tokens("a,b~c", (",", "~"), "/") == "a/,b/~c"

    def test_escape_token_escaped_when_listed(self):
        """The escape token is only escaped when it is special."""
        assert escape_tokens("a/b", (",", "/"), "/") == "a//b"
        assert escape_tokens("a/b", (",",), "/") == "a/b"

    def test_multi_char_token(self):
        """Each character of a multi-character token is escaped."""
        assert escape_tokens("x::y", ("::",), "/") == "x/:/:y"

    def test_longest_token_wins(self):
        """Overlapping tokens resolve to the longest match."""
        assert escape_tokens("a::b:c", (":", "::"), "/") == "a/:/:b/:c"

    def test_disabled_tokens_ignored(self):
        """None tokens are skipped."""
        assert escape_tokens("a:b", (None, ":"), "/") == "a/:b"
        assert escape_tokens("a:b", (None,), "/") == "a:b"

    def test_empty_text(self):
        """Empty text stays empty."""
        assert escape_tokens("", (",",), "/") == ""


class TestUnescape:
    """Test unescaping."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("a/,b", "a,b"),
            ("a//b", "a/b"),
            ("/D123", "D123"),
            ("abc/", "abc/"),
            ("plain", "plain"),
        ],
    )
    def test_unescape(self, text, expected):
        """The character after an escape is kept literally."""
        assert unescape(text, "/") == expected

    def test_inverse_of_escape(self):
        """Unescaping undoes escaping for any specials."""
        text = "a,b/c~d"
        assert unescape(escape_tokens(text, (",", "~", "/"), "/"), "/") == text


class TestSplitEscaped:
    """Test splitting on unescaped separators."""

    def test_split(self):
        """Escaped separators stay inside the part."""
        assert split_escaped("a,b/,c", ",", "/") == ["a", "b,c"]

    def test_boundary_separators(self):
        """Leading, doubled and trailing separators give empty parts."""
        assert split_escaped(",a,,b,", ",", "/") == ["", "a", "", "b", ""]

    def test_keep_escapes(self):
        """Escape sequences can be kept for later unescaping."""
        assert split_escaped("a/,b,c", ",", "/", keep_escapes=True) == ["a/,b", "c"]

    def test_multi_char_separator(self):
        """Separators may be longer than one character."""
        assert split_escaped("a||b", "||", "/") == ["a", "b"]


class TestFindAndStrip:
    """Test searching and trailing token removal."""

    def test_find_unescaped(self):
        """Escaped occurrences are skipped."""
        assert find_unescaped("k/=ey=v", "=", "/") == 5
        assert find_unescaped("no-token", "=", "/") == -1

    def test_strip_trailing(self):
        """Only unescaped trailing tokens are removed."""
        assert strip_trailing("a@b,c~~~", "~", "/") == "a@b,c"
        assert strip_trailing("a/~", "~", "/") == "a/~"
        assert strip_trailing("a/~~", "~", "/") == "a/~"
        assert strip_trailing("a//~", "~", "/") == "a//"


class TestCursor:
    """Test the cursor used by the parsers."""

    def test_read_until_stops(self):
        """Reading stops before the first unescaped stop token."""
        cur = Cursor("name/,x,rest")
        assert cur.read_until((",",), "/") == Lexeme("name,x", False)
        assert cur.remaining == ",rest"

    def test_read_until_marks_escaped_start(self):
        """A lexeme starting with an escape is flagged."""
        assert Cursor("/42").read_until((",",), "/") == Lexeme("42", True)
        assert Cursor("4/2").read_until((",",), "/") == Lexeme("42", False)

    def test_dangling_escape(self):
        """An escape at the end of input is literal."""
        assert Cursor("ab/").read_until((",",), "/").text == "ab/"

    def test_match_and_skip(self):
        """Tokens are matched longest first and consumed on skip."""
        cur = Cursor("::x")
        assert cur.match((":", "::")) == "::"
        assert cur.skip("::")
        assert not cur.skip(",")
        assert cur.peek() == "x"

    def test_advance_never_passes_end(self):
        """Advancing past the end clamps to the end."""
        cur = Cursor("ab")
        cur.advance(5)
        assert cur.at_end
        assert cur.peek() == ""
