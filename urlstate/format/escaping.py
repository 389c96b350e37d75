# -*- coding: utf-8 -*-
"""Location: ./urlstate/format/escaping.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Escaping and tokenizing primitives.

Every grammatical position of an encoded text has a set of special tokens
(for example the stop tokens of a string value). Writing prefixes each
special token with the escape token. Reading walks a cursor through the text
and, on the escape token, consumes the next character literally whether it
is special or not.

Tokens may be longer than one character. An occurrence of a multi-character
special token has every one of its characters escaped, so that a reader that
consumes one literal character per escape never re-assembles the token.

Examples:
    >>> escape_tokens("a,b~c", (",", "~", "/"), "/")
    'a/,b/~c'
    >>> unescape("a/,b/~c", "/")
    'a,b~c'
    >>> cur = Cursor("key/.x.rest")
    >>> cur.read_until((".",), "/")
    Lexeme(text='key.x', escaped=False)
    >>> cur.peek()
    '.'
"""

from __future__ import annotations

# Standard
from typing import Iterable, List, NamedTuple, Optional, Sequence


class Lexeme(NamedTuple):
    """Text read by :meth:`Cursor.read_until`.

    Attributes:
        text: The unescaped text.
        escaped: True when the lexeme began with an escape sequence. Callers
            use it to keep the value a string instead of running type
            detection on it.
    """

    text: str
    escaped: bool


def _match(text: str, pos: int, tokens: Iterable[Optional[str]]) -> Optional[str]:
    """Return the longest token starting at ``pos``, if any."""
    found: Optional[str] = None
    for token in tokens:
        if token and text.startswith(token, pos) and (found is None or len(token) > len(found)):
            found = token
    return found


def escape_tokens(text: str, specials: Sequence[Optional[str]], esc: str) -> str:
    """Prefix every occurrence of a special token with the escape token.

    The escape token itself is only escaped when it is listed in
    ``specials``. Disabled (``None``) tokens are ignored.

    Args:
        text: Raw text.
        specials: Tokens that must not appear unescaped.
        esc: Escape token.

    Returns:
        str: Escaped text.

    Examples:
        >>> escape_tokens("1.5", (".",), "/")
        '1/.5'
        >>> escape_tokens("a::b", ("::",), "/")
        'a/:/:b'
        >>> escape_tokens("a/b", (",",), "/")
        'a/b'
        >>> escape_tokens("a/b", (",", "/"), "/")
        'a//b'
    """
    tokens = [t for t in specials if t]
    if not tokens or not text:
        return text
    out: List[str] = []
    i = 0
    while i < len(text):
        token = _match(text, i, tokens)
        if token is None:
            out.append(text[i])
            i += 1
            continue
        for ch in token:
            out.append(esc)
            out.append(ch)
        i += len(token)
    return "".join(out)


def unescape(text: str, esc: str) -> str:
    """Remove escape tokens, keeping the character after each one.

    A trailing escape token with nothing after it is kept as a literal.

    Examples:
        >>> unescape("a/.b", "/")
        'a.b'
        >>> unescape("a//b", "/")
        'a/b'
        >>> unescape("abc/", "/")
        'abc/'
    """
    if esc not in text:
        return text
    out: List[str] = []
    i = 0
    step = len(esc)
    while i < len(text):
        if text.startswith(esc, i) and i + step < len(text):
            out.append(text[i + step])
            i += step + 1
        else:
            out.append(text[i])
            i += 1
    return "".join(out)


def split_escaped(text: str, sep: str, esc: str, keep_escapes: bool = False) -> List[str]:
    """Split on every separator that is not escaped.

    Args:
        text: Text to split.
        sep: Separator token.
        esc: Escape token.
        keep_escapes: Keep escape sequences in the parts, for callers that
            unescape the parts later.

    Returns:
        List[str]: The parts, always at least one.

    Examples:
        >>> split_escaped("a,b/,c,", ",", "/")
        ['a', 'b,c', '']
        >>> split_escaped("a,b/,c", ",", "/", keep_escapes=True)
        ['a', 'b/,c']
        >>> split_escaped("", ",", "/")
        ['']
    """
    parts: List[str] = []
    current: List[str] = []
    i = 0
    step = len(esc)
    while i < len(text):
        if text.startswith(esc, i) and i + step < len(text):
            if keep_escapes:
                current.append(esc)
            current.append(text[i + step])
            i += step + 1
        elif text.startswith(sep, i):
            parts.append("".join(current))
            current = []
            i += len(sep)
        else:
            current.append(text[i])
            i += 1
    parts.append("".join(current))
    return parts


def find_unescaped(text: str, token: str, esc: str, start: int = 0) -> int:
    """Index of the first unescaped occurrence of ``token``, or -1.

    Examples:
        >>> find_unescaped("a/=b=c", "=", "/")
        4
        >>> find_unescaped("a/=b", "=", "/")
        -1
    """
    i = start
    step = len(esc)
    while i < len(text):
        if text.startswith(esc, i) and i + step < len(text):
            i += step + 1
        elif text.startswith(token, i):
            return i
        else:
            i += 1
    return -1


def strip_trailing(text: str, token: str, esc: str) -> str:
    """Remove unescaped occurrences of ``token`` from the end of ``text``.

    Examples:
        >>> strip_trailing("a@b,c~~", "~", "/")
        'a@b,c'
        >>> strip_trailing("a/~", "~", "/")
        'a/~'
        >>> strip_trailing("a//~", "~", "/")
        'a//'
    """
    # End of the last escape sequence; nothing before it may be stripped
    literal_end = 0
    i = 0
    step = len(esc)
    while i < len(text):
        if text.startswith(esc, i) and i + step < len(text):
            i += step + 1
            literal_end = i
        else:
            i += 1
    while text.endswith(token) and len(text) - len(token) >= literal_end:
        text = text[: -len(token)]
    return text


class Cursor:
    """Forward-only reader over an encoded text.

    Args:
        text: Text to read.

    Examples:
        >>> cur = Cursor("@a,b~")
        >>> cur.match(("@", ":"))
        '@'
        >>> cur.advance()
        >>> cur.read_until((",", "~"), "/").text
        'a'
        >>> cur.remaining
        ',b~'
    """

    __slots__ = ("text", "pos")

    def __init__(self, text: str, pos: int = 0):
        self.text = text
        self.pos = pos

    @property
    def at_end(self) -> bool:
        """True once every character has been consumed."""
        return self.pos >= len(self.text)

    @property
    def remaining(self) -> str:
        """Unread text."""
        return self.text[self.pos :]

    def peek(self) -> str:
        """Current character, empty at the end of input."""
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def startswith(self, token: Optional[str]) -> bool:
        """True when an enabled ``token`` starts at the current position."""
        return bool(token) and self.text.startswith(token, self.pos)

    def match(self, tokens: Iterable[Optional[str]]) -> Optional[str]:
        """Longest enabled token starting at the current position."""
        return _match(self.text, self.pos, tokens)

    def advance(self, count: int = 1) -> None:
        """Move forward, never past the end of input."""
        self.pos = min(self.pos + count, len(self.text))

    def skip(self, token: Optional[str]) -> bool:
        """Consume ``token`` if it starts at the current position.

        Returns:
            bool: Whether the token was consumed.
        """
        if self.startswith(token):
            self.pos += len(token)
            return True
        return False

    def read_until(self, stops: Sequence[Optional[str]], esc: str) -> Lexeme:
        """Read up to the next unescaped stop token.

        The stop token itself is not consumed. An escape token consumes the
        following character literally; at the very end of input it is kept
        as a literal.

        Args:
            stops: Tokens that end the lexeme.
            esc: Escape token.

        Returns:
            Lexeme: The unescaped text and whether it began with an escape.

        Examples:
            >>> Cursor("/D123,x").read_until((",",), "/")
            Lexeme(text='D123', escaped=True)
            >>> Cursor("abc/").read_until((",",), "/")
            Lexeme(text='abc/', escaped=False)
        """
        start = self.pos
        escaped = False
        out: List[str] = []
        step = len(esc)
        text = self.text
        while self.pos < len(text):
            if text.startswith(esc, self.pos):
                if self.pos == start:
                    escaped = True
                if self.pos + step < len(text):
                    out.append(text[self.pos + step])
                    self.pos += step + 1
                else:
                    out.append(esc)
                    self.pos = len(text)
                continue
            if _match(text, self.pos, stops) is not None:
                break
            out.append(text[self.pos])
            self.pos += 1
        return Lexeme("".join(out), escaped)
