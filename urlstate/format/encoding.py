# -*- coding: utf-8 -*-
"""Location: ./urlstate/format/encoding.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Percent-encoding of encoded state.

Formats apply these once, at their public entry points. The reserved set is
the one browsers leave alone in ``encodeURI``: structural characters such as
``,`` ``:`` ``@`` ``=`` and ``~`` stay readable, everything else is UTF-8
percent-encoded.

Examples:
    >>> encode_uri("name=John Smith,tags@a,b")
    'name=John%20Smith,tags@a,b'
    >>> decode_uri("name=John%20Smith")
    'name=John Smith'
    >>> decode_uri("bad%E0%A4%A")
    'bad%E0%A4%A'
"""

# Standard
import logging
import re
from urllib.parse import quote

logger = logging.getLogger(__name__)

# Characters encodeURI never escapes, besides letters, digits and "-_.~"
URI_SAFE = ";,/?:@&=+$!*'()#"

# Escapes of these characters are left undecoded, like decodeURI does
_RESERVED = frozenset(";/?:@&=+$,#")

_ESCAPE_RUN_RE = re.compile(r"(?:%[0-9A-Fa-f]{2})+")


def encode_uri(text: str) -> str:
    """Percent-encode everything outside the URI-safe set.

    Lone surrogates cannot be encoded as UTF-8 and are replaced.

    Examples:
        >>> encode_uri("héllo")
        'h%C3%A9llo'
        >>> encode_uri("a~b*c")
        'a~b*c'
        >>> encode_uri("100%")
        '100%25'
    """
    return quote(text, safe=URI_SAFE, errors="replace")


def decode_uri(text: str) -> str:
    """Decode percent escapes, returning the text unchanged when malformed.

    Escapes of reserved characters (``%2C``, ``%3D``...) are kept as they
    are, so a literal escape typed into a URL never turns into structure.

    Args:
        text: Percent-encoded text.

    Returns:
        str: Decoded text, or ``text`` itself when it holds an invalid escape
        or an invalid UTF-8 sequence.

    Examples:
        >>> decode_uri("a%2Cb%20c")
        'a%2Cb c'
        >>> decode_uri("50%")
        '50%'
        >>> decode_uri("%F0%9F%98%80")
        '😀'
    """
    if "%" not in text:
        return text
    out = []
    pos = 0
    for match in _ESCAPE_RUN_RE.finditer(text):
        literal = text[pos : match.start()]
        if "%" in literal:
            logger.debug(f"Invalid percent escape in {text!r}")
            return text
        out.append(literal)
        try:
            out.append(_decode_run(match.group()))
        except UnicodeDecodeError:
            logger.debug(f"Invalid UTF-8 percent sequence in {text!r}")
            return text
        pos = match.end()
    tail = text[pos:]
    if "%" in tail:
        logger.debug(f"Invalid percent escape in {text!r}")
        return text
    out.append(tail)
    return "".join(out)


def _decode_run(run: str) -> str:
    """Decode consecutive ``%XX`` escapes, keeping reserved ones encoded."""
    out = []
    pending = bytearray()
    for i in range(0, len(run), 3):
        byte = int(run[i + 1 : i + 3], 16)
        if byte < 0x80 and chr(byte) in _RESERVED:
            out.append(pending.decode("utf-8"))
            pending = bytearray()
            out.append(run[i : i + 3])
        else:
            pending.append(byte)
    out.append(pending.decode("utf-8"))
    return "".join(out)
