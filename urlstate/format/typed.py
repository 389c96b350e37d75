# -*- coding: utf-8 -*-
"""Location: ./urlstate/format/typed.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Typed format: self-describing text with type markers.

With the default tokens a value is written as:

* string: ``=`` followed by the escaped text (``name=John``)
* number, boolean, null, undefined: ``:`` followed by its text (``age:30``)
* date: ``=D`` followed by the timestamp or ISO text
* array: ``@`` items joined by ``,`` then ``~`` (``tags@a,b~``)
* object: ``.`` entries joined by ``,`` then ``~`` (``user.name=John~``)

Namespaced text drops the leading object marker and trailing terminators,
so ``{"count": 5, "nested": {"hello": "World"}}`` becomes
``count:5,nested.hello=World``.

Strings in bare positions (standalone values and array elements) carry no
string marker. The escape token (``/``) protects every structural token and
defeats misdetection, e.g. the string ``D12345`` is written ``/D12345`` so it
is never read back as a date.

Parsing is permissive: truncated or malformed text yields the best partial
value instead of an exception.

Examples:
    >>> from urlstate.format.options import FormatOptions
    >>> fmt = TypedFormat(FormatOptions())
    >>> fmt.stringify({"count": 5, "nested": {"hello": "World"}})
    'count:5,nested.hello=World'
    >>> fmt.parse_text("count:5,nested.hello=World")
    {'count': 5, 'nested': {'hello': 'World'}}
    >>> fmt.parse_text("items@a,,b~")
    {'items': ['a', '', 'b']}
    >>> fmt.stringify_fields({"name": "John", "tags": ["a", "b"], "age": 30})
    {'name': ['John'], 'tags': ['@a,b'], 'age': [':30']}
"""

from __future__ import annotations

# Standard
import logging
import re
from typing import Any, Dict, List, Mapping, Optional

# First-Party
from urlstate.common.values import element_hint, field_hint, is_array, is_date, is_object, kind_of, UNDEFINED, ValueKind
from urlstate.format.base import FieldInput, FieldMap, field_values, QueryStringFormat
from urlstate.format.coercion import format_number, resolve_value, serialize_boolean, serialize_date, try_parse_boolean, try_parse_date, try_parse_number
from urlstate.format.encoding import decode_uri, encode_uri
from urlstate.format.escaping import Cursor, escape_tokens, Lexeme, strip_trailing
from urlstate.format.options import FALLBACK_ARRAY, FALLBACK_PRIMITIVE, FormatOptions

logger = logging.getLogger(__name__)


class TypedFormat(QueryStringFormat):
    """Typed format codec.

    A disabled primitive marker leaves numbers, booleans and null bare in
    standalone values; a disabled array marker writes standalone arrays as
    plain separated items. Inside objects the default ``:`` and ``@`` markers
    are still used so that nested values stay unambiguous.

    Args:
        options: Validated configuration.
    """

    def __init__(self, options: FormatOptions):
        self.options = options
        markers = options.markers
        separators = options.separators

        self._str = markers.string
        self._prim = markers.primitive
        self._arr = markers.array
        self._prim_inner = markers.primitive or FALLBACK_PRIMITIVE
        self._arr_inner = markers.array or FALLBACK_ARRAY
        self._obj = separators.nesting
        self._term = markers.terminator
        self._sep = separators.entry
        self._arr_sep = separators.array
        self._esc = separators.escape
        self._date_prefix = markers.date_prefix
        self._date_style = options.date_style

        self._markers = (self._str, self._prim_inner, self._arr_inner, self._obj)
        self._value_stops = (self._sep, self._arr_sep, self._term)
        self._key_stops = self._markers + self._value_stops
        self._value_specials = self._value_stops + (self._esc,)
        self._key_specials = self._key_stops + (self._esc,)
        self._number_specials = self._value_specials + (self._obj,)
        self._date_like: Optional[re.Pattern[str]] = re.compile(re.escape(self._date_prefix) + r"-?[0-9]") if self._date_prefix else None
        self._object_re = self._compile_object_detector()

    def _compile_object_detector(self) -> re.Pattern[str]:
        """Regex telling namespaced object text (``key<marker>...``) from a bare string.

        Matches a key character (ordinary or escaped) directly followed by a
        value marker.
        """
        markers = "|".join(re.escape(t) for t in sorted(self._markers, key=len, reverse=True))
        excluded = "|".join(re.escape(t) for t in (self._esc,) + self._markers + (self._sep, self._term))
        return re.compile(f"(?:{re.escape(self._esc)}.|(?!{excluded}).)(?:{markers})", re.DOTALL)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def stringify(self, state: Any) -> str:
        """Encode a state tree as one namespaced text value.

        Examples:
            >>> from urlstate.format.options import FormatOptions
            >>> fmt = TypedFormat(FormatOptions())
            >>> fmt.stringify({"name": "John"})
            'name=John'
            >>> fmt.stringify({"user": {"name": "John"}, "tags": ["a", "b"]})
            'user.name=John~,tags@a,b'
            >>> fmt.stringify({})
            ''
        """
        text = self._serialize(state, standalone=False, in_array=False)
        if text is None:
            logger.debug(f"Cannot serialize value of type {type(state).__name__}")
            return ""
        return encode_uri(self._clean_namespaced(text))

    def parse_text(self, text: str, hint: Any = None) -> Any:
        """Decode namespaced text.

        Examples:
            >>> from urlstate.format.options import FormatOptions
            >>> fmt = TypedFormat(FormatOptions())
            >>> fmt.parse_text("user.name=John~,tags@a,b")
            {'user': {'name': 'John'}, 'tags': ['a', 'b']}
            >>> fmt.parse_text("")
            {}
            >>> fmt.parse_text("hello world")
            'hello world'
        """
        decoded = decode_uri(text)
        if not decoded:
            return {}
        cur = Cursor(decoded)
        if cur.match(self._markers) is not None:
            return self._parse_value(cur, hint, standalone=False)
        if self._object_re.search(decoded):
            return self._parse_object(cur, hint)
        return self._resolve_text(cur.read_until((), self._esc), hint, bare_prims=False)

    def stringify_fields(self, state: Mapping[str, Any]) -> FieldMap:
        """Encode each top-level field as its own value.

        Examples:
            >>> from datetime import datetime, timezone
            >>> from urlstate.format.options import FormatOptions
            >>> fmt = TypedFormat(FormatOptions())
            >>> fmt.stringify_fields({"created": datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc), "code": "D12345"})
            {'created': ['D1705314600000'], 'code': ['/D12345']}
        """
        result: FieldMap = {}
        if not is_object(state):
            logger.debug(f"Standalone layout needs an object, got {type(state).__name__}")
            return result
        for key, value in state.items():
            text = self._serialize(value, standalone=True, in_array=False)
            if text is None:
                logger.debug(f"Dropping field {key!r}: unsupported value")
                continue
            result[str(key)] = [encode_uri(self._clean_standalone(text))]
        return result

    def parse_fields(self, fields: FieldInput, hint: Any = None) -> Dict[str, Any]:
        """Decode standalone fields; only the first value of a field is used.

        Examples:
            >>> from urlstate.format.options import FormatOptions
            >>> fmt = TypedFormat(FormatOptions())
            >>> fmt.parse_fields({"name": ["John"], "age": [":30"], "code": ["/D12345"]})
            {'name': 'John', 'age': 30, 'code': 'D12345'}
        """
        result: Dict[str, Any] = {}
        for key, raw in fields.items():
            values = field_values(raw)
            if not values:
                continue
            result[key] = self._parse_standalone(values[0], field_hint(hint, key))
        return result

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def _serialize(self, value: Any, standalone: bool, in_array: bool) -> Optional[str]:
        """Serialize one value, None when it cannot be represented.

        Args:
            value: Value to write.
            standalone: Inside a standalone field and not inside an object.
            in_array: Direct element of an array.

        Returns:
            Optional[str]: Encoded text, before percent-encoding.
        """
        kind = kind_of(value)
        prim = "" if standalone and self._prim is None else self._prim_inner
        serialize = self.options.serialize

        if kind is ValueKind.NULL:
            return prim + serialize.null
        if kind is ValueKind.UNDEFINED:
            return prim + serialize.undefined
        if kind is ValueKind.BOOLEAN:
            return prim + serialize_boolean(value, serialize.booleans)
        if kind is ValueKind.NUMBER:
            number = format_number(value)
            if number is None:
                return prim + serialize.null
            return prim + escape_tokens(number, self._number_specials, self._esc)
        if kind is ValueKind.DATE:
            text = escape_tokens(serialize_date(value, self._date_style), self._value_specials, self._esc)
            if self._date_prefix is not None:
                return self._str + self._date_prefix + text
            return text if standalone else self._str + text
        if kind is ValueKind.STRING:
            return self._serialize_string(value, standalone, in_array)
        if kind is ValueKind.ARRAY:
            items = []
            for item in value:
                text = self._serialize(item, standalone, in_array=True)
                if text is not None:
                    items.append(text)
            if standalone and not in_array and self._arr is None:
                return self._arr_sep.join(items)
            return self._arr_inner + self._arr_sep.join(items) + self._term
        if kind is ValueKind.OBJECT:
            entries = []
            for key, item in value.items():
                text = self._serialize(item, standalone=False, in_array=False)
                if text is None:
                    continue
                entries.append(escape_tokens(str(key), self._key_specials, self._esc) + text)
            return self._obj + self._sep.join(entries) + self._term
        return None

    def _serialize_string(self, value: str, standalone: bool, in_array: bool) -> str:
        bare = standalone or in_array
        text = escape_tokens(value, self._value_specials, self._esc)
        if self._needs_guard(value, bare_prims=standalone and self._prim is None):
            text = self._esc + text
        elif bare and self._starts_with_marker(text):
            text = self._esc + text
        if in_array and text == "":
            return self._str
        return text if bare else self._str + text

    def _needs_guard(self, value: str, bare_prims: bool) -> bool:
        """True when a string would be read back as something else.

        Examples:
            >>> from urlstate.format.options import FormatOptions
            >>> fmt = TypedFormat(FormatOptions())
            >>> fmt._needs_guard("D2024", bare_prims=False), fmt._needs_guard("Dx", bare_prims=False)
            (True, False)
            >>> fmt._needs_guard("42", bare_prims=True), fmt._needs_guard("42", bare_prims=False)
            (True, False)
        """
        if self._date_like is not None:
            if self._date_like.match(value):
                return True
        elif self.options.parse.dates and try_parse_date(value, self._date_style) is not None:
            return True
        return bare_prims and self._promotes(value)

    def _promotes(self, value: str) -> bool:
        """True when heuristic detection would turn the text into a non-string."""
        return not isinstance(resolve_value(value, None, self.options, detect_dates=self._date_prefix is None), str)

    def _starts_with_marker(self, text: str) -> bool:
        return any(text.startswith(marker) for marker in self._markers)

    def _clean_namespaced(self, text: str) -> str:
        text = strip_trailing(text, self._term, self._esc)
        if text.startswith(self._obj):
            rest = text[len(self._obj) :]
            # An entry with an empty key starts with a marker and needs the object marker kept
            if not self._starts_with_marker(rest):
                return rest
        return text

    def _clean_standalone(self, text: str) -> str:
        text = strip_trailing(text, self._term, self._esc)
        if self._date_prefix is not None and text.startswith(self._str + self._date_prefix):
            return text[len(self._str) :]
        return text

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    def _parse_standalone(self, raw: str, hint: Any) -> Any:
        text = decode_uri(raw)
        if self._arr is None and is_array(hint):
            if text == "":
                return []
            return self._parse_array(Cursor(text), element_hint(hint), standalone=True, terminated=False)
        if text == "":
            return ""
        cur = Cursor(text)
        if cur.match(self._markers) is not None:
            return self._parse_value(cur, hint, standalone=True)
        return self._resolve_text(cur.read_until((), self._esc), hint, bare_prims=self._prim is None)

    def _parse_value(self, cur: Cursor, hint: Any, standalone: bool) -> Any:
        """Parse the value starting at a marker."""
        marker = cur.match(self._markers)
        if marker is None:
            return self._resolve_text(cur.read_until(self._value_stops, self._esc), hint, bare_prims=False)
        cur.advance(len(marker))
        if marker == self._str:
            return self._resolve_text(cur.read_until(self._value_stops, self._esc), hint, bare_prims=False, marked=True)
        if marker == self._prim_inner:
            return self._parse_primitive(cur.read_until(self._value_stops, self._esc).text, hint)
        if marker == self._arr_inner:
            return self._parse_array(cur, element_hint(hint), standalone, terminated=True)
        return self._parse_object(cur, hint)

    def _parse_primitive(self, text: str, hint: Any) -> Any:
        serialize = self.options.serialize
        if text == serialize.null:
            return None
        if text == serialize.undefined:
            return UNDEFINED
        flag = try_parse_boolean(text)
        if flag is not None:
            return flag
        number = try_parse_number(text)
        if number is not None:
            if serialize.booleans == "number" and isinstance(hint, bool) and number in (0, 1):
                return bool(number)
            return number
        logger.debug(f"Unparseable primitive {text!r}, keeping the text")
        return text

    def _parse_array(self, cur: Cursor, hint: Any, standalone: bool, terminated: bool) -> List[Any]:
        """Parse array items up to the terminator, or to the end of input.

        Empty items come from consecutive or boundary separators.

        Args:
            cur: Cursor positioned after the array marker.
            hint: Element hint.
            standalone: Items belong to a standalone value.
            terminated: The array ends with a terminator.

        Returns:
            List[Any]: Parsed items.
        """
        result: List[Any] = []
        stops = self._value_stops if terminated else (self._arr_sep,)
        bare_prims = standalone and self._prim is None
        last_was_sep = False
        while not cur.at_end and not (terminated and cur.startswith(self._term)):
            if cur.skip(self._arr_sep):
                result.append("")
                last_was_sep = True
                continue
            last_was_sep = False
            start = cur.pos
            if cur.match(self._markers) is not None:
                result.append(self._parse_value(cur, hint, standalone))
            else:
                result.append(self._resolve_text(cur.read_until(stops, self._esc), hint, bare_prims))
            if cur.skip(self._arr_sep):
                last_was_sep = True
            elif cur.pos == start or (not terminated and not cur.at_end):
                # Stray token that no item can start with
                cur.advance()
        if last_was_sep:
            result.append("")
        if terminated:
            cur.skip(self._term)
        return result

    def _parse_object(self, cur: Cursor, hint: Any) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        hint = hint if is_object(hint) else None
        while not cur.at_end and not cur.startswith(self._term):
            start = cur.pos
            key = cur.read_until(self._key_stops, self._esc).text
            if cur.match(self._markers) is not None:
                result[key] = self._parse_value(cur, field_hint(hint, key), standalone=False)
            else:
                logger.debug(f"Missing value for key {key!r} at offset {cur.pos}")
            cur.skip(self._sep)
            if cur.pos == start:
                cur.advance()
        cur.skip(self._term)
        return result

    def _resolve_text(self, lexeme: Lexeme, hint: Any, bare_prims: bool, marked: bool = False) -> Any:
        """Resolve string-like text: explicit dates, bare primitives or the string itself.

        Escaped text is always a string. A date hint only applies to text
        after an explicit string marker, or to any text when dates carry no
        prefix; unmarked array items are never coerced by it.
        """
        text, escaped = lexeme
        if escaped:
            return text
        if self._date_prefix is not None:
            if text.startswith(self._date_prefix):
                date = try_parse_date(text[len(self._date_prefix) :], self._date_style, strict=True)
                if date is not None:
                    return date
        elif self.options.parse.dates:
            date = try_parse_date(text, self._date_style)
            if date is not None:
                return date
        if bare_prims:
            return resolve_value(text, hint, self.options, detect_dates=self._date_prefix is None)
        if is_date(hint) and (marked or self._date_prefix is None):
            date = try_parse_date(text, self._date_style, strict=True)
            if date is not None:
                return date
        return text
