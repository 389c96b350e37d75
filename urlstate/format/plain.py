# -*- coding: utf-8 -*-
"""Location: ./urlstate/format/plain.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Plain format: flattened ``path=value`` pairs without type markers.

Nested objects become nesting-separated paths, arrays of scalars become
repeated or separator-joined values, and arrays holding objects or arrays
become indexed paths (``items.0.name`` or ``items[0].name``). Types are
recovered from a hint where one is given, otherwise by heuristics.

Examples:
    >>> from urlstate.format.options import FormatOptions
    >>> fmt = PlainFormat(FormatOptions(typed=False))
    >>> fmt.stringify({"user": {"name": "John", "age": 30}})
    'user.name=John,user.age=30'
    >>> fmt.parse_text("user.name=John,user.age=30")
    {'user': {'name': 'John', 'age': 30}}
    >>> fmt.stringify_fields({"users": [{"name": "Alice"}, {"name": "Bob"}]})
    {'users.0.name': ['Alice'], 'users.1.name': ['Bob']}
"""

from __future__ import annotations

# Standard
import logging
import re
from typing import Any, Dict, List, Mapping, Optional

# First-Party
from urlstate.common.values import element_hint, is_array, is_object, is_representable, is_scalar, kind_of, ValueKind
from urlstate.format.base import FieldInput, FieldMap, normalize_fields, QueryStringFormat
from urlstate.format.coercion import format_number, resolve_value, serialize_boolean, serialize_date
from urlstate.format.encoding import decode_uri, encode_uri
from urlstate.format.escaping import escape_tokens, find_unescaped, split_escaped, unescape
from urlstate.format.options import FormatOptions

logger = logging.getLogger(__name__)

_INDEX_RE = re.compile(r"[0-9]+")

# Largest jump past the end of a list an indexed path may make
_MAX_INDEX_GAP = 1000

_MISSING = object()


def hint_at_path(hint: Any, parts: List[str]) -> Any:
    """Follow a flattened path through a hint.

    Arrays are homogeneous, so an index part always resolves to the first
    element.

    Examples:
        >>> hint_at_path({"users": [{"age": 0}]}, ["users", "3", "age"])
        0
        >>> hint_at_path({"a": 1}, ["a", "b"]) is None
        True
    """
    current = hint
    for part in parts:
        if is_array(current):
            current = current[0] if len(current) > 0 else None
            continue
        if not is_object(current):
            return None
        current = current.get(part)
    return current


def _is_container(value: Any) -> bool:
    return isinstance(value, (dict, list))


def _child(container: Any, part: str) -> Any:
    if isinstance(container, dict):
        return container.get(part, _MISSING)
    if _INDEX_RE.fullmatch(part):
        index = int(part)
        if index < len(container) and container[index] is not None:
            return container[index]
    return _MISSING


def _assign(container: Any, part: str, value: Any) -> bool:
    if isinstance(container, dict):
        container[part] = value
        return True
    if not _INDEX_RE.fullmatch(part):
        return False
    index = int(part)
    if index - len(container) > _MAX_INDEX_GAP:
        return False
    while len(container) <= index:
        container.append(None)
    container[index] = value
    return True


def set_nested(root: Dict[str, Any], parts: List[str], value: Any) -> bool:
    """Store ``value`` at a path, creating lists for numeric parts.

    The first write to a path wins when later writes would need to replace a
    scalar with a container or the other way around.

    Returns:
        bool: False when the value could not be stored.

    Examples:
        >>> root = {}
        >>> set_nested(root, ["items", "1"], "b"), set_nested(root, ["items", "0"], "a")
        (True, True)
        >>> root
        {'items': ['a', 'b']}
        >>> set_nested(root, ["items", "0", "x"], 1)
        False
    """
    current: Any = root
    for i, part in enumerate(parts[:-1]):
        child = _child(current, part)
        if child is _MISSING:
            child = [] if _INDEX_RE.fullmatch(parts[i + 1]) else {}
            if not _assign(current, part, child):
                return False
        elif not _is_container(child):
            return False
        current = child
    existing = _child(current, parts[-1])
    if existing is not _MISSING and _is_container(existing):
        return False
    return _assign(current, parts[-1], value)


class PlainFormat(QueryStringFormat):
    """Plain format codec.

    In namespaced text arrays are joined with the array separator, or written
    as repeated keys when the separator is ``repeat`` or equal to the entry
    separator.

    Args:
        options: Validated configuration.
    """

    def __init__(self, options: FormatOptions):
        self.options = options
        separators = options.separators
        self._nest = separators.nesting
        self._sep = separators.entry
        self._arr_sep = separators.array
        self._esc = separators.escape
        self._repeat = options.repeat_arrays
        self._text_repeat = self._repeat or self._arr_sep == self._sep
        self._bracket = options.plain.array_index_style == "bracket"
        self._empty = options.plain.empty_array_marker

        key_specials = [self._esc, self._sep, self._nest, "="]
        if self._bracket:
            key_specials.append("[")
        self._key_specials = tuple(key_specials)
        self._text_value_specials = (self._esc, self._sep) if self._text_repeat else (self._esc, self._sep, self._arr_sep)
        self._item_specials = (self._esc, self._arr_sep)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def stringify(self, state: Any) -> str:
        """Encode a state object as ``path=value`` entries.

        Examples:
            >>> from urlstate.format.options import FormatOptions
            >>> fmt = PlainFormat(FormatOptions(typed=False, separators={"array": "repeat"}))
            >>> fmt.stringify({"tags": ["a", "b"], "q": "x,y"})
            'tags=a,tags=b,q=x/,y'
        """
        if not is_object(state):
            logger.debug(f"Plain format needs an object, got {type(state).__name__}")
            return ""
        flat: FieldMap = {}
        self._flatten(state, None, True, flat)
        entries: List[str] = []
        for key, values in flat.items():
            if self._text_repeat:
                entries.extend(f"{key}={value}" for value in values)
            else:
                entries.append(f"{key}=" + self._arr_sep.join(values))
        return encode_uri(self._sep.join(entries))

    def parse_text(self, text: str, hint: Any = None) -> Dict[str, Any]:
        """Decode ``path=value`` entries.

        Entries without an unescaped ``=`` are ignored.

        Examples:
            >>> from urlstate.format.options import FormatOptions
            >>> fmt = PlainFormat(FormatOptions(typed=False))
            >>> fmt.parse_text("a/.b=test,a//.c=test")
            {'a.b': 'test', 'a/': {'c': 'test'}}
            >>> piped = PlainFormat(FormatOptions(typed=False, separators={"array": "|"}))
            >>> piped.parse_text("tags=a|b", {"tags": [""]})
            {'tags': ['a', 'b']}
        """
        decoded = decode_uri(text)
        grouped: Dict[str, List[str]] = {}
        if not decoded:
            return {}
        for entry in split_escaped(decoded, self._sep, self._esc, keep_escapes=True):
            if not entry:
                continue
            eq = find_unescaped(entry, "=", self._esc)
            if eq < 0:
                logger.debug(f"Ignoring entry without a value: {entry!r}")
                continue
            grouped.setdefault(entry[:eq], []).append(entry[eq + 1 :])
        return self._unflatten(grouped, hint, namespaced=True)

    def stringify_fields(self, state: Mapping[str, Any]) -> FieldMap:
        """Encode every flattened path as its own field.

        Examples:
            >>> from urlstate.format.options import FormatOptions
            >>> fmt = PlainFormat(FormatOptions(typed=False, separators={"array": "|"}))
            >>> fmt.stringify_fields({"tags": ["a", "b|c"], "empty": []})
            {'tags': ['a|b/%7Cc'], 'empty': ['__empty_array__']}
        """
        result: FieldMap = {}
        if not is_object(state):
            logger.debug(f"Plain format needs an object, got {type(state).__name__}")
            return result
        flat: FieldMap = {}
        self._flatten(state, None, False, flat)
        for key, values in flat.items():
            encoded = [encode_uri(value) for value in values]
            result[key] = encoded if self._repeat else [self._arr_sep.join(encoded)]
        return result

    def parse_fields(self, fields: FieldInput, hint: Any = None) -> Dict[str, Any]:
        """Decode fields produced by :meth:`stringify_fields`.

        Examples:
            >>> from urlstate.format.options import FormatOptions
            >>> fmt = PlainFormat(FormatOptions(typed=False, plain={"arrayIndexStyle": "bracket"}))
            >>> fmt.parse_fields({"users[0].name": "Alice", "users[1].name": "Bob"}, {"users": [{"name": ""}]})
            {'users': [{'name': 'Alice'}, {'name': 'Bob'}]}
        """
        return self._unflatten(normalize_fields(fields), hint, namespaced=False)

    # ------------------------------------------------------------------
    # Flattening
    # ------------------------------------------------------------------

    def _flatten(self, obj: Mapping[Any, Any], prefix: Optional[str], namespaced: bool, out: FieldMap) -> None:
        for raw_key, value in obj.items():
            if not is_representable(value):
                continue
            key = str(raw_key)
            if namespaced:
                key = escape_tokens(key, self._key_specials, self._esc)
            path = key if prefix is None else prefix + self._nest + key
            self._flatten_value(value, path, namespaced, out)

    def _flatten_value(self, value: Any, path: str, namespaced: bool, out: FieldMap) -> None:
        if is_object(value):
            self._flatten(value, path, namespaced, out)
        elif is_array(value):
            self._flatten_array(value, path, namespaced, out)
        elif is_scalar(value):
            out[path] = [self._escape_value(self._scalar_text(value), namespaced, in_array=False)]

    def _flatten_array(self, value: Any, path: str, namespaced: bool, out: FieldMap) -> None:
        items = [item for item in value if is_representable(item)]
        if not items:
            if self._empty is not None:
                out[path] = [self._escape_value(self._empty, namespaced, in_array=False)]
            return
        if any(is_object(item) or is_array(item) for item in items):
            for index, item in enumerate(items):
                self._flatten_value(item, self._index_path(path, index), namespaced, out)
            return
        out[path] = [self._escape_value(self._scalar_text(item), namespaced, in_array=True) for item in items]

    def _index_path(self, path: str, index: int) -> str:
        if self._bracket:
            return f"{path}[{index}]"
        return f"{path}{self._nest}{index}"

    def _scalar_text(self, value: Any) -> str:
        kind = kind_of(value)
        serialize = self.options.serialize
        if kind is ValueKind.NULL:
            return serialize.null
        if kind is ValueKind.UNDEFINED:
            return serialize.undefined
        if kind is ValueKind.BOOLEAN:
            return serialize_boolean(value, serialize.booleans)
        if kind is ValueKind.NUMBER:
            number = format_number(value)
            return serialize.null if number is None else number
        if kind is ValueKind.DATE:
            return serialize_date(value, self.options.date_style)
        return value

    def _escape_value(self, text: str, namespaced: bool, in_array: bool) -> str:
        if namespaced:
            return escape_tokens(text, self._text_value_specials, self._esc)
        if in_array and not self._repeat:
            return escape_tokens(text, self._item_specials, self._esc)
        return text

    # ------------------------------------------------------------------
    # Unflattening
    # ------------------------------------------------------------------

    def _unflatten(self, grouped: Mapping[str, List[str]], hint: Any, namespaced: bool) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        for key, raw_values in grouped.items():
            if not raw_values:
                continue
            parts = self._key_parts(key, namespaced)
            if not parts:
                logger.debug(f"Ignoring empty key {key!r}")
                continue
            texts = raw_values if namespaced else [decode_uri(value) for value in raw_values]
            value = self._resolve_entry(texts, hint_at_path(hint, parts), namespaced)
            if not set_nested(result, parts, value):
                logger.debug(f"Ignoring {key!r}: conflicts with an earlier entry")
        return result

    def _resolve_entry(self, texts: List[str], hint: Any, namespaced: bool) -> Any:
        """Resolve the value(s) of one path.

        Namespaced texts still carry their escapes; standalone texts only have
        escapes inside separator-joined arrays.
        """
        joined = not (self._text_repeat if namespaced else self._repeat)
        if len(texts) == 1:
            single = unescape(texts[0], self._esc) if namespaced else texts[0]
            if self._empty is not None and single == self._empty:
                return []
            if not is_array(hint):
                return resolve_value(single, hint, self.options)
            items = split_escaped(texts[0], self._arr_sep, self._esc) if joined else [single]
        else:
            items = [unescape(text, self._esc) for text in texts] if namespaced else texts
        item_hint = element_hint(hint)
        return [resolve_value(item, item_hint, self.options) for item in items]

    def _key_parts(self, key: str, namespaced: bool) -> List[str]:
        """Split a flattened key into path parts.

        Examples:
            >>> from urlstate.format.options import FormatOptions
            >>> fmt = PlainFormat(FormatOptions(typed=False, plain={"arrayIndexStyle": "bracket"}))
            >>> fmt._key_parts("users[0].name", namespaced=False)
            ['users', '0', 'name']
            >>> fmt._key_parts("a/.b.c", namespaced=True)
            ['a.b', 'c']
        """
        parts: List[str] = []
        current: List[str] = []
        i = 0
        step = len(self._esc)
        while i < len(key):
            if namespaced and key.startswith(self._esc, i) and i + step < len(key):
                current.append(key[i + step])
                i += step + 1
                continue
            if self._bracket and key[i] == "[":
                if current:
                    parts.append("".join(current))
                close = key.find("]", i + 1)
                if close < 0:
                    close = len(key)
                parts.append(key[i + 1 : close])
                current = []
                i = close + 1
                if key.startswith(self._nest, i):
                    i += len(self._nest)
                continue
            if key.startswith(self._nest, i):
                if current:
                    parts.append("".join(current))
                current = []
                i += len(self._nest)
                continue
            current.append(key[i])
            i += 1
        if current:
            parts.append("".join(current))
        return parts
