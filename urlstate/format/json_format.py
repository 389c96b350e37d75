# -*- coding: utf-8 -*-
"""Location: ./urlstate/format/json_format.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

JSON format: percent-encoded JSON text.

The least compact format, but readable by any JSON tooling. Dates are written
as ISO 8601 strings and revived only where the hint holds a date.

Examples:
    >>> fmt = JsonFormat()
    >>> fmt.stringify({"name": "John Smith", "tags": ["a"]})
    '%7B%22name%22:%22John%20Smith%22,%22tags%22:%5B%22a%22%5D%7D'
    >>> fmt.parse_text(fmt.stringify({"name": "John Smith", "tags": ["a"]}))
    {'name': 'John Smith', 'tags': ['a']}
"""

from __future__ import annotations

# Standard
import logging
from typing import Any, Dict, Mapping, Optional

# Third-Party
import orjson

# First-Party
from urlstate.common.values import element_hint, field_hint, is_array, is_date, is_object, kind_of, to_iso, UNDEFINED, ValueKind
from urlstate.format.base import FieldInput, FieldMap, field_values, QueryStringFormat
from urlstate.format.coercion import try_parse_date
from urlstate.format.encoding import decode_uri, encode_uri
from urlstate.format.options import FormatOptions

logger = logging.getLogger(__name__)

_DROP = object()

_INT_MIN = -(2**63)
_UINT_MAX = 2**64 - 1


def to_json_value(value: Any) -> Any:
    """Convert a state value into data orjson can dump.

    Undefined and unsupported values are dropped from objects and become
    ``None`` inside arrays; dates become ISO strings.

    Examples:
        >>> to_json_value({"a": UNDEFINED, "b": [UNDEFINED, print], 3: (1, 2)})
        {'b': [None, None], '3': [1, 2]}
    """
    converted = _convert(value)
    return None if converted is _DROP else converted


def _convert(value: Any) -> Any:
    kind = kind_of(value)
    if kind is ValueKind.DATE:
        return to_iso(value)
    if kind is ValueKind.ARRAY:
        return [None if item is _DROP else item for item in map(_convert, value)]
    if kind is ValueKind.OBJECT:
        result = {}
        for key, item in value.items():
            converted = _convert(item)
            if converted is not _DROP:
                result[str(key)] = converted
        return result
    if kind in (ValueKind.UNDEFINED, ValueKind.UNSUPPORTED):
        return _DROP
    # orjson only dumps integers that fit in 64 bits
    if kind is ValueKind.NUMBER and isinstance(value, int) and not _INT_MIN <= value <= _UINT_MAX:
        return float(value)
    return value


def revive(value: Any, hint: Any) -> Any:
    """Turn ISO strings back into dates wherever the hint holds a date.

    Examples:
        >>> from datetime import datetime
        >>> revive({"at": "2024-01-15T10:30:00.000Z"}, {"at": datetime(2000, 1, 1)})["at"].year
        2024
        >>> revive({"at": "soon"}, {"at": datetime(2000, 1, 1)})
        {'at': 'soon'}
    """
    if is_date(hint) and isinstance(value, str):
        date = try_parse_date(value, "iso", strict=True)
        return value if date is None else date
    if is_object(hint) and is_object(value):
        return {key: revive(item, field_hint(hint, key)) for key, item in value.items()}
    if is_array(hint) and is_array(value):
        item_hint = element_hint(hint)
        return [revive(item, item_hint) for item in value]
    return value


class JsonFormat(QueryStringFormat):
    """JSON codec for both layouts.

    Args:
        options: Only kept for introspection; JSON has no tokens to configure.
    """

    def __init__(self, options: Optional[FormatOptions] = None):
        self.options = options or FormatOptions()

    def _dump(self, value: Any) -> str:
        return encode_uri(orjson.dumps(to_json_value(value)).decode())

    def stringify(self, state: Any) -> str:
        return self._dump(state)

    def parse_text(self, text: str, hint: Any = None) -> Any:
        """Decode JSON text; invalid JSON comes back as the decoded text.

        Examples:
            >>> JsonFormat().parse_text("not%20json")
            'not json'
            >>> JsonFormat().parse_text("")
            {}
        """
        decoded = decode_uri(text)
        if not decoded:
            return {}
        try:
            return revive(orjson.loads(decoded), hint)
        except orjson.JSONDecodeError:
            logger.debug(f"Invalid JSON state: {decoded!r}")
            return decoded

    def stringify_fields(self, state: Mapping[str, Any]) -> FieldMap:
        """Encode each top-level field as its own JSON document.

        Examples:
            >>> JsonFormat().stringify_fields({"n": 1, "s": "x", "u": UNDEFINED})
            {'n': ['1'], 's': ['%22x%22']}
        """
        result: FieldMap = {}
        if not is_object(state):
            logger.debug(f"Standalone layout needs an object, got {type(state).__name__}")
            return result
        for key, value in state.items():
            if kind_of(value) in (ValueKind.UNDEFINED, ValueKind.UNSUPPORTED):
                continue
            result[str(key)] = [self._dump(value)]
        return result

    def parse_fields(self, fields: FieldInput, hint: Any = None) -> Dict[str, Any]:
        """Decode fields; fields holding invalid JSON are skipped.

        Examples:
            >>> JsonFormat().parse_fields({"n": "1", "bad": "%7B"})
            {'n': 1}
        """
        result: Dict[str, Any] = {}
        for key, raw in fields.items():
            values = field_values(raw)
            if not values:
                continue
            try:
                value = orjson.loads(decode_uri(values[0]))
            except orjson.JSONDecodeError:
                logger.debug(f"Skipping field {key!r}: invalid JSON")
                continue
            result[key] = revive(value, field_hint(hint, key))
        return result
