# -*- coding: utf-8 -*-
"""Location: ./urlstate/common/values.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Value model shared by every format.

State trees are built from JSON-like Python values:

* ``None`` and the ``UNDEFINED`` sentinel
* ``bool``, ``int`` and ``float``
* ``str``
* ``datetime.datetime`` (naive values are treated as UTC)
* ``list``/``tuple`` and ``dict``

Anything else (callables, sets, arbitrary objects) is unsupported and is
dropped by the serializers.

Examples:
    >>> kind_of(True)
    <ValueKind.BOOLEAN: 'boolean'>
    >>> kind_of(1)
    <ValueKind.NUMBER: 'number'>
    >>> kind_of(UNDEFINED)
    <ValueKind.UNDEFINED: 'undefined'>
    >>> deep_equal({"a": [1, 2]}, {"a": [1, 2]})
    True
    >>> deep_equal(True, 1)
    False
"""

from __future__ import annotations

# Standard
from datetime import datetime, timedelta, timezone
from enum import Enum
import math
from typing import Any, Optional

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class Undefined:
    """Marker for a value that is explicitly absent.

    Mirrors ``undefined`` in the browser data model: it serializes to its own
    sentinel and is distinct from ``None``. Only one instance exists.

    Examples:
        >>> Undefined() is UNDEFINED
        True
        >>> bool(UNDEFINED)
        False
        >>> UNDEFINED
        UNDEFINED
    """

    _instance: Optional["Undefined"] = None

    def __new__(cls) -> "Undefined":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> "Undefined":
        return self

    def __deepcopy__(self, memo: Any) -> "Undefined":
        return self

    def __reduce__(self) -> str:
        return "UNDEFINED"


UNDEFINED = Undefined()


class ValueKind(str, Enum):
    """Kinds of values a state tree may contain.

    Examples:
        >>> ValueKind.DATE.value
        'date'
        >>> ValueKind("array") is ValueKind.ARRAY
        True
    """

    NULL = "null"
    UNDEFINED = "undefined"
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    DATE = "date"
    ARRAY = "array"
    OBJECT = "object"
    UNSUPPORTED = "unsupported"


def kind_of(value: Any) -> ValueKind:
    """Classify a Python value.

    Args:
        value: Any value.

    Returns:
        ValueKind: The kind of value, ``UNSUPPORTED`` for anything that has no
        representation.

    Examples:
        >>> kind_of(None).value
        'null'
        >>> kind_of(2.5).value
        'number'
        >>> kind_of((1, 2)).value
        'array'
        >>> kind_of(datetime(2024, 1, 1)).value
        'date'
        >>> kind_of(print).value
        'unsupported'
        >>> kind_of({1, 2}).value
        'unsupported'
    """
    if value is None:
        return ValueKind.NULL
    if value is UNDEFINED:
        return ValueKind.UNDEFINED
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, (int, float)):
        return ValueKind.NUMBER
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, datetime):
        return ValueKind.DATE
    if isinstance(value, (list, tuple)):
        return ValueKind.ARRAY
    if isinstance(value, dict):
        return ValueKind.OBJECT
    return ValueKind.UNSUPPORTED


def is_missing(value: Any) -> bool:
    """Return True for ``None`` and ``UNDEFINED``."""
    return value is None or value is UNDEFINED


def is_array(value: Any) -> bool:
    """Return True for lists and tuples."""
    return isinstance(value, (list, tuple))


def is_object(value: Any) -> bool:
    """Return True for plain mappings."""
    return isinstance(value, dict)


def is_date(value: Any) -> bool:
    """Return True for datetimes."""
    return isinstance(value, datetime)


def is_representable(value: Any) -> bool:
    """Return True when the value can be serialized."""
    return kind_of(value) is not ValueKind.UNSUPPORTED


def is_scalar(value: Any) -> bool:
    """Return True for values that are neither arrays nor objects.

    Examples:
        >>> is_scalar("x"), is_scalar(None), is_scalar([1]), is_scalar({})
        (True, True, False, False)
    """
    return kind_of(value) in {
        ValueKind.NULL,
        ValueKind.UNDEFINED,
        ValueKind.BOOLEAN,
        ValueKind.NUMBER,
        ValueKind.STRING,
        ValueKind.DATE,
    }


# =============================================================================
# Dates
# =============================================================================


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes and convert aware ones to UTC.

    Examples:
        >>> as_utc(datetime(2024, 1, 1)).tzinfo
        datetime.timezone.utc
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_timestamp(value: datetime) -> int:
    """Milliseconds since the Unix epoch, truncated to whole milliseconds.

    Examples:
        >>> to_timestamp(datetime(1970, 1, 1, 0, 0, 1))
        1000
        >>> to_timestamp(datetime(1969, 12, 31, 23, 59, 59))
        -1000
    """
    delta = as_utc(value) - EPOCH
    return delta.days * 86_400_000 + delta.seconds * 1000 + delta.microseconds // 1000


def from_timestamp(ms: int) -> Optional[datetime]:
    """Build an aware UTC datetime from epoch milliseconds.

    Returns:
        Optional[datetime]: ``None`` when the timestamp is outside the range
        ``datetime`` can hold.

    Examples:
        >>> from_timestamp(0).isoformat()
        '1970-01-01T00:00:00+00:00'
        >>> from_timestamp(10**18) is None
        True
    """
    try:
        return EPOCH + timedelta(milliseconds=ms)
    except OverflowError:
        return None


def to_iso(value: datetime) -> str:
    """Render ``YYYY-MM-DDTHH:MM:SS.sssZ`` in UTC.

    Examples:
        >>> to_iso(datetime(2024, 1, 15, 10, 30, 0, 123456))
        '2024-01-15T10:30:00.123Z'
    """
    dt = as_utc(value)
    return f"{dt.year:04d}-{dt.month:02d}-{dt.day:02d}T{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d}.{dt.microsecond // 1000:03d}Z"


# =============================================================================
# Equality and hints
# =============================================================================


def deep_equal(a: Any, b: Any) -> bool:
    """Structural equality over state trees.

    Dates compare by millisecond instant, booleans never equal numbers,
    object key order is ignored and array order is not. NaN equals NaN.

    Examples:
        >>> deep_equal(datetime(2024, 1, 1), datetime(2024, 1, 1, tzinfo=timezone.utc))
        True
        >>> deep_equal({"a": 1, "b": 2}, {"b": 2, "a": 1})
        True
        >>> deep_equal([1, 2], [2, 1])
        False
        >>> deep_equal(None, UNDEFINED)
        False
    """
    kind = kind_of(a)
    if kind is not kind_of(b):
        return False
    if kind is ValueKind.DATE:
        return to_timestamp(a) == to_timestamp(b)
    if kind is ValueKind.NUMBER:
        if isinstance(a, float) and isinstance(b, float) and math.isnan(a) and math.isnan(b):
            return True
        return a == b
    if kind is ValueKind.ARRAY:
        return len(a) == len(b) and all(deep_equal(x, y) for x, y in zip(a, b))
    if kind is ValueKind.OBJECT:
        if set(a) != set(b):
            return False
        return all(deep_equal(a[k], b[k]) for k in a)
    if kind is ValueKind.UNSUPPORTED:
        return a is b
    return a == b


def element_hint(hint: Any) -> Any:
    """Hint for the elements of an array.

    Arrays are assumed homogeneous, so the first element stands in for all.

    Examples:
        >>> element_hint([3, "x"])
        3
        >>> element_hint([]) is None
        True
        >>> element_hint("abc") is None
        True
    """
    if is_array(hint) and len(hint) > 0:
        return hint[0]
    return None


def field_hint(hint: Any, key: str) -> Any:
    """Hint for one field of an object.

    Examples:
        >>> field_hint({"a": 1}, "a")
        1
        >>> field_hint({"a": 1}, "b") is None
        True
        >>> field_hint([{"a": 1}], "a") is None
        True
    """
    if is_object(hint):
        return hint.get(key)
    return None
