# -*- coding: utf-8 -*-
"""Location: ./urlstate/format/coercion.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Scalar coercion shared by every format and layout.

``resolve_value`` turns raw text into a typed value. A hint (a sample value
from a reference state at the same path) decides first; heuristics only run
when there is no hint or the hint cannot be honored.

Examples:
    >>> from urlstate.format.options import FormatOptions
    >>> opts = FormatOptions()
    >>> resolve_value("42", 0, opts)
    42
    >>> resolve_value("42", "", opts)
    '42'
    >>> resolve_value("true", None, opts)
    True
    >>> resolve_value("null", "", opts) is None
    True
"""

from __future__ import annotations

# Standard
from datetime import datetime
import math
import re
from typing import Any, Optional, Union

# First-Party
from urlstate.common.values import as_utc, from_timestamp, kind_of, to_iso, to_timestamp, UNDEFINED, ValueKind
from urlstate.format.options import FormatOptions

ISO_DATE_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}T[0-9]{2}:[0-9]{2}:[0-9]{2}")
NUMBER_RE = re.compile(r"-?[0-9]+(\.[0-9]+)?([eE][+-]?[0-9]+)?")
TIMESTAMP_RE = re.compile(r"-?[0-9]+")

# Auto-detected timestamps must fall between 1990-01-01 and 3000-01-01
MIN_PLAUSIBLE_TS = 631152000000
MAX_PLAUSIBLE_TS = 32503680000000

_EXPONENT_RE = re.compile(r"e([+-]?)0*(\d)")


# =============================================================================
# Parsing
# =============================================================================


def try_parse_number(text: str) -> Optional[Union[int, float]]:
    """Parse a decimal number, or return None.

    Integers stay ints. Results that are not finite count as failures.

    Examples:
        >>> try_parse_number("-12")
        -12
        >>> try_parse_number("3.14")
        3.14
        >>> try_parse_number("1e-7")
        1e-07
        >>> try_parse_number("1e999") is None
        True
        >>> try_parse_number("12abc") is None
        True
        >>> try_parse_number(".5") is None
        True
    """
    match = NUMBER_RE.fullmatch(text)
    if not match:
        return None
    if match.group(1) is None and match.group(2) is None:
        return int(text)
    number = float(text)
    if not math.isfinite(number):
        return None
    return number


def try_parse_boolean(text: str, style: str = "string") -> Optional[bool]:
    """Parse ``true``/``false``, plus ``1``/``0`` with the number style.

    Examples:
        >>> try_parse_boolean("false")
        False
        >>> try_parse_boolean("1") is None
        True
        >>> try_parse_boolean("1", "number")
        True
    """
    if text == "true":
        return True
    if text == "false":
        return False
    if style == "number":
        if text == "1":
            return True
        if text == "0":
            return False
    return None


def try_parse_date(text: str, style: str, strict: bool = False) -> Optional[datetime]:
    """Parse a timestamp (timestamp style only) or an ISO 8601 datetime.

    Args:
        text: Raw text.
        style: ``timestamp`` or ``iso``.
        strict: Accept any timestamp. Otherwise only timestamps between 1990
            and 3000 count, so small integers are not mistaken for dates.

    Returns:
        Optional[datetime]: UTC datetime truncated to milliseconds.

    Examples:
        >>> try_parse_date("1705314600000", "timestamp").isoformat()
        '2024-01-15T10:30:00+00:00'
        >>> try_parse_date("12345", "timestamp") is None
        True
        >>> try_parse_date("12345", "timestamp", strict=True).year
        1970
        >>> try_parse_date("2024-01-15T10:30:00.000Z", "iso").isoformat()
        '2024-01-15T10:30:00+00:00'
        >>> try_parse_date("2024-13-45T10:30:00Z", "iso") is None
        True
    """
    if style == "timestamp" and TIMESTAMP_RE.fullmatch(text):
        ts = int(text)
        if not strict and not MIN_PLAUSIBLE_TS <= ts <= MAX_PLAUSIBLE_TS:
            return None
        return from_timestamp(ts)
    if ISO_DATE_RE.match(text):
        iso = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
        try:
            parsed = datetime.fromisoformat(iso)
        except ValueError:
            return None
        parsed = as_utc(parsed)
        return parsed.replace(microsecond=parsed.microsecond // 1000 * 1000)
    return None


def resolve_value(raw: str, hint: Any, options: FormatOptions, detect_dates: bool = True) -> Any:
    """Resolve raw text to a typed value.

    Order: null/undefined sentinels, empty string, hint coercion, then
    heuristics (boolean, date, number), then the raw text.

    Args:
        raw: Unescaped text.
        hint: Sample value at the same path, or None.
        options: Format configuration.
        detect_dates: Allow heuristic date detection, for callers whose dates
            are always explicitly marked.

    Returns:
        Any: The resolved value.

    Examples:
        >>> from urlstate.format.options import FormatOptions
        >>> opts = FormatOptions()
        >>> resolve_value("undefined", None, opts)
        UNDEFINED
        >>> resolve_value("", 5, opts)
        ''
        >>> resolve_value("abc", 5, opts)
        'abc'
        >>> resolve_value("1", True, FormatOptions(serialize={"booleans": "number"}))
        True
        >>> resolve_value("7", [0], opts)
        7
        >>> resolve_value("7", [""], opts)
        '7'
        >>> resolve_value("12345", None, opts)
        12345
        >>> resolve_value("1705314600000", None, opts).year
        2024
        >>> resolve_value("42", None, FormatOptions(parse={"numbers": False}))
        '42'
    """
    if raw == options.serialize.null:
        return None
    if raw == options.serialize.undefined:
        return UNDEFINED
    if raw == "":
        return ""

    kind = kind_of(hint)
    if kind is ValueKind.STRING:
        return raw
    if kind is ValueKind.NUMBER:
        number = try_parse_number(raw)
        if number is not None:
            return number
    elif kind is ValueKind.BOOLEAN:
        flag = try_parse_boolean(raw, options.serialize.booleans)
        if flag is not None:
            return flag
    elif kind is ValueKind.DATE:
        date = try_parse_date(raw, options.date_style, strict=True)
        if date is not None:
            return date
    elif kind is ValueKind.ARRAY and len(hint) > 0 and hint[0] is not UNDEFINED:
        return resolve_value(raw, hint[0], options, detect_dates)

    return auto_detect(raw, options, detect_dates)


def auto_detect(raw: str, options: FormatOptions, detect_dates: bool = True) -> Any:
    """Heuristic detection in the fixed order boolean, date, number.

    Examples:
        >>> from urlstate.format.options import FormatOptions
        >>> auto_detect("false", FormatOptions())
        False
        >>> auto_detect("false", FormatOptions(parse={"booleans": False}))
        'false'
    """
    if options.parse.booleans:
        flag = try_parse_boolean(raw)
        if flag is not None:
            return flag
    if options.parse.dates and detect_dates:
        date = try_parse_date(raw, options.date_style)
        if date is not None:
            return date
    if options.parse.numbers:
        number = try_parse_number(raw)
        if number is not None:
            return number
    return raw


# =============================================================================
# Serialization
# =============================================================================


def format_number(value: Union[int, float]) -> Optional[str]:
    """Shortest decimal text for a number, None when it is not finite.

    Whole floats print without a fractional part.

    Examples:
        >>> format_number(30)
        '30'
        >>> format_number(2.0)
        '2'
        >>> format_number(-0.0)
        '0'
        >>> format_number(0.1)
        '0.1'
        >>> format_number(1.5e-7)
        '1.5e-7'
        >>> format_number(1e21)
        '1e21'
        >>> format_number(float("nan")) is None
        True
    """
    if isinstance(value, int):
        return str(value)
    if not math.isfinite(value):
        return None
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    text = repr(value)
    if "e" in text:
        text = _EXPONENT_RE.sub(lambda m: "e" + m.group(1).replace("+", "") + m.group(2), text)
        text = text.replace(".0e", "e")
    return text


def serialize_boolean(value: bool, style: str) -> str:
    """``true``/``false`` or ``1``/``0``.

    Examples:
        >>> serialize_boolean(True, "string"), serialize_boolean(False, "number")
        ('true', '0')
    """
    if style == "number":
        return "1" if value else "0"
    return "true" if value else "false"


def serialize_date(value: datetime, style: str) -> str:
    """Epoch milliseconds or ISO 8601 with milliseconds.

    Examples:
        >>> from datetime import datetime, timezone
        >>> d = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)
        >>> serialize_date(d, "timestamp")
        '1705314600000'
        >>> serialize_date(d, "iso")
        '2024-01-15T10:30:00.000Z'
    """
    if style == "timestamp":
        return str(to_timestamp(value))
    return to_iso(value)
