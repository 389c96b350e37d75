# -*- coding: utf-8 -*-
"""Location: ./urlstate/querystring.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Helpers for keeping application state in a URL.

The usual flow writes only what differs from the initial state, and reads it
back on top of a copy of the initial state:

    >>> from urlstate.format import typed
    >>> initial = {"page": 1, "filters": {"q": "", "tags": []}}
    >>> state = {"page": 3, "filters": {"q": "shoes", "tags": []}}
    >>> url = create_url("https://shop.example/list?ref=mail", "state", compact_state(state, initial), typed)
    >>> url
    'https://shop.example/list?ref=mail&state=page:3,filters.q=shoes'
    >>> merge_state(initial, read_state(url, "state", typed, initial))
    {'page': 3, 'filters': {'q': 'shoes', 'tags': []}}
"""

from __future__ import annotations

# Standard
import copy
import logging
import re
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple
from urllib.parse import quote, unquote, urlsplit, urlunsplit

# First-Party
from urlstate.common.values import deep_equal, is_missing, is_object, is_representable, UNDEFINED
from urlstate.format.base import FieldMap, QueryStringFormat

logger = logging.getLogger(__name__)

_QUERY_KEY_SAFE = ":,.@~/$!*'()[]"

# Characters the formats leave unencoded that would break a query string
_QUERY_BREAKING = {"&": "%26", "#": "%23", "+": "%2B"}
_QUERY_BREAKING_RE = re.compile("|".join(re.escape(c) for c in _QUERY_BREAKING))
_QUERY_RESTORE_RE = re.compile(r"%(26|23|2[Bb])")


# =============================================================================
# State shaping
# =============================================================================


def compact_state(state: Any, initial: Any) -> Dict[str, Any]:
    """Keep only the fields of ``state`` that differ from ``initial``.

    Objects are compared field by field and empty results are dropped.
    ``None``, ``UNDEFINED`` and unsupported values (callables and the like)
    never make it into the result.

    Args:
        state: Current state.
        initial: Initial state.

    Returns:
        Dict[str, Any]: The changed fields.

    Examples:
        >>> compact_state({"a": 1, "b": {"c": 2, "d": 3}, "f": print}, {"a": 1, "b": {"c": 2, "d": 0}})
        {'b': {'d': 3}}
        >>> compact_state({"a": None, "tags": ["x"]}, {"tags": []})
        {'tags': ['x']}
    """
    output: Dict[str, Any] = {}
    if not is_object(state):
        return output
    for key, value in state.items():
        if is_missing(value) or not is_representable(value):
            continue
        reference = initial.get(key, UNDEFINED) if is_object(initial) else UNDEFINED
        if deep_equal(value, reference):
            continue
        if is_object(value):
            nested = compact_state(value, reference)
            if nested:
                output[key] = nested
        else:
            output[key] = value
    return output


def select_state(selection: Mapping[str, Any], state: Any) -> Dict[str, Any]:
    """Project a state through a selection of fields.

    A selection maps field names to ``True`` (keep the field), ``False``
    (drop it) or a nested selection.

    Examples:
        >>> select_state({"page": True, "user": {"name": True}}, {"page": 2, "user": {"name": "Ann", "id": 7}, "x": 1})
        {'page': 2, 'user': {'name': 'Ann'}}
        >>> select_state({"missing": True, "off": False}, {"off": 1})
        {}
    """
    result: Dict[str, Any] = {}
    if not is_object(state):
        return result
    for key, value in selection.items():
        if isinstance(value, bool):
            if value and key in state:
                result[key] = state[key]
        elif is_object(value):
            result[key] = select_state(value, state.get(key))
    return result


def merge_state(initial: Any, parsed: Any) -> Any:
    """Deep merge parsed state over a copy of the initial state.

    Objects merge field by field; any other value (arrays included) replaces
    the initial one. ``UNDEFINED`` values in ``parsed`` are ignored.

    Examples:
        >>> initial = {"a": 1, "b": {"c": 2, "d": [1, 2]}}
        >>> merge_state(initial, {"b": {"d": [9]}, "e": UNDEFINED})
        {'a': 1, 'b': {'c': 2, 'd': [9]}}
        >>> initial["b"]["d"]
        [1, 2]
    """
    if parsed is UNDEFINED:
        return copy.deepcopy(initial)
    if not (is_object(initial) and is_object(parsed)):
        return copy.deepcopy(parsed)
    merged = copy.deepcopy(initial)
    for key, value in parsed.items():
        if value is UNDEFINED:
            continue
        merged[key] = merge_state(merged[key], value) if key in merged else copy.deepcopy(value)
    return merged


# =============================================================================
# URLs and query strings
# =============================================================================


def _query_name(key: str) -> str:
    return quote(key, safe=_QUERY_KEY_SAFE)


def _query_value(value: str) -> str:
    return _QUERY_BREAKING_RE.sub(lambda m: _QUERY_BREAKING[m.group(0)], value)


def _split_query(query: str) -> Iterator[Tuple[str, str, str]]:
    """Yield ``(name, value, entry)`` for each entry of a raw query string.

    Names are fully decoded; values only get back the characters
    :func:`_query_value` encoded, the rest is left to the format.
    """
    query = query[1:] if query.startswith("?") else query
    for entry in query.split("&"):
        if not entry:
            continue
        name, _, value = entry.partition("=")
        yield unquote(name), _QUERY_RESTORE_RE.sub(lambda m: chr(int(m.group(1), 16)), value), entry


def create_url(base_url: str, key: str, state: Any, fmt: QueryStringFormat) -> str:
    """Put the namespaced encoding of ``state`` under ``key`` in a URL.

    Other query parameters and the fragment are kept as they are. A state
    that encodes to nothing removes ``key``.

    Args:
        base_url: URL to update.
        key: Query parameter holding the state.
        state: State to encode.
        fmt: Format used for the encoding.

    Returns:
        str: The new URL.

    Examples:
        >>> from urlstate.format import typed
        >>> create_url("/items?state=page:2#top", "state", {"page": 4}, typed)
        '/items?state=page:4#top'
        >>> create_url("/items?state=page:2&x=1", "state", {}, typed)
        '/items?x=1'
        >>> create_url("/items", "state", {"q": "Tom & Jerry"}, typed)
        '/items?state=q=Tom%20%26%20Jerry'
    """
    parts = urlsplit(base_url)
    entries = [entry for name, _, entry in _split_query(parts.query) if name != key]
    text = fmt.stringify(state)
    if text:
        entries.append(f"{_query_name(key)}={_query_value(text)}")
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "&".join(entries), parts.fragment))


def read_state(url: str, key: str, fmt: QueryStringFormat, hint: Any = None) -> Optional[Any]:
    """Read the state stored under ``key`` by :func:`create_url`.

    Args:
        url: URL, or a bare query string starting with ``?``.
        key: Query parameter holding the state.
        fmt: Format used for the encoding.
        hint: Reference state used to recover ambiguous types.

    Returns:
        The decoded state, or None when ``key`` is absent.

    Examples:
        >>> from urlstate.format import typed
        >>> read_state("?state=page:4", "state", typed)
        {'page': 4}
        >>> read_state("/items", "state", typed) is None
        True
    """
    for name, value, _ in _split_query(urlsplit(url).query):
        if name == key:
            return fmt.parse_text(value, hint)
    logger.debug(f"No {key!r} parameter in {url!r}")
    return None


def query_from_fields(fields: Mapping[str, List[str]]) -> str:
    """Build a query string from standalone fields.

    Values are already percent-encoded by the format; only the characters
    that would split the query (``&``, ``#`` and ``+``) are encoded here.

    Examples:
        >>> query_from_fields({"name": ["Tom&Jerry"], "tags": ["a", "b"]})
        'name=Tom%26Jerry&tags=a&tags=b'
    """
    return "&".join(f"{_query_name(key)}={_query_value(value)}" for key, values in fields.items() for value in values)


def fields_from_query(query: str) -> FieldMap:
    """Split a query string into standalone fields, keeping repeated keys.

    Keys are fully decoded; values keep their percent-encoding apart from
    the characters :func:`query_from_fields` encodes.

    Examples:
        >>> fields_from_query("?name=Tom%26Jerry&tags=a&tags=b&flag")
        {'name': ['Tom&Jerry'], 'tags': ['a', 'b'], 'flag': ['']}
    """
    fields: FieldMap = {}
    for name, value, _ in _split_query(query):
        fields.setdefault(name, []).append(value)
    return fields
