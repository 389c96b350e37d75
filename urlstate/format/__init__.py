# -*- coding: utf-8 -*-
"""Location: ./urlstate/format/__init__.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Format factory and ready-made presets.

Examples:
    >>> fmt = create_format(separators={"entry": ";"})
    >>> fmt.stringify({"a": 1, "b": "x"})
    'a:1;b=x'
    >>> create_format({"markers": {"primitive": False}, "layout": "standalone"})
    StandaloneFormat(TypedFormat(typed=True))
    >>> plain.stringify_fields({"tags": ["a", "b"]})
    {'tags': ['a', 'b']}
"""

from __future__ import annotations

# Standard
import logging
from typing import Any, Mapping, Optional, Union

# Third-Party
from pydantic import ValidationError

# First-Party
from urlstate.errors import ConfigurationError, format_validation_error
from urlstate.format.base import FieldMap, FieldsFormat, QueryStringFormat, StandaloneFormat
from urlstate.format.json_format import JsonFormat
from urlstate.format.options import FormatOptions, REPEAT
from urlstate.format.plain import PlainFormat
from urlstate.format.typed import TypedFormat

logger = logging.getLogger(__name__)


def build_options(options: Optional[Union[FormatOptions, Mapping[str, Any]]] = None, **kwargs: Any) -> FormatOptions:
    """Validate raw options into a ``FormatOptions``.

    Args:
        options: A ready ``FormatOptions`` or a mapping of raw options.
        **kwargs: Extra raw options, merged over ``options``.

    Returns:
        FormatOptions: The validated configuration.

    Raises:
        ConfigurationError: If any option is invalid or two tokens collide.

    Examples:
        >>> build_options(typed=False).typed
        False
        >>> try:
        ...     build_options(markers={"string": ":"})
        ... except ConfigurationError as e:
        ...     e.errors
        ["Collision: 'markers.primitive' and 'markers.string' both use ':'"]
    """
    if isinstance(options, FormatOptions) and not kwargs:
        return options
    if isinstance(options, FormatOptions):
        raw = options.model_dump(exclude_unset=True, by_alias=True)
    else:
        raw = dict(options or {})
    raw.update(kwargs)
    try:
        return FormatOptions.model_validate(raw)
    except ValidationError as e:
        raise ConfigurationError(format_validation_error(e)) from e


def create_format(options: Optional[Union[FormatOptions, Mapping[str, Any]]] = None, **kwargs: Any) -> FieldsFormat:
    """Build a format from options.

    Args:
        options: A ready ``FormatOptions`` or a mapping of raw options.
        **kwargs: Extra raw options, merged over ``options``.

    Returns:
        FieldsFormat: A ``TypedFormat`` or ``PlainFormat``, wrapped in a
        ``StandaloneFormat`` when ``layout`` is ``standalone``.

    Raises:
        ConfigurationError: If the configuration is invalid.

    Examples:
        >>> create_format()
        TypedFormat(typed=True)
        >>> create_format(typed=False)
        PlainFormat(typed=False)
    """
    resolved = build_options(options, **kwargs)
    fmt: QueryStringFormat = TypedFormat(resolved) if resolved.typed else PlainFormat(resolved)
    logger.debug(f"Created {fmt!r} with layout {resolved.layout}")
    if resolved.standalone_only:
        return StandaloneFormat(fmt)
    return fmt


typed = create_format()
plain = create_format(typed=False, separators={"array": REPEAT})
json = JsonFormat()

__all__ = [
    "build_options",
    "create_format",
    "FieldMap",
    "FieldsFormat",
    "FormatOptions",
    "JsonFormat",
    "json",
    "plain",
    "PlainFormat",
    "QueryStringFormat",
    "StandaloneFormat",
    "typed",
    "TypedFormat",
]
