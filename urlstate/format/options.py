# -*- coding: utf-8 -*-
"""Location: ./urlstate/format/options.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Format configuration.

Every marker and separator of a format can be overridden. The resolved
configuration is an immutable pydantic model held by the format instance;
conflicting tokens are rejected when the model is built, so encoding and
parsing never need to check them again.

Examples:
    >>> opts = FormatOptions()
    >>> opts.markers.string, opts.markers.primitive, opts.markers.array
    ('=', ':', '@')
    >>> opts.date_style
    'timestamp'
    >>> FormatOptions(typed=False).date_style
    'iso'
    >>> FormatOptions(markers={"datePrefix": False}).markers.date_prefix is None
    True
"""

from __future__ import annotations

# Standard
from itertools import combinations
from typing import Any, List, Literal, Optional, Self, Tuple

# Third-Party
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

REPEAT = "repeat"

# Markers used inside objects when a marker is disabled for standalone values
FALLBACK_PRIMITIVE = ":"
FALLBACK_ARRAY = "@"

_MODEL_CONFIG = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


def _disabled_to_none(value: Any) -> Any:
    """Map ``False`` to ``None`` for tokens that can be disabled."""
    if value is False:
        return None
    return value


class SerializationOptions(BaseModel):
    """How scalar values are written.

    Attributes:
        dates: ``iso`` or ``timestamp``; ``None`` picks the mode default.
        booleans: ``string`` (true/false) or ``number`` (1/0).
        null: Sentinel text for ``None``.
        undefined: Sentinel text for ``UNDEFINED``.
    """

    model_config = _MODEL_CONFIG

    dates: Optional[Literal["iso", "timestamp"]] = None
    booleans: Literal["string", "number"] = "string"
    null: str = Field(default="null", min_length=1)
    undefined: str = Field(default="undefined", min_length=1)


class ParsingOptions(BaseModel):
    """Heuristic type detection toggles, applied when no hint decides."""

    model_config = _MODEL_CONFIG

    numbers: bool = True
    booleans: bool = True
    dates: bool = True


class SeparatorOptions(BaseModel):
    """Structural separators.

    In typed mode the nesting separator doubles as the object marker.
    """

    model_config = _MODEL_CONFIG

    entry: str = Field(default=",", min_length=1)
    array: str = Field(default=",", min_length=1)
    nesting: str = Field(default=".", min_length=1)
    escape: str = Field(default="/", min_length=1)


class MarkerOptions(BaseModel):
    """Type markers for typed mode. ``None`` or ``False`` disables a marker."""

    model_config = _MODEL_CONFIG

    string: str = Field(default="=", min_length=1)
    primitive: Optional[str] = Field(default=":", min_length=1)
    array: Optional[str] = Field(default="@", min_length=1)
    terminator: str = Field(default="~", min_length=1)
    date_prefix: Optional[str] = Field(default="D", min_length=1, alias="datePrefix")

    @field_validator("primitive", "array", "date_prefix", mode="before")
    @classmethod
    def allow_false(cls, value: Any) -> Any:
        """Accept ``False`` as a way to disable a marker.

        Args:
            value: Raw option value.

        Returns:
            The value, with ``False`` mapped to ``None``.
        """
        return _disabled_to_none(value)


class PlainOptions(BaseModel):
    """Options that only apply when ``typed`` is false."""

    model_config = _MODEL_CONFIG

    array_index_style: Literal["dot", "bracket"] = Field(default="dot", alias="arrayIndexStyle")
    empty_array_marker: Optional[str] = Field(default="__empty_array__", min_length=1, alias="emptyArrayMarker")

    @field_validator("empty_array_marker", mode="before")
    @classmethod
    def allow_false(cls, value: Any) -> Any:
        """Accept ``False`` to omit empty arrays entirely.

        Args:
            value: Raw option value.

        Returns:
            The value, with ``False`` mapped to ``None``.
        """
        return _disabled_to_none(value)


class FormatOptions(BaseModel):
    """Complete configuration of a format.

    Attributes:
        typed: Write type markers (typed mode) or plain values (plain mode).
        layout: ``any`` supports namespaced text and standalone fields,
            ``standalone`` only standalone fields. Disabling the primitive or
            array marker requires ``standalone``.
        serialize: Scalar serialization styles.
        parse: Heuristic detection toggles.
        separators: Structural separators and the escape token.
        markers: Type markers, typed mode only.
        plain: Plain mode options.

    Examples:
        >>> FormatOptions(separators={"entry": ";"}).separators.entry
        ';'
        >>> FormatOptions(markers={"primitive": False}, layout="standalone").markers.primitive is None
        True
    """

    model_config = _MODEL_CONFIG

    typed: bool = True
    layout: Literal["any", "standalone"] = "any"
    serialize: SerializationOptions = Field(default_factory=SerializationOptions)
    parse: ParsingOptions = Field(default_factory=ParsingOptions)
    separators: SeparatorOptions = Field(default_factory=SeparatorOptions)
    markers: MarkerOptions = Field(default_factory=MarkerOptions)
    plain: PlainOptions = Field(default_factory=PlainOptions)

    @property
    def date_style(self) -> str:
        """Date style, defaulting to timestamps in typed mode and ISO in plain mode."""
        if self.serialize.dates is not None:
            return self.serialize.dates
        return "timestamp" if self.typed else "iso"

    @property
    def standalone_only(self) -> bool:
        """True when only standalone fields are supported."""
        return self.layout == "standalone"

    @property
    def repeat_arrays(self) -> bool:
        """True when array items are written as repeated values."""
        return self.separators.array == REPEAT

    @model_validator(mode="after")
    def check_conflicts(self) -> Self:
        """Reject configurations whose tokens cannot be told apart.

        Returns:
            Self after validation.

        Raises:
            ValueError: With one line per problem found.
        """
        errors = find_conflicts(self)
        if errors:
            raise ValueError("\n".join(errors))
        return self


# =============================================================================
# Conflict detection
# =============================================================================


def _clash(a: str, b: str) -> bool:
    """True when two tokens are equal or one is a prefix of the other."""
    return a.startswith(b) or b.startswith(a)


def _describe(name_a: str, a: str, name_b: str, b: str) -> str:
    if a == b:
        return f"Collision: '{name_a}' and '{name_b}' both use '{a}'"
    return f"Collision: '{name_a}' ('{a}') and '{name_b}' ('{b}') overlap as prefixes"


def typed_tokens(options: FormatOptions) -> List[Tuple[str, str]]:
    """Named structural tokens of a typed format, fallbacks included.

    Examples:
        >>> [name for name, _ in typed_tokens(FormatOptions())]
        ['markers.string', 'separators.nesting', 'separators.entry', 'markers.terminator', 'markers.primitive', 'markers.array']
    """
    m = options.markers
    s = options.separators
    return [
        ("markers.string", m.string),
        ("separators.nesting", s.nesting),
        ("separators.entry", s.entry),
        ("markers.terminator", m.terminator),
        ("markers.primitive", m.primitive or FALLBACK_PRIMITIVE),
        ("markers.array", m.array or FALLBACK_ARRAY),
    ]


def find_conflicts(options: FormatOptions) -> List[str]:
    """List every problem with a configuration.

    Args:
        options: Configuration to check.

    Returns:
        List[str]: Problem descriptions, empty when the configuration is usable.

    Examples:
        >>> find_conflicts(FormatOptions())
        []
        >>> try:
        ...     FormatOptions(markers={"string": ":"})
        ... except ValueError as e:
        ...     "both use ':'" in str(e)
        True
    """
    errors: List[str] = []
    s = options.separators
    fields_set = options.model_fields_set

    serialize = options.serialize
    if serialize.null == serialize.undefined:
        errors.append(f"Collision: 'serialize.null' and 'serialize.undefined' both use '{serialize.null}'")
    booleans = ("1", "0") if serialize.booleans == "number" else ("true", "false")
    for name, sentinel in (("serialize.null", serialize.null), ("serialize.undefined", serialize.undefined)):
        if sentinel in booleans:
            errors.append(f"{name} '{sentinel}' conflicts with the {serialize.booleans} booleans")

    if options.typed:
        if "plain" in fields_set:
            errors.append("'plain' options only apply when typed: false")

        if options.repeat_arrays:
            errors.append("separators.array 'repeat' only applies when typed: false")

        tokens = typed_tokens(options)
        for (name_a, a), (name_b, b) in combinations(tokens, 2):
            if _clash(a, b):
                # Report in declaration order of the later token, like a "seen" table
                errors.append(_describe(name_b, b, name_a, a))

        for name, token in tokens:
            if _clash(s.escape, token):
                errors.append(f"Escape '{s.escape}' conflicts with '{name}'")

        if s.array != s.entry:
            for name, token in tokens:
                if name != "separators.entry" and _clash(s.array, token):
                    errors.append(f"separators.array '{s.array}' conflicts with '{name}'")
        if _clash(s.escape, s.array):
            errors.append(f"Escape '{s.escape}' conflicts with 'separators.array'")

        prefix = options.markers.date_prefix
        if prefix is not None:
            for name, token in tokens + [("separators.array", s.array), ("separators.escape", s.escape)]:
                if _clash(prefix, token):
                    errors.append(f"markers.datePrefix '{prefix}' conflicts with '{name}'")

        disabled = []
        if options.markers.primitive is None:
            disabled.append("primitiveMarker: false")
        if options.markers.array is None:
            disabled.append("arrayMarker: false")
        if disabled and not options.standalone_only:
            errors.append(
                f"{', '.join(disabled)} can only be used with layout='standalone': namespaced text cannot be parsed unambiguously without these markers"
            )
    else:
        if "markers" in fields_set:
            errors.append("'markers' options only apply when typed: true")

        if not options.repeat_arrays and _clash(s.array, s.nesting):
            errors.append(f"separators.array '{s.array}' conflicts with separators.nesting")
        if _clash(s.entry, s.nesting):
            errors.append(f"separators.entry '{s.entry}' conflicts with separators.nesting")
        if _clash(s.escape, s.entry) or _clash(s.escape, s.nesting) or (not options.repeat_arrays and _clash(s.escape, s.array)):
            errors.append(f"separators.escape '{s.escape}' conflicts with another separator")
        if _clash(s.escape, "="):
            errors.append(f"separators.escape '{s.escape}' conflicts with the '=' between keys and values")
        key_value = [("separators.entry", s.entry), ("separators.nesting", s.nesting)]
        if not options.repeat_arrays:
            key_value.append(("separators.array", s.array))
        for name, token in key_value:
            if _clash(token, "="):
                errors.append(f"{name} '{token}' conflicts with the '=' between keys and values")

    return errors
