# -*- coding: utf-8 -*-
"""Location: ./urlstate/format/base.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Interfaces implemented by every format.

Two layouts exist:

* **namespaced**: the whole state tree is packed into one text value
  (``stringify`` / ``parse_text``);
* **standalone**: every top-level field becomes its own query parameter
  (``stringify_fields`` / ``parse_fields``). Field values are lists because a
  query string may repeat a key.

Text returned by either layout is already percent-encoded and ready to be
placed in a URL.
"""

from __future__ import annotations

# Standard
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Sequence, Union

# First-Party
from urlstate.format.options import FormatOptions

FieldMap = Dict[str, List[str]]
FieldInput = Mapping[str, Union[str, Sequence[str]]]


def field_values(value: Union[str, Sequence[str]]) -> List[str]:
    """Normalize one field of a ``FieldInput`` to a list.

    Examples:
        >>> field_values("a")
        ['a']
        >>> field_values(("a", "b"))
        ['a', 'b']
    """
    if isinstance(value, str):
        return [value]
    return list(value)


def normalize_fields(fields: FieldInput) -> FieldMap:
    """Copy a field mapping with every value as a list.

    Examples:
        >>> normalize_fields({"a": "1", "b": ("2", "3")})
        {'a': ['1'], 'b': ['2', '3']}
    """
    return {key: field_values(values) for key, values in fields.items()}


class FieldsFormat(ABC):
    """A format that supports the standalone layout."""

    options: FormatOptions

    @abstractmethod
    def stringify_fields(self, state: Mapping[str, Any]) -> FieldMap:
        """Encode each top-level field of ``state`` separately.

        Args:
            state: State object.

        Returns:
            FieldMap: Parameter name to one or more encoded values.
        """

    @abstractmethod
    def parse_fields(self, fields: FieldInput, hint: Any = None) -> Dict[str, Any]:
        """Decode fields produced by :meth:`stringify_fields`.

        Args:
            fields: Parameter name to encoded value(s).
            hint: Reference state used to recover ambiguous types.

        Returns:
            Dict[str, Any]: The decoded state.
        """


class QueryStringFormat(FieldsFormat):
    """A format that supports both layouts."""

    @abstractmethod
    def stringify(self, state: Any) -> str:
        """Encode a whole state tree into one text value."""

    @abstractmethod
    def parse_text(self, text: str, hint: Any = None) -> Any:
        """Decode text produced by :meth:`stringify`.

        Args:
            text: Encoded text.
            hint: Reference state used to recover ambiguous types.

        Returns:
            Any: The decoded state; never raises on malformed input.
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}(typed={self.options.typed})"


class StandaloneFormat(FieldsFormat):
    """Restricts a format to the standalone layout.

    Used for configurations that cannot produce unambiguous namespaced text,
    such as typed formats with a disabled primitive or array marker.

    Args:
        inner: The wrapped format.
    """

    def __init__(self, inner: QueryStringFormat):
        self._inner = inner
        self.options = inner.options

    def stringify_fields(self, state: Mapping[str, Any]) -> FieldMap:
        return self._inner.stringify_fields(state)

    def parse_fields(self, fields: FieldInput, hint: Any = None) -> Dict[str, Any]:
        return self._inner.parse_fields(fields, hint)

    def __repr__(self) -> str:
        return f"StandaloneFormat({self._inner!r})"
