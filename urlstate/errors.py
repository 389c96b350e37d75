# -*- coding: utf-8 -*-
"""Location: ./urlstate/errors.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Exceptions raised by urlstate.

Parsing never raises: malformed text degrades to the best partial value.
The only failure surfaced to callers is an invalid format configuration,
reported once at construction time.

Examples:
    >>> err = ConfigurationError(["Collision: 'markers.string' and 'markers.primitive' both use ':'"])
    >>> isinstance(err, ValueError)
    True
    >>> print(err)
    Invalid format configuration:
      - Collision: 'markers.string' and 'markers.primitive' both use ':'
    >>> err.errors
    ["Collision: 'markers.string' and 'markers.primitive' both use ':'"]
"""

# Standard
import logging
from typing import Any, Dict, List, Sequence

# Third-Party
from pydantic import ValidationError

logger = logging.getLogger(__name__)


class UrlStateError(Exception):
    """Base class for urlstate errors."""


class ConfigurationError(UrlStateError, ValueError):
    """Raised when format options are invalid or collide with each other.

    Attributes:
        errors: One human readable message per problem found.
    """

    def __init__(self, errors: Sequence[str]):
        """Initialize the error with every problem found during validation.

        Args:
            errors: Problem descriptions.
        """
        self.errors: List[str] = list(errors)
        super().__init__("Invalid format configuration:\n  - " + "\n  - ".join(self.errors))


def format_validation_error(error: ValidationError) -> List[str]:
    """Convert a pydantic ValidationError into configuration messages.

    Nested locations are rendered as dotted option paths so that the
    messages read like the options the caller passed in.

    Args:
        error: The validation error raised while building the options.

    Returns:
        List[str]: One message per validation problem.

    Examples:
        >>> from pydantic import BaseModel
        >>> class Inner(BaseModel):
        ...     entry: str
        >>> class Outer(BaseModel):
        ...     separators: Inner
        >>> try:
        ...     Outer(separators={"entry": 5})
        ... except ValidationError as e:
        ...     format_validation_error(e)
        ['separators.entry: Input should be a valid string']
    """
    messages: List[str] = []
    for err in error.errors():
        # Cross-field checks report several problems in one error, one per line
        messages.extend(_format_error(err).splitlines())
    logger.debug(f"Format options validation failed: {error}")
    return messages


def _format_error(err: Dict[str, Any]) -> str:
    """Render a single pydantic error entry.

    Args:
        err: One entry of ``ValidationError.errors()``.

    Returns:
        str: ``path: message`` or the bare message for model level errors.
    """
    loc = ".".join(str(part) for part in err.get("loc", ()))
    msg = err.get("msg", "Invalid value")
    # Model level validators report their own location in the message
    if msg.startswith("Value error, "):
        msg = msg[len("Value error, ") :]
    return f"{loc}: {msg}" if loc else msg
