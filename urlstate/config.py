# -*- coding: utf-8 -*-
"""Location: ./urlstate/config.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

urlstate Configuration.
Settings are read from environment variables (prefixed with ``URLSTATE_``)
or a ``.env`` file, and only matter to applications and the command line;
the format API itself takes every option explicitly.

Environment variables:
- URLSTATE_LOG_LEVEL: Logging level (default: "WARNING")
- URLSTATE_DEFAULT_FORMAT: Format used when none is named: typed, plain or json (default: "typed")
- URLSTATE_STATE_KEY: Query parameter holding namespaced state (default: "state")
- URLSTATE_FORMAT_OPTIONS: JSON object of format options (default: {})

Examples:
    >>> s = Settings(log_level="debug", default_format="plain")
    >>> s.log_level
    'DEBUG'
    >>> s.build_format()
    PlainFormat(typed=False)
    >>> Settings(format_options={"separators": {"entry": ";"}}).build_format().stringify({"a": 1, "b": 2})
    'a:1;b:2'
"""

# Standard
from functools import lru_cache
import logging
from typing import Any, Dict, Literal, Optional

# Third-Party
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# First-Party
from urlstate.format import create_format, FieldsFormat, json, plain

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class Settings(BaseSettings):
    """urlstate settings, loaded from the environment."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="WARNING", description="Logging level")
    default_format: Literal["typed", "plain", "json"] = Field(default="typed", description="Format used when none is named")
    state_key: str = Field(default="state", min_length=1, description="Query parameter holding namespaced state")
    format_options: Dict[str, Any] = Field(default_factory=dict, description="Options applied to the typed and plain formats")

    model_config = SettingsConfigDict(env_prefix="URLSTATE_", env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore")

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize the log level so that "debug" and "Debug" are accepted.

        Args:
            v: The log level from configuration or the environment.

        Returns:
            str: The uppercased log level.

        Raises:
            ValueError: If the value is not a known level.
        """
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_up = str(v).upper()
        if v_up not in allowed:
            raise ValueError(f"Invalid log_level: {v}")
        return v_up

    def build_format(self, name: Optional[str] = None) -> FieldsFormat:
        """Build the named format, or the default one.

        ``format_options`` only apply to the typed and plain formats; the
        plain format writes arrays as repeated values unless told otherwise.

        Args:
            name: ``typed``, ``plain`` or ``json``.

        Returns:
            FieldsFormat: The format.

        Raises:
            ConfigurationError: If ``format_options`` are invalid.
        """
        name = name or self.default_format
        if name == "json":
            return json
        if name == "plain":
            if not self.format_options:
                return plain
            separators = {"array": "repeat", **self.format_options.get("separators", {})}
            return create_format(self.format_options, typed=False, separators=separators)
        return create_format(self.format_options, typed=True)


def configure_logging(level: str) -> None:
    """Set up root logging unless the host application already has.

    Args:
        level: Level name, e.g. ``DEBUG``.
    """
    # Only configure basic logging if no handlers exist yet
    if not logging.getLogger().handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S")
    logging.getLogger("urlstate").setLevel(level)


@lru_cache()
def get_settings(**kwargs: Any) -> Settings:
    """Get cached settings instance.

    Args:
        **kwargs: Keyword arguments to pass to the Settings setup.

    Returns:
        Settings: A cached instance of the Settings class.

    Examples:
        >>> get_settings() is get_settings()
        True
    """
    return Settings(**kwargs)

