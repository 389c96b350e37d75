# -*- coding: utf-8 -*-
"""Location: ./tests/conftest.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
"""

# Standard
from datetime import datetime, timezone

# Third-Party
import pytest

# First-Party
from urlstate.config import get_settings
from urlstate.format import create_format


@pytest.fixture(autouse=True)
def clear_settings_cache(monkeypatch):
    """Isolate tests from URLSTATE_* variables and cached settings."""
    for name in ("URLSTATE_LOG_LEVEL", "URLSTATE_DEFAULT_FORMAT", "URLSTATE_STATE_KEY", "URLSTATE_FORMAT_OPTIONS"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def typed_format():
    """Typed format with default options."""
    return create_format()


@pytest.fixture
def plain_format():
    """Plain format with default options."""
    return create_format(typed=False)


@pytest.fixture
def sample_date():
    """A UTC datetime on a whole millisecond."""
    return datetime(2024, 1, 15, 10, 30, 0, 123000, tzinfo=timezone.utc)
