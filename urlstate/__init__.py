# -*- coding: utf-8 -*-
"""Location: ./urlstate/__init__.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

urlstate: compact, configurable encoding of application state in URL
query strings.

Examples:
    >>> import urlstate
    >>> text = urlstate.typed.stringify({"page": 2, "q": "shoes"})
    >>> text
    'page:2,q=shoes'
    >>> urlstate.typed.parse_text(text)
    {'page': 2, 'q': 'shoes'}
"""

# First-Party
from urlstate.common.values import UNDEFINED
from urlstate.errors import ConfigurationError, UrlStateError
from urlstate.format import create_format, json, plain, typed
from urlstate.format.options import FormatOptions
from urlstate.querystring import compact_state, create_url, merge_state, read_state, select_state

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "compact_state",
    "ConfigurationError",
    "create_format",
    "create_url",
    "FormatOptions",
    "json",
    "merge_state",
    "plain",
    "read_state",
    "select_state",
    "typed",
    "UNDEFINED",
    "UrlStateError",
]
