# -*- coding: utf-8 -*-
"""Location: ./urlstate/common/__init__.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Helpers shared across urlstate formats.
"""
