# -*- coding: utf-8 -*-
"""Unit tests for the query-string helpers."""

import pytest

from urlstate import UNDEFINED
from urlstate.format import json, plain, typed
from urlstate.querystring import compact_state, create_url, fields_from_query, merge_state, query_from_fields, read_state, select_state


class TestCompactState:
    """Test removal of unchanged fields."""

    def test_unchanged_dropped(self):
        """Fields equal to the initial state are dropped."""
        assert compact_state({"a": 1, "b": 2}, {"a": 1, "b": 3}) == {"b": 2}

    def test_nested_objects(self):
        """Objects are compared field by field and empty results vanish."""
        state = {"f": {"q": "x", "page": 1}, "g": {"on": True}}
        initial = {"f": {"q": "", "page": 1}, "g": {"on": True}}
        assert compact_state(state, initial) == {"f": {"q": "x"}}

    def test_arrays_compared_whole(self):
        """Arrays are kept whole when they differ."""
        assert compact_state({"tags": ["a", "b"]}, {"tags": ["a"]}) == {"tags": ["a", "b"]}
        assert compact_state({"tags": ["a"]}, {"tags": ["a"]}) == {}

    def test_missing_values_dropped(self):
        """None, undefined and callables never appear."""
        assert compact_state({"a": None, "b": UNDEFINED, "c": len, "d": 0}, {}) == {"d": 0}

    def test_non_object_initial(self):
        """Without an initial object every field is kept."""
        assert compact_state({"a": 1}, None) == {"a": 1}
        assert compact_state("text", {}) == {}


class TestSelectState:
    """Test projection through a selection."""

    def test_nested_selection(self):
        """Nested selections project nested objects."""
        state = {"page": 2, "user": {"name": "Ann", "id": 7}, "secret": "x"}
        assert select_state({"page": True, "user": {"name": True}}, state) == {"page": 2, "user": {"name": "Ann"}}

    def test_false_and_missing(self):
        """False and missing fields are left out."""
        assert select_state({"a": False, "b": True}, {"a": 1}) == {}


class TestMergeState:
    """Test merging parsed state over the initial state."""

    def test_deep_merge(self):
        """Objects merge and other values replace."""
        initial = {"page": 1, "f": {"q": "", "tags": ["x"]}}
        assert merge_state(initial, {"f": {"tags": []}}) == {"page": 1, "f": {"q": "", "tags": []}}

    def test_initial_untouched(self):
        """The initial state is copied."""
        initial = {"f": {"tags": ["x"]}}
        merged = merge_state(initial, {})
        merged["f"]["tags"].append("y")
        assert initial == {"f": {"tags": ["x"]}}

    def test_undefined_ignored(self):
        """Undefined values never overwrite."""
        assert merge_state({"a": 1}, {"a": UNDEFINED}) == {"a": 1}
        assert merge_state({"a": 1}, UNDEFINED) == {"a": 1}

    def test_non_object_replaces(self):
        """A parsed non-object replaces the initial state."""
        assert merge_state({"a": 1}, "text") == "text"


class TestUrls:
    """Test creating and reading URLs."""

    def test_create_keeps_other_parameters(self):
        """Other parameters and the fragment survive."""
        url = create_url("https://x.test/p?a=1&state=old&b=two%20words#frag", "state", {"page": 2}, typed)
        assert url == "https://x.test/p?a=1&b=two%20words&state=page:2#frag"

    def test_create_empty_state_removes_key(self):
        """Nothing to encode means no parameter."""
        assert create_url("/p?state=page:2", "state", {}, typed) == "/p"

    def test_query_breaking_characters(self):
        """Ampersands, hashes and pluses are encoded and restored."""
        url = create_url("/p", "s", {"q": "a+b#c&d"}, typed)
        assert url == "/p?s=q=a%2Bb%23c%26d"
        assert read_state(url, "s", typed) == {"q": "a+b#c&d"}

    def test_spaces_not_double_encoded(self):
        """Format output is placed in the URL as is."""
        url = create_url("/p", "state", {"q": "red shoes"}, typed)
        assert url == "/p?state=q=red%20shoes"
        assert read_state(url, "state", typed) == {"q": "red shoes"}

    def test_read_missing_key(self):
        """An absent key reads as None."""
        assert read_state("/p?x=1", "state", typed) is None

    @pytest.mark.parametrize("fmt", [typed, plain, json], ids=["typed", "plain", "json"])
    def test_round_trip(self, fmt):
        """Every namespaced format survives a URL round trip."""
        state = {"page": 3, "f": {"q": "50% off", "tags": ["a", "b"]}}
        url = create_url("https://x.test/list?ref=mail", "state", state, fmt)
        assert read_state(url, "state", fmt, state) == state

    def test_compact_then_merge(self):
        """Only changes go in the URL and the initial state fills the rest."""
        initial = {"page": 1, "sort": "name", "f": {"q": ""}}
        state = {"page": 1, "sort": "date", "f": {"q": "x"}}
        url = create_url("/p", "state", compact_state(state, initial), typed)
        assert url == "/p?state=sort=date,f.q=x"
        assert merge_state(initial, read_state(url, "state", typed, initial)) == state


class TestFields:
    """Test standalone fields in query strings."""

    def test_query_from_fields(self):
        """Keys are quoted and values only lose query-breaking characters."""
        assert query_from_fields({"a b": ["x%20y"], "t": ["1", "2"]}) == "a%20b=x%20y&t=1&t=2"

    def test_fields_from_query(self):
        """Repeated keys collect and values keep their encoding."""
        assert fields_from_query("a%20b=x%20y&t=1&t=2&&flag") == {"a b": ["x%20y"], "t": ["1", "2"], "flag": [""]}

    def test_typed_round_trip(self):
        """Typed fields survive the query string."""
        state = {"name": "Tom&Jerry", "tags": ["a", "b"], "age": 30}
        query = query_from_fields(typed.stringify_fields(state))
        assert query == "name=Tom%26Jerry&tags=@a,b&age=:30"
        assert typed.parse_fields(fields_from_query(query), state) == state
