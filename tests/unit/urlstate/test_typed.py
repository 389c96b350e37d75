# -*- coding: utf-8 -*-
"""Unit tests for the typed format."""

from datetime import datetime, timezone

import pytest

from urlstate.common.values import deep_equal, UNDEFINED
from urlstate.format import create_format


class TestStringify:
    """Test namespaced encoding."""

    def test_concrete_scenario(self, typed_format):
        """Nested objects use the object marker and lose trailing terminators."""
        assert typed_format.stringify({"count": 5, "nested": {"hello": "World"}}) == "count:5,nested.hello=World"

    def test_primitives(self, typed_format):
        """Primitives carry the primitive marker, strings the string marker."""
        text = typed_format.stringify({"n": 30, "t": True, "f": False, "z": None, "u": UNDEFINED, "s": "x"})
        assert text == "n:30,t:true,f:false,z:null,u:undefined,s=x"

    def test_decimal_point_escaped(self, typed_format):
        """Decimal points are escaped so they never read as nesting."""
        assert typed_format.stringify({"pi": 3.14}) == "pi:3/.14"

    def test_arrays(self, typed_format):
        """Array items are bare and separated."""
        assert typed_format.stringify({"tags": ["a", "b"], "n": [1, 2]}) == "tags@a,b~,n@:1,:2"

    def test_empty_containers(self, typed_format):
        """Empty arrays and objects keep their markers."""
        assert typed_format.stringify({"a": [], "o": {}, "x": 1}) == "a@~,o.~,x:1"

    def test_empty_string_in_array(self, typed_format):
        """Empty strings inside arrays are written as a bare string marker."""
        assert typed_format.stringify({"a": ["", "x"]}) == "a@=,x"

    def test_dates(self, typed_format):
        """Dates are timestamps behind the date prefix."""
        value = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)
        assert typed_format.stringify({"d": value}) == "d=D1705314600000"

    def test_structural_characters_escaped(self, typed_format):
        """Separators and terminators inside strings are escaped."""
        assert typed_format.stringify({"q": "a,b~c"}) == "q=a/,b/~c"
        assert typed_format.stringify({"a.b": 1}) == "a/.b:1"

    def test_date_like_strings_guarded(self, typed_format):
        """Strings that look like marked dates get an escape."""
        assert typed_format.stringify({"code": "D12345"}) == "code=/D12345"
        assert typed_format.stringify({"code": "Dog"}) == "code=Dog"

    def test_percent_encoding(self, typed_format):
        """Non-URL characters are percent-encoded."""
        assert typed_format.stringify({"name": "John Smith"}) == "name=John%20Smith"

    def test_unsupported_values_dropped(self, typed_format):
        """Callables and other unsupported values disappear."""
        assert typed_format.stringify({"a": 1, "f": print, "l": [1, print, 2]}) == "a:1,l@:1,:2"

    def test_non_finite_numbers_are_null(self, typed_format):
        """NaN and infinities become null."""
        assert typed_format.stringify({"x": float("nan")}) == "x:null"

    def test_custom_tokens(self):
        """Every token can be reconfigured."""
        fmt = create_format(separators={"entry": ";", "array": "!", "nesting": "*"}, markers={"string": "$", "terminator": ")"})
        assert fmt.stringify({"a": {"b": "x"}, "t": ["p", "q"], "n": 1}) == "a*b$x);t@p!q);n:1"

    def test_top_level_values(self, typed_format):
        """Non-object states are written with their marker."""
        assert typed_format.stringify(["a", "b"]) == "@a,b"
        assert typed_format.stringify("hello") == "=hello"
        assert typed_format.stringify(5) == ":5"


class TestParseText:
    """Test namespaced decoding."""

    def test_concrete_scenario(self, typed_format):
        """The scenario parses back with or without a hint."""
        expected = {"count": 5, "nested": {"hello": "World"}}
        assert typed_format.parse_text("count:5,nested.hello=World") == expected
        assert typed_format.parse_text("count:5,nested.hello=World", expected) == expected

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("items@a,,b~", ["a", "", "b"]),
            ("items@a,b,~", ["a", "b", ""]),
            ("items@,a,b~", ["", "a", "b"]),
            ("items@~", []),
            ("items@=~", [""]),
        ],
    )
    def test_array_boundaries(self, typed_format, text, expected):
        """Consecutive and boundary separators give empty items."""
        assert typed_format.parse_text(text) == {"items": expected}

    def test_escaped_string_stays_string(self, typed_format):
        """An escape defeats date detection."""
        assert typed_format.parse_text("code=/D12345") == {"code": "D12345"}
        assert typed_format.parse_text("code=D12345") == {"code": datetime(1970, 1, 1, 0, 0, 12, 345000, tzinfo=timezone.utc)}

    def test_string_marker_beats_hint(self, typed_format):
        """Explicitly marked strings stay strings."""
        assert typed_format.parse_text("n=42", {"n": 0}) == {"n": "42"}

    def test_boolean_numbers_with_hint(self):
        """1/0 primitives become booleans when the hint is a boolean."""
        fmt = create_format(serialize={"booleans": "number"})
        assert fmt.stringify({"on": True}) == "on:1"
        assert fmt.parse_text("on:1", {"on": False}) == {"on": True}
        assert fmt.parse_text("on:1") == {"on": 1}

    def test_iso_dates(self):
        """ISO dates parse behind the date prefix."""
        fmt = create_format(serialize={"dates": "iso"})
        value = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)
        assert fmt.stringify({"d": value}) == "d=D2024-01-15T10:30:00.000Z"
        assert fmt.parse_text("d=D2024-01-15T10:30:00.000Z") == {"d": value}

    def test_plain_text(self, typed_format):
        """Text that is not an object is a string."""
        assert typed_format.parse_text("hello%20world") == "hello world"

    def test_empty_text(self, typed_format):
        """Empty text is an empty object."""
        assert typed_format.parse_text("") == {}

    @pytest.mark.parametrize(
        "text",
        ["a@b,c", "a.b.c=", "a:", "a@@@", "a=/", "~~~", "a.", ",,,", "=", "@", "a%2", ".:"],
    )
    def test_malformed_never_raises(self, typed_format, text):
        """Truncated or odd input returns a best effort value."""
        typed_format.parse_text(text)

    def test_truncated_object(self, typed_format):
        """Missing terminators are tolerated."""
        assert typed_format.parse_text("a.b.c=x") == {"a": {"b": {"c": "x"}}}

    def test_missing_value_skips_entry(self, typed_format):
        """A key without a value is skipped."""
        assert typed_format.parse_text("a:1,b,c=x") == {"a": 1, "c": "x"}


class TestRoundTrip:
    """Test that stringify and parse_text are inverses."""

    @pytest.mark.parametrize(
        "state",
        [
            {"a": 1, "b": -2.5, "c": 1.5e-7, "d": True, "e": None, "f": UNDEFINED},
            {"user": {"name": "Ann", "tags": ["x", "", "y"], "meta": {}}},
            {"matrix": [[1, 2], [], [["deep"]]], "objs": [{"k": "v"}, {}]},
            {"mixed": [1, "two", False, None, {"x": [3]}]},
            {"s": "a,b~c/d.e=f:g@h"},
            {"u": "héllo wörld 😀", "jp": "日本語"},
            {"empty": "", "spaces": "  ", "pct": "100%"},
            {"looks": ["true", "42", "null", "D5", "1705314600000"]},
            {"a.b": {"c~d": 1}, "": "empty key"},
            {"epoch": datetime(1970, 1, 1, tzinfo=timezone.utc)},
            {"old": datetime(1900, 5, 17, 8, 0, 0, 1000, tzinfo=timezone.utc)},
            {"future": datetime(2999, 12, 31, 23, 59, 59, 999000, tzinfo=timezone.utc)},
        ],
    )
    def test_round_trip(self, typed_format, state):
        """Parsing the text with the state as hint gives the state back."""
        text = typed_format.stringify(state)
        parsed = typed_format.parse_text(text, state)
        assert deep_equal(parsed, state)
        assert typed_format.stringify(parsed) == text

    def test_round_trip_without_hint(self, typed_format, sample_date):
        """Typed text needs no hint."""
        state = {"n": 42, "s": "42", "b": "true", "d": sample_date, "l": [1, "1"]}
        assert typed_format.parse_text(typed_format.stringify(state)) == state

    def test_mixed_array_with_date_hint(self, typed_format):
        """A date element hint does not turn the other strings of a mixed array into dates."""
        value = datetime(2024, 1, 15, tzinfo=timezone.utc)
        state = {"l": [value, "5", "1705276800000"]}
        text = typed_format.stringify(state)
        assert typed_format.parse_text(text, state) == state
        assert typed_format.parse_text(text) == state

    def test_string_marker_follows_date_hint(self, typed_format):
        """After an explicit string marker a date hint still applies."""
        hint = {"d": datetime(2000, 1, 1, tzinfo=timezone.utc)}
        assert typed_format.parse_text("d=5", hint) == {"d": datetime(1970, 1, 1, 0, 0, 0, 5000, tzinfo=timezone.utc)}
        assert typed_format.parse_text("d=5") == {"d": "5"}

    def test_round_trip_custom_tokens(self):
        """Multi-character tokens round trip."""
        fmt = create_format(
            separators={"entry": "&&", "array": "||", "nesting": "->", "escape": "\\"},
            markers={"string": "s:", "primitive": "p:", "array": "a:", "terminator": "$$", "datePrefix": "T_"},
        )
        state = {"x": {"y": ["a||b", 1, "s:q"]}, "z": "T_5", "w": "p:1&&2"}
        assert fmt.parse_text(fmt.stringify(state), state) == state


class TestStandaloneFields:
    """Test the standalone layout."""

    def test_stringify_fields(self, typed_format, sample_date):
        """Strings and dates are bare; other values keep markers."""
        fields = typed_format.stringify_fields({"name": "John", "age": 30, "tags": ["a", "b"], "d": sample_date, "o": {"k": 1}})
        assert fields == {"name": ["John"], "age": [":30"], "tags": ["@a,b"], "d": ["D1705314600123"], "o": [".k:1"]}

    def test_parse_fields(self, typed_format, sample_date):
        """Fields parse back with or without a hint."""
        fields = {"name": "John", "age": [":30"], "tags": ["@a,b"], "d": ["D1705314600123"], "o": [".k:1"]}
        assert typed_format.parse_fields(fields) == {"name": "John", "age": 30, "tags": ["a", "b"], "d": sample_date, "o": {"k": 1}}

    def test_strings_starting_with_markers(self, typed_format):
        """Bare strings that start with a marker are escaped."""
        fields = typed_format.stringify_fields({"a": ":x", "b": "@y", "c": "=z", "e": ".w"})
        assert fields == {"a": ["/:x"], "b": ["/@y"], "c": ["/=z"], "e": ["/.w"]}
        assert typed_format.parse_fields(fields) == {"a": ":x", "b": "@y", "c": "=z", "e": ".w"}

    def test_primitive_looking_strings(self, typed_format):
        """Bare strings that look like primitives stay strings."""
        state = {"a": "true", "b": "42", "c": "null"}
        assert typed_format.parse_fields(typed_format.stringify_fields(state)) == state

    def test_empty_values(self, typed_format):
        """Empty strings, arrays and objects."""
        state = {"s": "", "a": [], "o": {}}
        fields = typed_format.stringify_fields(state)
        assert fields == {"s": [""], "a": ["@"], "o": ["."]}
        assert typed_format.parse_fields(fields, state) == state

    def test_first_value_used(self, typed_format):
        """Only the first value of a repeated field counts."""
        assert typed_format.parse_fields({"a": [":1", ":2"], "b": []}) == {"a": 1}

    def test_field_round_trip(self, typed_format):
        """Nested values round trip through fields."""
        state = {"user": {"name": "A B", "roles": ["x", "y"]}, "page": 2, "q": "a,b"}
        assert typed_format.parse_fields(typed_format.stringify_fields(state), state) == state


class TestDisabledMarkers:
    """Test standalone-only formats with disabled markers."""

    def test_array_marker_disabled(self):
        """Standalone arrays are plain separated items."""
        fmt = create_format(markers={"array": False}, layout="standalone")
        fields = fmt.stringify_fields({"tags": ["a", "b", "c"], "ids": [1, 2, 3]})
        assert fields == {"tags": ["a,b,c"], "ids": [":1,:2,:3"]}
        hint = {"tags": [""], "ids": [0]}
        assert fmt.parse_fields(fields, hint) == {"tags": ["a", "b", "c"], "ids": [1, 2, 3]}

    def test_array_without_hint_is_string(self):
        """Without an array hint the joined text is a string."""
        fmt = create_format(markers={"array": False}, layout="standalone")
        assert fmt.parse_fields({"tags": "a,b"}) == {"tags": "a,b"}

    def test_empty_array_with_marker_disabled(self):
        """An empty field is an empty array when the hint is an array."""
        fmt = create_format(markers={"array": False}, layout="standalone")
        assert fmt.stringify_fields({"tags": []}) == {"tags": [""]}
        assert fmt.parse_fields({"tags": [""]}, {"tags": ["x"]}) == {"tags": []}

    def test_primitive_marker_disabled(self):
        """Standalone primitives are bare and resolved by heuristics."""
        fmt = create_format(markers={"primitive": False}, layout="standalone")
        state = {"n": 30, "b": True, "z": None, "s": "42", "t": "true", "l": [1, "2"]}
        fields = fmt.stringify_fields(state)
        assert fields["n"] == ["30"]
        assert fields["b"] == ["true"]
        assert fields["s"] == ["/42"]
        assert fmt.parse_fields(fields, state) == state

    def test_nested_values_keep_markers(self):
        """Inside objects the default markers are still used."""
        fmt = create_format(markers={"primitive": False, "array": False}, layout="standalone")
        fields = fmt.stringify_fields({"o": {"n": 1, "l": ["a"]}, "l": [[1]]})
        assert fields == {"o": [".n:1,l@a"], "l": ["@1"]}
        assert fmt.parse_fields(fields, {"o": {}, "l": [[0]]}) == {"o": {"n": 1, "l": ["a"]}, "l": [[1]]}

    def test_date_prefix_disabled(self):
        """Without a prefix dates are detected by shape, and look-alike strings are guarded."""
        fmt = create_format(markers={"datePrefix": False})
        value = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)
        state = {"d": value, "s": "1705314600000", "code": "D12345"}
        text = fmt.stringify(state)
        assert text == "d=1705314600000,s=/1705314600000,code=D12345"
        assert fmt.parse_text(text) == state
