"""Tests for JSON utilities.

Tests the serialization partials and the form JSON editor helpers.
"""

from __future__ import annotations

import pytest

from core.exceptions import InvalidJsonError
from utils.json_utils import (
    NESTING_TOO_DEEP,
    format_json_text,
    json_compact,
    json_pretty,
    parse_json_text,
    validate_json_text,
)


class TestSerializers:
    """Tests for json_compact and json_pretty."""

    def test_compact_has_no_spaces(self) -> None:
        assert json_compact({"a": [1, 2]}) == '{"a":[1,2]}'

    def test_compact_falls_back_to_str(self) -> None:
        """Non-serializable values use str() instead of raising."""
        assert json_compact({"path": object}) == '{"path":"<class \'object\'>"}'

    def test_pretty_uses_two_spaces(self) -> None:
        assert json_pretty({"a": 1}) == '{\n  "a": 1\n}'

    def test_pretty_keeps_unicode(self) -> None:
        assert json_pretty({"city": "Zürich"}) == '{\n  "city": "Zürich"\n}'


class TestParseJsonText:
    """Tests for parse_json_text."""

    def test_parses_any_json_value(self) -> None:
        assert parse_json_text("[1, null, true]") == [1, None, True]

    def test_error_carries_field_and_reason(self) -> None:
        with pytest.raises(InvalidJsonError) as exc_info:
            parse_json_text("{", field="jsonSchema")

        assert exc_info.value.field == "jsonSchema"
        assert exc_info.value.reason
        assert exc_info.value.message.startswith("Invalid JSON in 'jsonSchema':")

    def test_error_without_field(self) -> None:
        with pytest.raises(InvalidJsonError, match="Invalid JSON in input"):
            parse_json_text("nope")

    @pytest.mark.parametrize("text", ['{"a": NaN}', "[Infinity]", "-Infinity"])
    def test_rejects_non_standard_constants(self, text: str) -> None:
        with pytest.raises(InvalidJsonError, match="Unexpected token"):
            parse_json_text(text, field="jsonSchema")

    def test_deep_nesting_is_invalid_json(self) -> None:
        text = "[" * 100_000 + "]" * 100_000

        with pytest.raises(InvalidJsonError) as exc_info:
            parse_json_text(text, field="outputExample")

        assert exc_info.value.reason == NESTING_TOO_DEEP
        assert exc_info.value.field == "outputExample"


class TestFormatJsonText:
    """Tests for format_json_text."""

    def test_reindents(self) -> None:
        assert format_json_text('{"a":{"b":1}}') == '{\n  "a": {\n    "b": 1\n  }\n}'

    def test_invalid_text(self) -> None:
        with pytest.raises(InvalidJsonError):
            format_json_text("{'single': 'quotes'}", field="outputExample")


class TestValidateJsonText:
    """Tests for validate_json_text."""

    def test_valid(self) -> None:
        assert validate_json_text('{"a": 1}') == (True, "Valid JSON")

    @pytest.mark.parametrize("text", ["", "{", "[1,]", "undefined", '{"a": NaN}'])
    def test_invalid(self, text: str) -> None:
        valid, message = validate_json_text(text)

        assert valid is False
        assert message.startswith("Invalid JSON: ")

    def test_deep_nesting_is_a_verdict_not_a_crash(self) -> None:
        assert validate_json_text("[" * 100_000 + "]" * 100_000) == (False, "Invalid JSON: nesting too deep")
