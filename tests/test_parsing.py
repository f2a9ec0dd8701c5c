"""Tests for genui.parsing -- model output validation and partial decoding."""

from __future__ import annotations

import json

import jsonschema
import pytest

from genui.errors import ParseError
from genui.parsing import parse_and_validate, parse_partial
from genui.schemas import DECISION_SCHEMA_V1, DECISION_SCHEMA_V2, SUGGESTIONS_SCHEMA


VALID = {
    "componentName": "WeatherDay",
    "props": {"data": {"date": "2024-01-01"}},
    "message": "Here's your forecast",
    "reasoning": "ok",
}


class TestParseAndValidate:
    def test_text_input(self):
        assert parse_and_validate(DECISION_SCHEMA_V2, json.dumps(VALID)) == VALID

    def test_structured_input_skips_parse(self):
        assert parse_and_validate(DECISION_SCHEMA_V2, VALID) == VALID

    def test_bytes_input(self):
        assert parse_and_validate(DECISION_SCHEMA_V2, json.dumps(VALID).encode()) == VALID

    def test_fenced_json(self):
        raw = "```json\n" + json.dumps(VALID) + "\n```"
        assert parse_and_validate(DECISION_SCHEMA_V2, raw) == VALID

    def test_invalid_json_keeps_raw(self):
        raw = '{"componentName": "Weather'
        with pytest.raises(ParseError) as exc_info:
            parse_and_validate(DECISION_SCHEMA_V2, raw)
        assert exc_info.value.raw == raw
        assert isinstance(exc_info.value.cause, ValueError)

    def test_schema_mismatch(self):
        bad = {**VALID, "props": "not an object"}
        with pytest.raises(ParseError) as exc_info:
            parse_and_validate(DECISION_SCHEMA_V2, bad)
        assert exc_info.value.raw is bad
        assert isinstance(exc_info.value.cause, jsonschema.ValidationError)

    def test_missing_required_field(self):
        data = {k: v for k, v in VALID.items() if k != "message"}
        with pytest.raises(ParseError, match="message"):
            parse_and_validate(DECISION_SCHEMA_V1, data)

    def test_none_is_a_parse_error(self):
        with pytest.raises(ParseError):
            parse_and_validate(DECISION_SCHEMA_V2, None)

    def test_empty_string(self):
        with pytest.raises(ParseError):
            parse_and_validate(SUGGESTIONS_SCHEMA, "")

    def test_v1_caps_suggested_actions(self):
        actions = [{"label": str(i), "actionText": "go"} for i in range(4)]
        with pytest.raises(ParseError):
            parse_and_validate(DECISION_SCHEMA_V1, {**VALID, "suggestedActions": actions})

    def test_v1_accepts_suggested_actions(self):
        data = {**VALID, "suggestedActions": [{"label": "More", "actionText": "Show more"}]}
        assert parse_and_validate(DECISION_SCHEMA_V1, data) == data


class TestParsePartial:
    def test_no_object_yet(self):
        assert parse_partial("") is None
        assert parse_partial("```json\n") is None

    def test_open_string_is_closed(self):
        assert parse_partial('{"message": "Here is') == {"message": "Here is"}

    def test_incomplete_member_is_dropped(self):
        assert parse_partial('{"message": "Hi", "reas') == {"message": "Hi"}
        assert parse_partial('{"message": "Hi", "reasoning":') == {"message": "Hi"}

    def test_nested_containers(self):
        text = '{"componentName": "WeatherDay", "props": {"data": {"date": "2024'
        assert parse_partial(text) == {
            "componentName": "WeatherDay",
            "props": {"data": {"date": "2024"}},
        }

    def test_fenced_object(self):
        assert parse_partial('```json\n{"a": [1, 2]}\n```') == {"a": [1, 2]}

    def test_bare_open_brace(self):
        assert parse_partial("{") == {}

    def test_incomplete_unicode_escape_keeps_earlier_text(self):
        assert parse_partial('{"message": "caf') == {"message": "caf"}
        assert parse_partial('{"message": "caf\\u00')["message"].startswith("caf")
