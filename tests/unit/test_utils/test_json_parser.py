"""Unit tests for JSON extraction from model replies"""

import pytest

from issue_resolver.core.exceptions import ResponseParseError
from issue_resolver.utils import extract_json, parse_json_response


class TestExtractJson:
    """Test locating JSON inside free text"""

    def test_fenced_block(self):
        text = 'Here you go:\n```json\n{"a": 1}\n```\nThanks'

        assert extract_json(text) == '{"a": 1}'

    def test_unlabelled_fence(self):
        assert extract_json('```\n[1, 2]\n```') == "[1, 2]"

    def test_embedded_object(self):
        assert extract_json('Result: {"a": {"b": 2}} done') == '{"a": {"b": 2}}'

    def test_embedded_array(self):
        assert extract_json("Numbers: [1, 2, 3]") == "[1, 2, 3]"

    def test_plain_text_trimmed(self):
        assert extract_json("  42  ") == "42"


class TestParseJsonResponse:
    """Test parsing with error reporting"""

    def test_parses_markdown_wrapped_json(self):
        assert parse_json_response('```json\n{"severity": "high"}\n```') == {"severity": "high"}

    def test_invalid_json_raises(self):
        with pytest.raises(ResponseParseError) as exc_info:
            parse_json_response("definitely not json")

        assert exc_info.value.content == "definitely not json"

    def test_parse_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_json_response("{broken")

    def test_empty_reply(self):
        with pytest.raises(ResponseParseError):
            parse_json_response("")
