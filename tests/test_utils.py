"""
Tests for response content interpretation.
"""

import pytest

from bornite.exceptions import JsonParseError
from bornite.utils import interpret_content, mime_type


class TestMimeType:
    """Test MIME type extraction."""

    @pytest.mark.parametrize(
        "content_type, expected",
        [
            ("application/json", "application/json"),
            ("Application/JSON; charset=utf-8", "application/json"),
            ("  text/html ;charset=latin-1", "text/html"),
            ("", None),
            (None, None),
            ("; charset=utf-8", None),
        ],
    )
    def test_extraction(self, content_type, expected):
        assert mime_type(content_type) == expected


class TestInterpretContent:
    """Test body to payload conversion."""

    def test_parses_json(self):
        assert interpret_content(b'{"a": 1, "b": [true, null]}', "application/json") == {
            "a": 1,
            "b": [True, None],
        }

    def test_json_with_charset_parameter(self):
        assert interpret_content('{"name": "bornité"}'.encode(), "application/json; charset=utf-8") == {
            "name": "bornité"
        }

    def test_empty_json_body_is_none(self):
        assert interpret_content(b"", "application/json") is None

    def test_malformed_json_raises_with_raw_body(self):
        with pytest.raises(JsonParseError) as exc_info:
            interpret_content(b"{not json", "application/json")

        assert exc_info.value.body == "{not json"
        assert exc_info.value.message.startswith("Failed to parse JSON:")

    def test_json_suffix_types_are_text(self):
        assert interpret_content(b'{"a": 1}', "application/problem+json") == '{"a": 1}'

    def test_text_is_decoded_as_utf8(self):
        assert interpret_content("héllo".encode(), "text/plain") == "héllo"

    def test_invalid_utf8_is_replaced(self):
        assert interpret_content(b"ab\xff", None) == "ab\ufffd"

    def test_binary_returns_bytes(self):
        assert interpret_content(b"\x00\xff", "image/png", binary=True) == b"\x00\xff"

    def test_binary_still_parses_json(self):
        assert interpret_content(b"[1]", "application/json", binary=True) == [1]
