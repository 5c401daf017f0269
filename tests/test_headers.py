"""
Tests for header normalization.
"""

import pytest

from bornite.headers import drop_headers, normalize_headers, set_if_missing


class TestNormalizeHeaders:
    """Test case folding and value handling."""

    def test_lowercases_names(self):
        assert normalize_headers({"Content-Type": "text/plain", "X-Trace-ID": "abc"}) == {
            "content-type": "text/plain",
            "x-trace-id": "abc",
        }

    def test_is_idempotent(self):
        once = normalize_headers({"Accept": "*/*", "X-Count": 3, "X-List": ["a", "b"]})
        assert normalize_headers(once) == once

    def test_later_duplicate_wins(self):
        assert normalize_headers({"X-Mode": "first", "x-mode": "second"}) == {"x-mode": "second"}

    def test_values_are_strings(self):
        headers = normalize_headers({"Content-Length": 12, "X-Multi": ("a", "b"), "X-Raw": b"v"})
        assert headers == {"content-length": "12", "x-multi": "a, b", "x-raw": "v"}

    @pytest.mark.parametrize("empty", [None, {}])
    def test_empty_input(self, empty):
        assert normalize_headers(empty) == {}


class TestSetIfMissing:
    """Test derived header precedence."""

    def test_sets_absent_header(self):
        headers = {}
        assert set_if_missing(headers, "Content-Length", 5) is True
        assert headers == {"content-length": "5"}

    def test_keeps_explicit_header(self):
        headers = normalize_headers({"Content-Type": "text/csv"})
        assert set_if_missing(headers, "content-type", "application/json") is False
        assert headers["content-type"] == "text/csv"


def test_drop_headers_returns_copy():
    headers = {"content-type": "a", "content-length": "1", "x-keep": "y"}

    dropped = drop_headers(headers, "Content-Type", "content-length")

    assert dropped == {"x-keep": "y"}
    assert "content-type" in headers
