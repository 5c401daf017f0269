"""
Tests for request payload variants.
"""

import json

import pytest

from bornite.models.payloads import (
    BytesPayload,
    FormPayload,
    JsonPayload,
    StreamPayload,
    TextPayload,
    coerce_payload,
)


async def _gen():
    yield b"a"
    yield "é"


class TestCoercePayload:
    """Test mapping caller bodies onto variants."""

    def test_none(self):
        assert coerce_payload(None) is None

    def test_text(self):
        payload = coerce_payload("héllo")

        assert isinstance(payload, TextPayload)
        assert payload.content() == "héllo".encode("utf-8")
        assert payload.content_length == 6
        assert payload.content_type is None

    @pytest.mark.parametrize("raw", [b"\x00\x01", bytearray(b"\x00\x01"), memoryview(b"\x00\x01")])
    def test_bytes_like(self, raw):
        payload = coerce_payload(raw)

        assert type(payload) is BytesPayload
        assert payload.content() == b"\x00\x01"

    @pytest.mark.parametrize("value", [{"a": [1, 2]}, [1, "two"], ("x",)])
    def test_json_containers(self, value):
        payload = coerce_payload(value)

        assert isinstance(payload, JsonPayload)
        assert payload.content_type == "application/json"
        assert json.loads(payload.content()) == json.loads(json.dumps(value))

    def test_json_is_compact_utf8(self):
        assert coerce_payload({"k": "ü"}).content() == '{"k":"ü"}'.encode("utf-8")

    def test_streams(self):
        assert isinstance(coerce_payload(_gen()), StreamPayload)
        assert isinstance(coerce_payload(iter([b"a"])), StreamPayload)

    def test_existing_payload_passes_through(self):
        payload = FormPayload.from_fields({"a": "1"})
        assert coerce_payload(payload) is payload

    @pytest.mark.parametrize("value", [42, 1.5, object(), {1, 2}])
    def test_rejects_other_types(self, value):
        with pytest.raises(TypeError):
            coerce_payload(value)


class TestPayloadVariants:
    """Test variant behaviour."""

    def test_form_encoding(self):
        payload = FormPayload.from_fields([("q", "red ore"), ("tag", ["a", "b"])])

        assert payload.content() == b"q=red+ore&tag=a&tag=b"
        assert payload.content_type == "application/x-www-form-urlencoded"

    def test_only_streams_are_not_replayable(self):
        assert TextPayload.from_text("x").replayable
        assert JsonPayload.from_value({}).replayable
        assert not StreamPayload(iter([])).replayable
        assert StreamPayload(iter([])).content_length is None

    @pytest.mark.asyncio
    async def test_stream_chunks_are_bytes(self):
        chunks = [chunk async for chunk in StreamPayload(_gen()).content()]
        assert chunks == [b"a", "é".encode("utf-8")]

    @pytest.mark.asyncio
    async def test_stream_rejects_non_byte_chunks(self):
        # Iterating bytes yields ints.
        with pytest.raises(TypeError, match="got int"):
            [chunk async for chunk in StreamPayload(iter(b"abc")).content()]

    @pytest.mark.asyncio
    async def test_stream_accepts_buffer_chunks(self):
        chunks = [chunk async for chunk in StreamPayload(iter([bytearray(b"a"), memoryview(b"b")])).content()]
        assert chunks == [b"a", b"b"]
