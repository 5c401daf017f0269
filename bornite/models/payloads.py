"""
Request payload variants.

Every accepted request body is coerced once, when settings are built, into
one of these variants. A variant knows its wire bytes, the content type it
implies, its length, and whether it can be sent again on a redirect hop.
"""

from __future__ import annotations

import json
from collections.abc import AsyncIterable, Iterator
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Mapping, Optional, Sequence, Tuple, Union
from urllib.parse import urlencode

from ..streaming import ensure_async_iterator

__all__ = [
    "Payload",
    "TextPayload",
    "BytesPayload",
    "JsonPayload",
    "FormPayload",
    "StreamPayload",
    "coerce_payload",
]

JSON_CONTENT_TYPE = "application/json"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class Payload:
    """Base class for request bodies."""

    #: Content type to set when the caller did not supply one.
    content_type: Optional[str] = None
    #: Whether the same body can be sent again on another hop.
    replayable: bool = True

    def content(self) -> Union[bytes, AsyncIterator[bytes]]:
        raise NotImplementedError

    @property
    def content_length(self) -> Optional[int]:
        return None


@dataclass(frozen=True)
class BytesPayload(Payload):
    data: bytes

    def content(self) -> bytes:
        return self.data

    @property
    def content_length(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class TextPayload(BytesPayload):
    """A string body, sent UTF-8 encoded."""

    @classmethod
    def from_text(cls, text: str) -> "TextPayload":
        return cls(text.encode("utf-8"))


@dataclass(frozen=True)
class JsonPayload(BytesPayload):
    """A structured object, serialized once at construction."""

    content_type = JSON_CONTENT_TYPE
    value: Any = None

    @classmethod
    def from_value(cls, value: Any) -> "JsonPayload":
        encoded = json.dumps(value, separators=(",", ":"), ensure_ascii=False)
        return cls(encoded.encode("utf-8"), value)


@dataclass(frozen=True)
class FormPayload(BytesPayload):
    """
    Form-encoded key/value pairs.

    Example:
        await bornite.post(url, payload=FormPayload.from_fields({"q": "ore", "page": 2}))
    """

    content_type = FORM_CONTENT_TYPE
    fields: Tuple[Tuple[str, Any], ...] = ()

    @classmethod
    def from_fields(
        cls, fields: Union[Mapping[str, Any], Sequence[Tuple[str, Any]]]
    ) -> "FormPayload":
        pairs = tuple(fields.items()) if isinstance(fields, Mapping) else tuple(fields)
        return cls(urlencode(pairs, doseq=True).encode("ascii"), pairs)


@dataclass(frozen=True)
class StreamPayload(Payload):
    """An opaque byte stream. Consumed by the first hop, so never replayed."""

    stream: Any = field(default=None)
    replayable = False

    def content(self) -> AsyncIterator[bytes]:
        return _encoded_chunks(self.stream)


async def _encoded_chunks(stream: Any) -> AsyncIterator[bytes]:
    async for chunk in ensure_async_iterator(stream):
        if isinstance(chunk, str):
            yield chunk.encode("utf-8")
        elif isinstance(chunk, (bytes, bytearray, memoryview)):
            yield bytes(chunk)
        else:
            raise TypeError(f"stream payload chunks must be bytes or str, got {type(chunk).__name__}")


def coerce_payload(value: Any) -> Optional[Payload]:
    """
    Map a caller-supplied body onto its payload variant.

    Returns None for an absent body; raises TypeError for anything that is
    not a string, bytes, a JSON-serializable container, a stream or a
    Payload instance.
    """
    if value is None or isinstance(value, Payload):
        return value
    if isinstance(value, str):
        return TextPayload.from_text(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return BytesPayload(bytes(value))
    if isinstance(value, (dict, list, tuple)):
        return JsonPayload.from_value(value)
    if isinstance(value, (AsyncIterable, Iterator)):
        return StreamPayload(value)
    raise TypeError(
        "payload must be a string, bytes, a stream or a serializable object, "
        f"got {type(value).__name__}"
    )
