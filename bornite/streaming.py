"""
Streaming response body pipeline.

Raw body chunks flow through an optional gzip stage into a bounded buffer:

    transport chunks -> GzipDecoder (when selected) -> BoundedReader -> bytes

The first stage to fail stops consumption; the caller is responsible for
closing the underlying response, which it does on every exit path.
"""

from __future__ import annotations

import zlib
from collections.abc import Iterable
from typing import AsyncIterator, Iterator, List, Optional

from .exceptions import DecompressionError, PayloadTooLarge

__all__ = [
    "BoundedReader",
    "GzipDecoder",
    "should_decompress",
    "read_body",
    "ensure_async_iterator",
]

GZIP_ENCODINGS = frozenset({"gzip", "x-gzip"})

# Status codes that never carry a body worth decoding.
_BODYLESS_STATUSES = frozenset({204, 304})

# Upper bound on inflated bytes produced per step, so the reader can abort
# a decompression bomb before it is fully expanded.
_INFLATE_STEP = 64 * 1024


def ensure_async_iterator(candidate):
    """
    Return ``candidate`` as an async iterator, wrapping plain iterables.

    Stream payloads may be async generators, plain generators or file
    iterators; the transport only accepts async byte streams.
    """
    if hasattr(candidate, "__aiter__"):
        return candidate

    if isinstance(candidate, Iterable):
        async def _generator():
            for chunk in candidate:
                yield chunk
        return _generator()

    raise TypeError("stream payload did not provide an iterator")


class BoundedReader:
    """
    Accumulate body chunks up to ``max_bytes`` (0 disables the ceiling).

    The chunk that pushes the total past the ceiling is rejected and nothing
    further is buffered.
    """

    def __init__(self, max_bytes: int = 0, url: Optional[str] = None):
        self.max_bytes = max_bytes
        self.url = url
        self.length = 0
        self._buffers: List[bytes] = []

    def feed(self, chunk: bytes) -> None:
        if not chunk:
            return
        self.length += len(chunk)
        if self.max_bytes and self.length > self.max_bytes:
            raise PayloadTooLarge(
                message="",
                url=self.url,
                actual_size=self.length,
                max_size=self.max_bytes,
            )
        self._buffers.append(chunk)

    def content(self) -> bytes:
        return b"".join(self._buffers)


def should_decompress(
    gzip: bool,
    method: str,
    status_code: int,
    content_encoding: Optional[str],
) -> bool:
    """Decide whether a gzip stage goes between the raw body and the reader."""
    if not gzip or method == "HEAD":
        return False
    if not content_encoding or status_code in _BODYLESS_STATUSES:
        return False
    return content_encoding.strip().lower() in GZIP_ENCODINGS


class GzipDecoder:
    """Incremental gzip inflater. Concatenated gzip members are decoded in sequence."""

    def __init__(self, encoding: str = "gzip", url: Optional[str] = None):
        self.encoding = encoding
        self.url = url
        self._inflater = self._new_inflater()
        self._seen_input = False

    @staticmethod
    def _new_inflater():
        return zlib.decompressobj(16 + zlib.MAX_WBITS)

    def _error(self, reason: str, cause: Optional[BaseException] = None) -> DecompressionError:
        return DecompressionError(
            message=f"Failed to decompress: {reason}",
            url=self.url,
            encoding=self.encoding,
            cause=cause,
        )

    def decompress(self, chunk: bytes) -> Iterator[bytes]:
        data = chunk
        while data:
            self._seen_input = True
            try:
                inflated = self._inflater.decompress(data, _INFLATE_STEP)
            except zlib.error as exc:
                raise self._error(str(exc), exc) from exc
            if inflated:
                yield inflated
            if self._inflater.eof:
                # Next gzip member, if any.
                data = self._inflater.unused_data
                if data:
                    self._inflater = self._new_inflater()
            else:
                data = self._inflater.unconsumed_tail

    def flush(self) -> bytes:
        try:
            remaining = self._inflater.flush()
        except zlib.error as exc:
            raise self._error(str(exc), exc) from exc
        if self._seen_input and not self._inflater.eof:
            raise self._error("unexpected end of file")
        return remaining


async def read_body(
    chunks: AsyncIterator[bytes],
    max_bytes: int = 0,
    decoder: Optional[GzipDecoder] = None,
    url: Optional[str] = None,
) -> bytes:
    """Drain ``chunks`` through the optional decoder into a BoundedReader."""
    reader = BoundedReader(max_bytes, url=url)
    async for chunk in chunks:
        if decoder is None:
            reader.feed(chunk)
            continue
        for inflated in decoder.decompress(chunk):
            reader.feed(inflated)
    if decoder is not None:
        reader.feed(decoder.flush())
    return reader.content()
