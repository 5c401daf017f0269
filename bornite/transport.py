"""
Physical exchanges over httpx.

Builds the httpx.Request for one hop, sends it with the body left unread,
and converts httpx transport failures into bornite's TransportError family.
Automatic redirects, cookies and client default headers are bypassed; the
executor owns all of that.
"""

from __future__ import annotations

import base64
import contextlib
from typing import AsyncIterator, Optional

import httpx

from .exceptions import (
    TransportError,
    ConnectionError as BorniteConnectionError,
    TimeoutError as BorniteTimeoutError,
)
from .headers import set_if_missing
from .models.config import RequestSettings

__all__ = [
    "agent_scope",
    "build_request",
    "send",
    "iter_raw",
]


@contextlib.asynccontextmanager
async def agent_scope(agent: Optional[httpx.AsyncClient]) -> AsyncIterator[httpx.AsyncClient]:
    """Yield the caller's client untouched, or a private one closed on exit."""
    if agent is not None:
        yield agent
        return
    async with httpx.AsyncClient() as client:
        yield client


def _basic_auth(url: httpx.URL) -> Optional[str]:
    if not url.username and not url.password:
        return None
    token = base64.b64encode(f"{url.username}:{url.password}".encode("utf-8")).decode("ascii")
    return f"Basic {token}"


def build_request(url: httpx.URL, settings: RequestSettings) -> httpx.Request:
    """
    Build the physical request for one hop.

    Derived headers (accept-encoding, content-type, content-length,
    authorization) are only set when the caller did not supply them. A
    caller-supplied agent contributes its timeout when none was given; its
    default headers are not applied.
    """
    headers = dict(settings.headers)
    payload = settings.payload

    if settings.gzip:
        set_if_missing(headers, "accept-encoding", "gzip")

    content = None
    if payload is not None:
        if payload.content_type:
            set_if_missing(headers, "content-type", payload.content_type)
        if payload.content_length is not None:
            set_if_missing(headers, "content-length", payload.content_length)
        content = payload.content()

    auth = _basic_auth(url)
    if auth:
        set_if_missing(headers, "authorization", auth)
        # Credentials travel in the header only.
        url = httpx.URL(scheme=url.scheme, host=url.host, port=url.port, raw_path=url.raw_path)

    extensions = {}
    if settings.timeout is not None:
        extensions["timeout"] = httpx.Timeout(settings.timeout / 1000.0).as_dict()
    elif settings.agent is not None:
        extensions["timeout"] = settings.agent.timeout.as_dict()

    return httpx.Request(
        settings.method,
        url,
        headers=headers,
        content=content,
        extensions=extensions,
    )


def _translate(exc: httpx.TransportError, request: httpx.Request, timeout_ms: Optional[float]) -> TransportError:
    url = str(request.url)
    if isinstance(exc, httpx.TimeoutException):
        timeout_type = "unknown"
        if isinstance(exc, httpx.ConnectTimeout):
            timeout_type = "connect"
        elif isinstance(exc, httpx.ReadTimeout):
            timeout_type = "read"
        elif isinstance(exc, httpx.WriteTimeout):
            timeout_type = "write"
        elif isinstance(exc, httpx.PoolTimeout):
            timeout_type = "pool"
        return BorniteTimeoutError(
            message=f"Request timed out: {exc}",
            url=url,
            timeout_type=timeout_type,
            timeout_ms=timeout_ms,
            cause=exc,
        )
    if isinstance(exc, httpx.ConnectError):
        return BorniteConnectionError(
            message=f"Connection failed: {exc}",
            url=url,
            host=request.url.host,
            port=request.url.port,
            cause=exc,
        )
    return TransportError(message=f"Transport failure: {exc}", url=url, cause=exc)


async def send(
    client: httpx.AsyncClient,
    request: httpx.Request,
    timeout_ms: Optional[float] = None,
) -> httpx.Response:
    """Send one hop and return the response with its body still unread."""
    try:
        return await client.send(request, stream=True, follow_redirects=False)
    except httpx.TransportError as exc:
        raise _translate(exc, request, timeout_ms) from exc


async def iter_raw(response: httpx.Response, timeout_ms: Optional[float] = None) -> AsyncIterator[bytes]:
    """Yield the undecoded body; content-encoding is handled by bornite.streaming."""
    try:
        async for chunk in response.aiter_raw():
            yield chunk
    except httpx.TransportError as exc:
        raise _translate(exc, response.request, timeout_ms) from exc
