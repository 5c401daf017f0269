"""Redirect decisions and URL resolution for the hop loop."""

from __future__ import annotations

from typing import Optional

import httpx

from .exceptions import InvalidURLError

__all__ = [
    "REDIRECT_STATUSES",
    "redirect_method",
    "resolve_url",
    "resolve_location",
]

REDIRECT_STATUSES = frozenset({301, 302, 303, 307, 308})


def redirect_method(status_code: int, method: str, override: str) -> Optional[str]:
    """
    Method for the next hop, or None when the status is not a followable redirect.

    301 and 302 switch to ``override`` (the configured redirect method), 303
    always switches to GET, 307 and 308 keep ``method``.
    """
    if status_code not in REDIRECT_STATUSES:
        return None
    if status_code in (301, 302):
        return override
    if status_code == 303:
        return "GET"
    return method


def _checked(url: httpx.URL, original: str) -> httpx.URL:
    if url.scheme not in ("http", "https") or not url.host:
        raise InvalidURLError(message="", url=original)
    return url


def resolve_url(url: str, base_url: Optional[str] = None) -> httpx.URL:
    """
    Resolve the call's URL against ``base_url``.

    Absolute URLs ignore the base. The result must be an http(s) URL with a host.
    """
    try:
        target = httpx.URL(base_url).join(url) if base_url else httpx.URL(url)
    except httpx.InvalidURL as exc:
        raise InvalidURLError(message=f"Invalid URL: {exc}", url=url, cause=exc) from exc
    return _checked(target, url)


def resolve_location(current: httpx.URL, location: str) -> httpx.URL:
    """Resolve a Location header against the URL that produced it."""
    try:
        target = current.join(location.strip())
    except httpx.InvalidURL as exc:
        raise InvalidURLError(
            message=f"Invalid redirect location: {exc}", url=location, cause=exc
        ) from exc
    return _checked(target, location)
