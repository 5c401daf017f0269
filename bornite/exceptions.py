"""
Exception hierarchy for the bornite request client.

Every failure of a logical call is surfaced as exactly one of these
exceptions, carrying the URL, the (partial) response where one exists, and
the causal exception chain.

Exception Hierarchy:
    BorniteError (base)
    ├── ValidationError
    │   ├── InvalidURLError
    │   └── InvalidOptionsError
    ├── TransportError
    │   ├── ConnectionError
    │   └── TimeoutError
    ├── RedirectError
    │   ├── RedirectLimitExceeded
    │   ├── MissingRedirectLocation
    │   └── StreamPayloadOnRedirect
    ├── ContentError
    │   ├── PayloadTooLarge
    │   ├── DecompressionError
    │   └── JsonParseError
    └── StatusValidationFailed

Usage:
    import bornite
    from bornite.exceptions import StatusValidationFailed, TransportError

    try:
        response = await bornite.get(url, validate_status=True)
    except StatusValidationFailed as e:
        logger.warning(f"Unexpected status {e.status_code}: {e.response.payload!r}")
    except TransportError as e:
        logger.error(f"Request never completed: {e}")
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:
    from .models.results import Response

__all__ = [
    # Base exceptions
    "BorniteError",
    # Validation errors
    "ValidationError",
    "InvalidURLError",
    "InvalidOptionsError",
    # Transport errors
    "TransportError",
    "ConnectionError",
    "TimeoutError",
    # Redirect errors
    "RedirectError",
    "RedirectLimitExceeded",
    "MissingRedirectLocation",
    "StreamPayloadOnRedirect",
    # Content errors
    "ContentError",
    "PayloadTooLarge",
    "DecompressionError",
    "JsonParseError",
    # Status errors
    "StatusValidationFailed",
]


# ============================================================================
# Base Exception
# ============================================================================


@dataclass(slots=True)
class BorniteError(Exception):
    """
    Base exception for all request failures.

    Provides rich context including URL, response, and causal exception chain.
    All bornite exceptions inherit from this class.
    """

    message: str
    url: Optional[str] = None
    response: Optional["Response"] = None
    cause: Optional[BaseException] = None
    context: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        Exception.__init__(self, self.message)
        if self.cause is not None:
            self.__cause__ = self.cause

    def __str__(self) -> str:
        parts = [self.message]
        if self.url:
            parts.append(f"url={self.url}")
        if self.context:
            ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            parts.append(f"context=({ctx_str})")
        return " | ".join(parts)


# ============================================================================
# Validation Errors
# ============================================================================


@dataclass(slots=True)
class ValidationError(BorniteError):
    """Base class for input validation failures. Raised before any network activity."""
    pass


@dataclass(slots=True)
class InvalidURLError(ValidationError):
    """Raised when the URL is not a string or does not resolve to an http(s) URL."""

    def __post_init__(self) -> None:
        if not self.message:
            self.message = f"Invalid URL: {self.url!r}"
        BorniteError.__post_init__(self)


@dataclass(slots=True)
class InvalidOptionsError(ValidationError):
    """Raised when request options contain an unknown key or an ill-typed value."""

    option_name: Optional[str] = None
    option_value: Optional[Any] = None

    def __post_init__(self) -> None:
        if not self.message and self.option_name:
            self.message = f"Invalid option {self.option_name}={self.option_value!r}"
        BorniteError.__post_init__(self)


# ============================================================================
# Transport Errors
# ============================================================================


@dataclass(slots=True)
class TransportError(BorniteError):
    """
    Base class for connection-level failures.

    Never retried; the logical call fails as soon as one hop hits one.
    """
    pass


@dataclass(slots=True)
class ConnectionError(TransportError):
    """
    Raised when the TCP/TLS connection cannot be established.

    Common causes: host unreachable, connection refused, DNS failure.
    """

    host: Optional[str] = None
    port: Optional[int] = None

    def __post_init__(self) -> None:
        if not self.message:
            self.message = f"Failed to connect to {self.host}:{self.port}"
        BorniteError.__post_init__(self)


@dataclass(slots=True)
class TimeoutError(TransportError):
    """Raised when the socket stays idle longer than the configured timeout."""

    timeout_type: Optional[str] = None  # "connect", "read", "write", "pool"
    timeout_ms: Optional[float] = None

    def __post_init__(self) -> None:
        if not self.message:
            self.message = f"Request timed out ({self.timeout_type}: {self.timeout_ms}ms)"
        BorniteError.__post_init__(self)


# ============================================================================
# Redirect Errors
# ============================================================================


@dataclass(slots=True)
class RedirectError(BorniteError):
    """Base class for redirect-related failures."""

    redirect_chain: list[str] = field(default_factory=list)


@dataclass(slots=True)
class RedirectLimitExceeded(RedirectError):
    """Raised when a redirect response arrives after the redirect budget is spent."""

    max_redirects: int = 0

    def __post_init__(self) -> None:
        if not self.message:
            self.message = (
                f"Maximum redirects reached: {len(self.redirect_chain)} redirects "
                f"followed, limit is {self.max_redirects}"
            )
        BorniteError.__post_init__(self)


@dataclass(slots=True)
class MissingRedirectLocation(RedirectError):
    """Raised when a redirect status arrives without a Location header."""

    status_code: int = 0

    def __post_init__(self) -> None:
        if not self.message:
            self.message = f"Redirect without location (HTTP {self.status_code})"
        BorniteError.__post_init__(self)


@dataclass(slots=True)
class StreamPayloadOnRedirect(RedirectError):
    """
    Raised when a redirect would have to resend a stream payload.

    Streams are consumed by the first hop and cannot be replayed.
    """

    def __post_init__(self) -> None:
        if not self.message:
            self.message = "Cannot follow redirects with stream payloads"
        BorniteError.__post_init__(self)


# ============================================================================
# Content Processing Errors
# ============================================================================


@dataclass(slots=True)
class ContentError(BorniteError):
    """Base class for response body failures (size, decompression, parsing)."""
    pass


@dataclass(slots=True)
class PayloadTooLarge(ContentError):
    """
    Raised when the response body grows past max_bytes.

    The limit applies to decoded bytes, so it also guards against
    decompression bombs.
    """

    actual_size: int = 0
    max_size: int = 0

    def __post_init__(self) -> None:
        if not self.message:
            self.message = (
                f"Maximum payload size reached: {self.actual_size:,} bytes exceeds "
                f"limit of {self.max_size:,} bytes"
            )
        BorniteError.__post_init__(self)


@dataclass(slots=True)
class DecompressionError(ContentError):
    """Raised when a gzip response body is corrupt or truncated."""

    encoding: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.message:
            enc = f" ({self.encoding})" if self.encoding else ""
            self.message = f"Failed to decompress{enc}"
        BorniteError.__post_init__(self)


@dataclass(slots=True)
class JsonParseError(ContentError):
    """
    Raised when an application/json body does not parse.

    ``body`` holds the raw text; ``response`` holds the partial response
    (status, headers, raw text payload) for inspection.
    """

    body: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.message:
            self.message = "Failed to parse JSON"
        BorniteError.__post_init__(self)


# ============================================================================
# Status Errors
# ============================================================================


@dataclass(slots=True)
class StatusValidationFailed(BorniteError):
    """
    Raised when validate_status rejects the final status code.

    The complete response, body included, is available as ``response``.
    """

    status_code: int = 0

    def __post_init__(self) -> None:
        if not self.message:
            self.message = f"Response status validation failed (HTTP {self.status_code})"
        BorniteError.__post_init__(self)
