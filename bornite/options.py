"""
Request option validation and default layering.

Options arrive as plain keyword mappings (from ``Client`` defaults and the
call site). ``merge_options`` layers them, ``build_settings`` checks them and
produces the normalized RequestSettings the executor runs on. All failures
here are InvalidOptionsError and happen before any network activity.
"""

from __future__ import annotations

import math
from typing import Any, Dict, Mapping, Optional

import httpx

from .exceptions import InvalidOptionsError
from .headers import normalize_headers
from .models.config import BODYLESS_METHODS, UNLIMITED, RequestSettings
from .models.payloads import coerce_payload

__all__ = [
    "KNOWN_OPTIONS",
    "merge_options",
    "build_settings",
]

KNOWN_OPTIONS = frozenset({
    "method",
    "base_url",
    "headers",
    "payload",
    "agent",
    "redirects",
    "redirect_method",
    "gzip",
    "max_bytes",
    "timeout",
    "validate_status",
    "binary",
})


def _invalid(name: str, value: Any, reason: str) -> InvalidOptionsError:
    return InvalidOptionsError(
        message=f"Invalid option {name}={value!r}: {reason}",
        option_name=name,
        option_value=value,
    )


def check_known(options: Mapping[str, Any]) -> None:
    unknown = sorted(set(options) - KNOWN_OPTIONS)
    if unknown:
        raise InvalidOptionsError(
            message=f"Unknown options: {', '.join(unknown)}",
            option_name=unknown[0],
            option_value=options[unknown[0]],
        )


def merge_options(base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Layer ``override`` on top of ``base``.

    Every option is replaced wholesale except ``headers``, which are merged
    name by name (case-insensitively) with ``override`` winning.
    """
    merged = {**base, **override}
    if "headers" in base and "headers" in override:
        merged["headers"] = {
            **normalize_headers(_mapping("headers", base["headers"])),
            **normalize_headers(_mapping("headers", override["headers"])),
        }
    return merged


def _mapping(name: str, value: Any) -> Optional[Mapping[str, Any]]:
    if value is None or isinstance(value, Mapping):
        return value
    raise _invalid(name, value, "must be a mapping")


def _method(name: str, value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise _invalid(name, value, "must be a non-empty string")
    return value.strip().upper()


def _redirects(value: Any) -> Optional[float]:
    if value is None or value is False:
        return None
    if value == "unlimited" or (isinstance(value, float) and math.isinf(value) and value > 0):
        return UNLIMITED
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise _invalid("redirects", value, "must be False, a non-negative integer or unlimited")
    return value


def _non_negative_int(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise _invalid(name, value, "must be a non-negative integer")
    return value


def _flag(name: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise _invalid(name, value, "must be a boolean")
    return value


def build_settings(options: Mapping[str, Any]) -> RequestSettings:
    """
    Validate merged options and build the settings for one logical call.

    Raises:
        InvalidOptionsError: For unknown keys, ill-typed values, a missing
            method, or a payload on a GET/HEAD request
    """
    check_known(options)

    if options.get("method") is None:
        raise InvalidOptionsError(message="Option method is required", option_name="method")
    method = _method("method", options["method"])

    redirect_method = options.get("redirect_method")
    if redirect_method is not None:
        redirect_method = _method("redirect_method", redirect_method)

    headers = normalize_headers(_mapping("headers", options.get("headers")))

    raw_payload = options.get("payload")
    if raw_payload is not None and method in BODYLESS_METHODS:
        raise _invalid("payload", raw_payload, f"is not allowed for {method} requests")
    try:
        payload = coerce_payload(raw_payload)
    except TypeError as exc:
        raise _invalid("payload", raw_payload, str(exc)) from exc

    timeout = options.get("timeout")
    if timeout is not None and (
        isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0
    ):
        raise _invalid("timeout", timeout, "must be a positive number of milliseconds")

    validate_status = options.get("validate_status", False)
    if not isinstance(validate_status, bool) and not callable(validate_status):
        raise _invalid("validate_status", validate_status, "must be a boolean or a callable")

    base_url = options.get("base_url")
    if base_url is not None and not isinstance(base_url, str):
        raise _invalid("base_url", base_url, "must be a string")

    agent = options.get("agent")
    if agent is not None and not isinstance(agent, httpx.AsyncClient):
        raise _invalid("agent", agent, "must be an httpx.AsyncClient")

    return RequestSettings(
        method=method,
        headers=headers,
        payload=payload,
        redirects=_redirects(options.get("redirects")),
        redirect_method=redirect_method,
        gzip=_flag("gzip", options.get("gzip", False)),
        max_bytes=_non_negative_int("max_bytes", options.get("max_bytes", 0)),
        binary=_flag("binary", options.get("binary", False)),
        validate_status=validate_status,
        timeout=timeout,
        base_url=base_url,
        agent=agent,
    )
