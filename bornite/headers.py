from __future__ import annotations
from typing import Any, Dict, Mapping, Optional

__all__ = [
    "normalize_headers",
    "set_if_missing",
    "drop_headers",
]


def _header_value(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ", ".join(_header_value(v) for v in value)
    if isinstance(value, bytes):
        return value.decode("latin-1")
    return str(value)


def normalize_headers(headers: Optional[Mapping[str, Any]]) -> Dict[str, str]:
    """
    Case-fold header names and stringify values.

    Keys that collide once lowercased keep the value seen last. Normalizing an
    already normalized mapping returns an equal mapping.
    """
    normalized: Dict[str, str] = {}
    if not headers:
        return normalized
    for key, value in headers.items():
        normalized[key.lower()] = _header_value(value)
    return normalized


def set_if_missing(headers: Dict[str, str], name: str, value: Any) -> bool:
    """Set a derived header unless the caller already supplied it. Returns True if set."""
    name = name.lower()
    if name in headers:
        return False
    headers[name] = _header_value(value)
    return True


def drop_headers(headers: Mapping[str, str], *names: str) -> Dict[str, str]:
    """Return a copy of ``headers`` without ``names``."""
    dropped = {n.lower() for n in names}
    return {k: v for k, v in headers.items() if k not in dropped}
