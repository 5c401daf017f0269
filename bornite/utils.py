from __future__ import annotations
from typing import Any, Optional
import json

from .exceptions import JsonParseError

__all__ = [
    "mime_type",
    "decode_text",
    "interpret_content",
]

JSON_MIME = "application/json"


def mime_type(content_type: Optional[str]) -> Optional[str]:
        """'Application/JSON; charset=utf-8' -> 'application/json'."""
        if not content_type:
            return None
        return content_type.split(";")[0].strip().lower() or None

def decode_text(data: bytes) -> str:
        return data.decode("utf-8", errors="replace")

def interpret_content(body: bytes, content_type: Optional[str], binary: bool = False) -> Any:
        """
        Turn a finished body into the response payload.

        application/json bodies are parsed (an empty body gives None); anything
        else is returned as UTF-8 text, or untouched bytes when ``binary``.
        Raises JsonParseError carrying the raw text when parsing fails.
        """
        if mime_type(content_type) == JSON_MIME:
            text = decode_text(body)
            if not text.strip():
                return None
            try:
                return json.loads(text)
            except json.JSONDecodeError as exc:
                raise JsonParseError(
                    message=f"Failed to parse JSON: {exc}",
                    body=text,
                    cause=exc,
                ) from exc
        if binary:
            return body
        return decode_text(body)
