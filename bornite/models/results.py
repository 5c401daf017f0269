from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    import httpx


@dataclass
class Response:
    """
    Result of a logical call, built once from the final hop.

    ``payload`` is the parsed JSON value for application/json bodies,
    otherwise the body as text (or bytes when the call asked for binary).
    """

    payload: Any = None
    headers: Mapping[str, str] = field(default_factory=dict)  # lowercase names
    status_code: Optional[int] = None
    status_message: Optional[str] = None
    raw: Optional["httpx.Response"] = None  # closed transport response, for advanced use
    url: Optional[str] = None
    redirect_chain: list[str] = field(default_factory=list)  # URLs visited during redirects
