from __future__ import annotations
import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Dict, Optional, Union

if TYPE_CHECKING:
    import httpx
    from .payloads import Payload

#: Redirect budget that never runs out.
UNLIMITED = math.inf

BODYLESS_METHODS = frozenset({"GET", "HEAD"})

StatusValidator = Union[bool, Callable[[int], bool]]


@dataclass
class RequestSettings:
    """
    Fully normalized settings for one logical call.

    Built by ``bornite.options.build_settings``; the executor derives a new
    snapshot with ``dataclasses.replace`` for every redirect hop instead of
    mutating this one.
    """

    method: str
    headers: Dict[str, str] = field(default_factory=dict)
    payload: Optional["Payload"] = None

    # Redirects
    redirects: Optional[Union[int, float]] = None  # None: hand back 3xx as-is; UNLIMITED: follow all
    redirect_method: Optional[str] = None          # method for 301/302, defaults to method

    # Response handling
    gzip: bool = False
    max_bytes: int = 0             # 0 disables the ceiling
    binary: bool = False           # return non-JSON bodies as bytes
    validate_status: StatusValidator = False

    # Transport
    timeout: Optional[float] = None  # socket idle timeout, milliseconds
    base_url: Optional[str] = None
    agent: Optional["httpx.AsyncClient"] = None  # caller-owned pool and fallback timeout, never closed here

    def __post_init__(self) -> None:
        self.method = self.method.upper()
        self.redirect_method = (self.redirect_method or self.method).upper()

    @property
    def follows_redirects(self) -> bool:
        return self.redirects is not None

    def accepts_status(self, status_code: int) -> bool:
        """Apply validate_status to a final status code."""
        if self.validate_status is True:
            return 200 <= status_code <= 299
        if callable(self.validate_status):
            return bool(self.validate_status(status_code))
        return True
