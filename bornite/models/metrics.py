from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional


@dataclass
class RequestMetrics:
    """One logical call, recorded once after its last hop."""

    url: str                          # final URL when a response exists
    method: str
    status_code: Optional[int]        # None when no response was received
    duration_ms: float                # wall time across all hops
    size_bytes: int = 0               # bytes read off the wire for the final hop
    timestamp: Optional[datetime] = None
    error: Optional[str] = None
    success: Optional[bool] = None    # derived from ``error`` when None
    error_type: Optional[str] = None  # exception class name
    redirects: int = 0                # followed redirect hops


@dataclass
class MetricsSnapshot:
    """Aggregate view of the calls seen by a MetricsCollector."""

    # Calls
    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    success_rate: float = 0.0
    total_bytes: int = 0

    # Durations (ms); percentiles are None until a call is recorded
    total_duration_ms: float = 0.0
    avg_duration_ms: float = 0.0
    min_duration_ms: Optional[float] = None
    max_duration_ms: Optional[float] = None
    p50_duration_ms: Optional[float] = None
    p95_duration_ms: Optional[float] = None
    p99_duration_ms: Optional[float] = None

    # Breakdowns
    status_codes: Dict[int, int] = field(default_factory=dict)
    error_types: Dict[str, int] = field(default_factory=dict)
    requests_per_host: Dict[str, int] = field(default_factory=dict)

    # Redirects
    total_redirects: int = 0
    requests_with_redirects: int = 0
