"""
Per-call metrics.

A client records one RequestMetrics per logical call (all hops together)
into the collector it was given with ``Client(metrics=...)``. Nothing is
collected unless a collector is supplied.

Example:
    collector = MetricsCollector()
    api = Client({"redirects": 5}, metrics=collector)
    await api.get("https://example.com/")
    print(format_snapshot(collector.get_snapshot()))
"""

from __future__ import annotations

import threading
from collections import Counter, deque
from typing import Deque, Dict, Optional, Sequence

import httpx

from ..models.metrics import MetricsSnapshot, RequestMetrics

__all__ = [
    "MetricsCollector",
    "get_metrics_collector",
    "reset_metrics_collector",
    "format_snapshot",
]

DEFAULT_SAMPLE_SIZE = 10_000
SNAPSHOT_PERCENTILES = (50, 95, 99)


def _host_of(url: str) -> Optional[str]:
    try:
        return httpx.URL(url).host or None
    except httpx.InvalidURL:
        return None


def _percentile(ordered: Sequence[float], pct: float) -> float:
    """Linear interpolation between closest ranks; ``pct`` in 0..100 or 0..1."""
    if not ordered:
        return 0.0
    fraction = pct / 100.0 if pct > 1 else pct
    fraction = min(max(fraction, 0.0), 1.0)
    position = fraction * (len(ordered) - 1)
    low = int(position)
    high = min(low + 1, len(ordered) - 1)
    return ordered[low] + (ordered[high] - ordered[low]) * (position - low)


class MetricsCollector:
    """
    Thread-safe aggregate of logical calls.

    Counters are exact; durations keep the most recent ``sample_size``
    values for percentiles.
    """

    def __init__(self, *, sample_size: int = DEFAULT_SAMPLE_SIZE):
        self._sample_size = sample_size
        self._lock = threading.Lock()
        self._clear()

    def _clear(self) -> None:
        self._calls = 0
        self._succeeded = 0
        self._bytes = 0
        self._duration_total = 0.0
        self._samples: Deque[float] = deque(maxlen=self._sample_size)
        self._statuses: Counter = Counter()
        self._errors: Counter = Counter()
        self._hosts: Counter = Counter()
        self._redirects = 0
        self._redirected_calls = 0

    def record_request(self, metrics: RequestMetrics) -> None:
        """Fold one logical call into the aggregate."""
        duration = max(0.0, float(metrics.duration_ms))
        succeeded = metrics.success
        if succeeded is None:
            succeeded = metrics.error is None

        with self._lock:
            self._calls += 1
            if succeeded:
                self._succeeded += 1
            else:
                self._errors[metrics.error_type or metrics.error or "unknown"] += 1
            if metrics.status_code is not None:
                self._statuses[metrics.status_code] += 1
            self._bytes += max(0, metrics.size_bytes or 0)
            self._duration_total += duration
            self._samples.append(duration)
            if metrics.redirects:
                self._redirects += metrics.redirects
                self._redirected_calls += 1
            host = _host_of(metrics.url)
            if host:
                self._hosts[host] += 1

    def get_snapshot(self) -> MetricsSnapshot:
        with self._lock:
            return self._snapshot()

    def reset(self) -> MetricsSnapshot:
        """Return the current snapshot and start over."""
        with self._lock:
            snapshot = self._snapshot()
            self._clear()
        return snapshot

    def get_percentiles(self, percentiles: Sequence[float] = (50, 90, 95, 99)) -> Dict[float, float]:
        """Duration percentiles keyed by the requested value (95 or 0.95)."""
        with self._lock:
            ordered = sorted(self._samples)
        return {pct: _percentile(ordered, pct) for pct in percentiles}

    def _snapshot(self) -> MetricsSnapshot:
        ordered = sorted(self._samples)
        p50, p95, p99 = (_percentile(ordered, pct) for pct in SNAPSHOT_PERCENTILES)
        calls = self._calls
        return MetricsSnapshot(
            total_requests=calls,
            successful_requests=self._succeeded,
            failed_requests=calls - self._succeeded,
            success_rate=self._succeeded / calls if calls else 0.0,
            total_bytes=self._bytes,
            total_duration_ms=self._duration_total,
            avg_duration_ms=self._duration_total / calls if calls else 0.0,
            min_duration_ms=ordered[0] if ordered else None,
            max_duration_ms=ordered[-1] if ordered else None,
            p50_duration_ms=p50 if ordered else None,
            p95_duration_ms=p95 if ordered else None,
            p99_duration_ms=p99 if ordered else None,
            status_codes=dict(self._statuses),
            error_types=dict(self._errors),
            total_redirects=self._redirects,
            requests_with_redirects=self._redirected_calls,
            requests_per_host=dict(self._hosts),
        )


_global_collector: Optional[MetricsCollector] = None
_global_lock = threading.Lock()


def get_metrics_collector() -> MetricsCollector:
    """Process-wide collector, created on first use."""
    global _global_collector
    with _global_lock:
        if _global_collector is None:
            _global_collector = MetricsCollector()
        return _global_collector


def reset_metrics_collector() -> None:
    global _global_collector
    with _global_lock:
        _global_collector = None


def _human_bytes(count: int) -> str:
    size = float(count)
    for unit in ("B", "KB", "MB", "GB"):
        if size < 1024 or unit == "GB":
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} GB"


def format_snapshot(snapshot: MetricsSnapshot) -> str:
    """Render a snapshot as a short multi-line report."""
    lines = [
        f"calls: {snapshot.total_requests} "
        f"(ok {snapshot.successful_requests}, failed {snapshot.failed_requests}, "
        f"{snapshot.success_rate:.1%})",
        f"bytes: {_human_bytes(snapshot.total_bytes)}",
        f"avg: {snapshot.avg_duration_ms:.2f} ms",
    ]
    if snapshot.p50_duration_ms is not None:
        lines.append(
            f"p50/p95/p99: {snapshot.p50_duration_ms:.2f} / "
            f"{snapshot.p95_duration_ms:.2f} / {snapshot.p99_duration_ms:.2f} ms"
        )
    if snapshot.total_redirects:
        lines.append(
            f"redirects: {snapshot.total_redirects} across "
            f"{snapshot.requests_with_redirects} calls"
        )
    for code, count in sorted(snapshot.status_codes.items()):
        lines.append(f"status {code}: {count}")
    for name, count in sorted(snapshot.error_types.items(), key=lambda kv: -kv[1]):
        lines.append(f"error {name}: {count}")
    return "\n".join(lines)
