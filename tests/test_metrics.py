"""
Tests for metrics collection.
"""

from datetime import datetime

import httpx
import pytest

from bornite import Client
from bornite.exceptions import StatusValidationFailed
from bornite.observability.metrics import (
    MetricsCollector,
    format_snapshot,
    get_metrics_collector,
    reset_metrics_collector,
)
from bornite.models.metrics import RequestMetrics


def call(url="https://example.com/a", status=200, duration=100.0, size=10, error=None, redirects=0):
    return RequestMetrics(
        url=url,
        method="GET",
        status_code=status,
        duration_ms=duration,
        size_bytes=size,
        timestamp=datetime.now(),
        error=error,
        error_type=error and "StatusValidationFailed",
        redirects=redirects,
    )


class Body(httpx.AsyncByteStream):
    def __init__(self, data: bytes):
        self.data = data

    async def __aiter__(self):
        yield self.data


@pytest.fixture
def collector():
    return MetricsCollector()


class TestMetricsCollector:
    """Test aggregation."""

    def test_empty_snapshot(self, collector):
        snapshot = collector.get_snapshot()

        assert snapshot.total_requests == 0
        assert snapshot.success_rate == 0.0
        assert snapshot.min_duration_ms is None
        assert snapshot.p50_duration_ms is None

    def test_counts_and_rates(self, collector):
        collector.record_request(call(size=100))
        collector.record_request(call(size=50, redirects=2, url="https://cdn.example/b"))
        collector.record_request(call(status=404, error="boom"))

        snapshot = collector.get_snapshot()
        assert snapshot.total_requests == 3
        assert snapshot.successful_requests == 2
        assert snapshot.failed_requests == 1
        assert snapshot.success_rate == pytest.approx(2 / 3)
        assert snapshot.total_bytes == 160
        assert snapshot.status_codes == {200: 2, 404: 1}
        assert snapshot.error_types == {"StatusValidationFailed": 1}
        assert snapshot.total_redirects == 2
        assert snapshot.requests_with_redirects == 1
        assert snapshot.requests_per_host == {"example.com": 2, "cdn.example": 1}

    def test_durations(self, collector):
        for duration in (10.0, 20.0, 30.0, 40.0, 50.0):
            collector.record_request(call(duration=duration))

        snapshot = collector.get_snapshot()
        assert snapshot.avg_duration_ms == 30.0
        assert snapshot.min_duration_ms == 10.0
        assert snapshot.max_duration_ms == 50.0
        assert snapshot.p50_duration_ms == 30.0
        assert snapshot.p95_duration_ms == pytest.approx(48.0)

    def test_percentiles_accept_both_scales(self, collector):
        for duration in (10.0, 20.0, 30.0):
            collector.record_request(call(duration=duration))

        assert collector.get_percentiles([0.5, 50, 100]) == {0.5: 20.0, 50: 20.0, 100: 30.0}

    def test_sample_window_is_bounded(self):
        collector = MetricsCollector(sample_size=2)
        for duration in (1000.0, 1.0, 2.0):
            collector.record_request(call(duration=duration))

        assert collector.get_snapshot().max_duration_ms == 2.0
        assert collector.get_snapshot().total_requests == 3

    def test_reset_returns_previous_snapshot(self, collector):
        collector.record_request(call())

        assert collector.reset().total_requests == 1
        assert collector.get_snapshot().total_requests == 0

    def test_format_snapshot(self, collector):
        collector.record_request(call(size=2048, redirects=1))
        collector.record_request(call(status=500, error="x"))

        report = format_snapshot(collector.get_snapshot())

        assert "calls: 2 (ok 1, failed 1, 50.0%)" in report
        assert "bytes: 2.0 KB" in report
        assert "redirects: 1 across 1 calls" in report
        assert "status 500: 1" in report


def test_global_collector_is_shared():
    reset_metrics_collector()
    try:
        assert get_metrics_collector() is get_metrics_collector()
    finally:
        reset_metrics_collector()


class TestClientMetrics:
    """Test recording from a client."""

    @pytest.mark.asyncio
    async def test_successful_call_is_recorded_once_across_hops(self, collector):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/old":
                return httpx.Response(301, headers={"location": "/new"})
            return httpx.Response(200, stream=Body(b"hello"))

        agent = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        client = Client({"agent": agent, "redirects": 3}, metrics=collector)

        await client.get("https://example.com/old")

        snapshot = collector.get_snapshot()
        assert snapshot.total_requests == 1
        assert snapshot.status_codes == {200: 1}
        assert snapshot.total_bytes == 5
        assert snapshot.total_redirects == 1
        await agent.aclose()

    @pytest.mark.asyncio
    async def test_failed_call_is_recorded(self, collector):
        agent = httpx.AsyncClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(503, stream=Body(b"down")))
        )
        client = Client({"agent": agent, "validate_status": True}, metrics=collector)

        with pytest.raises(StatusValidationFailed):
            await client.get("https://example.com/")

        snapshot = collector.get_snapshot()
        assert snapshot.failed_requests == 1
        assert snapshot.status_codes == {503: 1}
        assert snapshot.error_types == {"StatusValidationFailed": 1}
        await agent.aclose()

    @pytest.mark.asyncio
    async def test_custom_clients_share_collector(self, collector):
        agent = httpx.AsyncClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(200, stream=Body(b"")))
        )
        parent = Client({"agent": agent}, metrics=collector)

        await parent.custom(headers={"x-child": "1"}).get("https://example.com/")

        assert collector.get_snapshot().total_requests == 1
        await agent.aclose()
