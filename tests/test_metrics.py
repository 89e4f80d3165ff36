"""
Metrics Store Tests

Tests for capability call aggregation and reporting.

Test Categories:
1. TestMetricsStore - Recording, aggregates, history limits, reset
2. TestThreadSafety - Concurrent recording
"""

import threading
import time

import pytest

from jobai.metrics import CallMetric, MetricsStore


def _metric(provider="openai", capability="analyze resume", latency_ms=100.0, success=True):
    return CallMetric(
        timestamp=time.time(),
        provider=provider,
        model="gpt-4o" if provider == "openai" else "gemini-2.0-flash",
        capability=capability,
        latency_ms=latency_ms,
        success=success,
    )


class TestMetricsStore:
    """Tests for MetricsStore aggregation."""

    def test_empty_report(self):
        report = MetricsStore().report()

        assert report.total_requests == 0
        assert report.total_errors == 0
        assert report.avg_latency_ms == 0.0
        assert report.providers == {}
        assert report.capabilities == {}

    def test_aggregates_by_provider_and_capability(self):
        store = MetricsStore()
        store.record(_metric("openai", "analyze resume", 100.0))
        store.record(_metric("openai", "chat with assistant", 300.0, success=False))
        store.record(_metric("gemini", "analyze resume", 200.0))

        report = store.report()

        assert report.total_requests == 3
        assert report.total_errors == 1
        assert report.avg_latency_ms == pytest.approx(200.0)
        assert report.providers["openai"].request_count == 2
        assert report.providers["openai"].error_count == 1
        assert report.providers["openai"].avg_latency_ms == pytest.approx(200.0)
        assert report.capabilities["analyze resume"].request_count == 2
        assert report.capabilities["analyze resume"].avg_latency_ms == pytest.approx(150.0)

    def test_history_is_bounded(self):
        store = MetricsStore(max_history=3)
        for i in range(5):
            store.record(_metric(latency_ms=float(i)))

        recent = store.get_recent(10)

        assert [m.latency_ms for m in recent] == [2.0, 3.0, 4.0]
        assert store.report().total_requests == 5

    def test_aggregates_do_not_grow_with_calls(self):
        store = MetricsStore(max_history=10)
        for i in range(1000):
            store.record(_metric("openai", "analyze resume", float(i % 2) * 100.0))

        report = store.report()

        assert len(store.get_recent(10000)) == 10
        aggregates = (
            store._total,
            store._by_provider["openai"],
            store._by_capability["analyze resume"],
        )
        for aggregate in aggregates:
            assert vars(aggregate).keys() == {"count", "errors", "total_latency_ms"}
        assert report.providers["openai"].request_count == 1000
        assert report.providers["openai"].avg_latency_ms == pytest.approx(50.0)
        assert report.avg_latency_ms == pytest.approx(50.0)

    def test_report_includes_recent_calls(self):
        store = MetricsStore()
        store.record(_metric("openai", latency_ms=10.0))
        store.record(_metric("gemini", latency_ms=20.0, success=False))

        report = store.report(recent=1)

        (call,) = report.recent_calls
        assert call.provider == "gemini"
        assert call.model == "gemini-2.0-flash"
        assert call.success is False

    def test_report_omits_recent_calls_by_default(self):
        store = MetricsStore()
        store.record(_metric())

        assert store.report().recent_calls == []
        assert store.get_recent(0) == []

    def test_reset(self):
        store = MetricsStore()
        store.record(_metric())

        store.reset()

        assert store.report().total_requests == 0
        assert store.get_recent() == []


class TestThreadSafety:
    """Concurrent recording keeps counts consistent."""

    def test_concurrent_records(self):
        store = MetricsStore()

        def worker():
            for _ in range(100):
                store.record(_metric())

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert store.report().total_requests == 800
