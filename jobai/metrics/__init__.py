"""
Metrics Module: Capability call tracking.

Components:
    CallMetric: Individual capability call record
    MetricsStore: Thread-safe in-memory aggregation and reporting

Usage:
    from jobai.metrics import MetricsStore, CallMetric

    store = MetricsStore()
    store.record(CallMetric(
        timestamp=time.time(),
        provider="gemini",
        model="gemini-2.0-flash",
        capability="chat with assistant",
        latency_ms=640.0,
    ))
    report = store.report()
"""

from jobai.metrics.store import CallMetric, MetricsStore

__all__ = ["CallMetric", "MetricsStore"]
