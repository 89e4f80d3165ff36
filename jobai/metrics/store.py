"""
Metrics Store for Capability Calls

Aggregates per-call metrics (provider, model, capability, latency, outcome)
recorded by the dispatch facade. Uses in-memory storage; nothing survives
a restart.

The store is thread-safe using threading.Lock to handle concurrent
requests in FastAPI's async environment.
"""

import threading
from collections import defaultdict
from dataclasses import asdict, dataclass

from jobai.schemas.api import BreakdownMetrics, MetricsResponse, RecentCall


@dataclass
class CallMetric:
    """
    Individual capability call record.

    Attributes:
        timestamp: Unix timestamp when the call finished
        provider: Provider that served the call (e.g., 'openai')
        model: Model used for the call
        capability: Capability name (e.g., 'analyze resume')
        latency_ms: Time spent in the adapter in milliseconds
        success: False when the adapter raised
    """

    timestamp: float
    provider: str
    model: str
    capability: str
    latency_ms: float
    success: bool = True


@dataclass
class _Aggregate:
    """Internal aggregate for one provider or capability."""

    count: int = 0
    errors: int = 0
    total_latency_ms: float = 0.0

    @property
    def avg_latency_ms(self) -> float:
        return self.total_latency_ms / self.count if self.count else 0.0

    def add(self, metric: CallMetric) -> None:
        self.count += 1
        if not metric.success:
            self.errors += 1
        self.total_latency_ms += metric.latency_ms

    def to_breakdown(self, name: str) -> BreakdownMetrics:
        return BreakdownMetrics(
            name=name,
            request_count=self.count,
            error_count=self.errors,
            avg_latency_ms=self.avg_latency_ms,
        )


class MetricsStore:
    """
    Thread-safe in-memory metrics storage.

    Example:
        store = MetricsStore()
        store.record(CallMetric(
            timestamp=time.time(),
            provider="openai",
            model="gpt-4o",
            capability="analyze resume",
            latency_ms=850.0,
        ))
        report = store.report()
        print(f"Total requests: {report.total_requests}")
    """

    def __init__(self, max_history: int = 10000):
        """
        Initialize the metrics store.

        Args:
            max_history: Maximum individual metrics to retain.
                         Aggregates are preserved regardless of this limit.
        """
        self._lock = threading.Lock()
        self._metrics: list[CallMetric] = []
        self._max_history = max_history

        self._total = _Aggregate()
        self._by_provider: dict[str, _Aggregate] = defaultdict(_Aggregate)
        self._by_capability: dict[str, _Aggregate] = defaultdict(_Aggregate)

    def record(self, metric: CallMetric) -> None:
        """Record a call. Updates both raw history and aggregates."""
        with self._lock:
            self._metrics.append(metric)
            if len(self._metrics) > self._max_history:
                self._metrics = self._metrics[-self._max_history :]

            self._total.add(metric)
            self._by_provider[metric.provider].add(metric)
            self._by_capability[metric.capability].add(metric)

    def report(self, recent: int = 0) -> MetricsResponse:
        """
        Snapshot of current aggregates as an API response.

        Args:
            recent: Number of most recent calls to include (0 for none)
        """
        with self._lock:
            return MetricsResponse(
                total_requests=self._total.count,
                total_errors=self._total.errors,
                avg_latency_ms=self._total.avg_latency_ms,
                providers={
                    name: agg.to_breakdown(name) for name, agg in self._by_provider.items()
                },
                capabilities={
                    name: agg.to_breakdown(name) for name, agg in self._by_capability.items()
                },
                recent_calls=[RecentCall(**asdict(m)) for m in self._tail(recent)],
            )

    def _tail(self, count: int) -> list[CallMetric]:
        return list(self._metrics[-count:]) if count > 0 else []

    def get_recent(self, count: int = 100) -> list[CallMetric]:
        with self._lock:
            return self._tail(count)

    def reset(self) -> None:
        """Clear all stored data and aggregates."""
        with self._lock:
            self._metrics.clear()
            self._total = _Aggregate()
            self._by_provider.clear()
            self._by_capability.clear()
