"""In-memory metrics sink for persistence components.

Holds the counters, gauges and timings written by the DAO, the key
sequencer and the lifecycle service. Depends only on the metrics port.
"""

import time
from collections import defaultdict
from contextlib import contextmanager
from typing import Any

from ..ports.metrics import MetricsPort


class MetricsSummary:
    """Running statistics for one recorded value stream, e.g. load durations."""

    def __init__(self) -> None:
        self.samples: list[float] = []

    def add(self, value: float) -> None:
        self.samples.append(value)

    @property
    def count(self) -> int:
        return len(self.samples)

    @property
    def average(self) -> float:
        return sum(self.samples) / len(self.samples) if self.samples else 0.0

    def percentile(self, p: float) -> float:
        """Nearest-rank percentile (0-100), 0.0 when empty."""
        if not self.samples:
            return 0.0
        ordered = sorted(self.samples)
        return ordered[min(int(p / 100 * len(ordered)), len(ordered) - 1)]

    def to_dict(self) -> dict[str, float]:
        if not self.samples:
            return {"count": 0, "average": 0.0, "min": 0.0, "max": 0.0, "p50": 0.0, "p99": 0.0}
        return {
            "count": self.count,
            "average": round(self.average, 2),
            "min": round(min(self.samples), 2),
            "max": round(max(self.samples), 2),
            "p50": round(self.percentile(50), 2),
            "p99": round(self.percentile(99), 2),
        }


class InMemoryMetrics(MetricsPort):
    """MetricsPort implementation that keeps everything in dictionaries.

    Each persistence service owns one instance unless a host injects its own
    metrics backend.
    """

    def __init__(self) -> None:
        self._counters: dict[str, int] = defaultdict(int)
        self._gauges: dict[str, float] = {}
        self._summaries: dict[str, MetricsSummary] = defaultdict(MetricsSummary)

    # MetricsPort
    def increment(self, name: str, value: int = 1) -> None:
        self._counters[name] += value

    def gauge(self, name: str, value: float) -> None:
        self._gauges[name] = value

    def record(self, name: str, value: float) -> None:
        self._summaries[name].add(value)

    @contextmanager
    def timer(self, name: str):
        """Record the wall time of the block in milliseconds, even if it raises."""
        start = time.perf_counter()
        try:
            yield
        finally:
            self.record(name, (time.perf_counter() - start) * 1000)

    # Queries
    def counter(self, name: str) -> int:
        """Current value of a counter, 0 if it was never incremented."""
        return self._counters.get(name, 0)

    def gauge_value(self, name: str) -> float | None:
        """Last value set for a gauge, None if it was never set."""
        return self._gauges.get(name)

    def summary(self, name: str) -> dict[str, float]:
        """Statistics for a recorded value stream."""
        summary = self._summaries.get(name)
        return summary.to_dict() if summary is not None else MetricsSummary().to_dict()

    def get_all(self) -> dict[str, Any]:
        return {
            "counters": dict(self._counters),
            "gauges": dict(self._gauges),
            "summaries": {name: s.to_dict() for name, s in self._summaries.items()},
        }

    def reset(self) -> None:
        self._counters.clear()
        self._gauges.clear()
        self._summaries.clear()
