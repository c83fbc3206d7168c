# =============================================================================
# deep-filter -- Timing and Performance Monitor
# =============================================================================

from __future__ import annotations

import logging
import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from .constants import PERFORMANCE_SAMPLE_WINDOW

log = logging.getLogger("deep_filter.timing")


class Timer:
    """Start/stop handle over ``time.perf_counter``, in milliseconds."""

    __slots__ = ("_started", "_elapsed")

    def __init__(self) -> None:
        self._started: float | None = None
        self._elapsed = 0.0

    def start(self) -> Timer:
        self._started = time.perf_counter()
        return self

    def stop(self) -> float:
        if self._started is not None:
            self._elapsed += (time.perf_counter() - self._started) * 1000.0
            self._started = None
        return self._elapsed

    @property
    def elapsed_ms(self) -> float:
        if self._started is None:
            return self._elapsed
        return self._elapsed + (time.perf_counter() - self._started) * 1000.0


@dataclass
class OperationMetrics:
    """Samples for one named operation (deque evicts the oldest)."""

    count: int = 0
    total_ms: float = 0.0
    samples: deque = field(default_factory=lambda: deque(maxlen=PERFORMANCE_SAMPLE_WINDOW))

    def record(self, duration_ms: float) -> None:
        self.count += 1
        self.total_ms += duration_ms
        self.samples.append(duration_ms)

    def _percentile(self, ordered: list[float], pct: float) -> float:
        index = min(len(ordered) - 1, max(0, int(round(pct / 100.0 * len(ordered))) - 1))
        return ordered[index]

    def to_dict(self) -> dict[str, Any]:
        if not self.samples:
            return {"count": 0, "avg": 0.0, "min": 0.0, "max": 0.0, "p95": 0.0, "p99": 0.0, "total": 0.0}
        ordered = sorted(self.samples)
        return {
            "count": self.count,
            "avg": sum(ordered) / len(ordered),
            "min": ordered[0],
            "max": ordered[-1],
            "p95": self._percentile(ordered, 95),
            "p99": self._percentile(ordered, 99),
            "total": self.total_ms,
        }


class PerformanceMonitor:
    """Per-engine phase timings.

    Usage::

        stop = monitor.start("filter:total")
        ...
        stop()
        monitor.get_metrics("filter:total")["avg"]
    """

    def __init__(self) -> None:
        self._metrics: dict[str, OperationMetrics] = {}

    def start(self, operation: str) -> Callable[[], float]:
        timer = Timer().start()

        def stop() -> float:
            duration = timer.stop()
            self.track(operation, duration)
            return duration

        return stop

    def track(self, operation: str, duration_ms: float) -> None:
        metrics = self._metrics.get(operation)
        if metrics is None:
            metrics = self._metrics[operation] = OperationMetrics()
        metrics.record(duration_ms)

    def get_metrics(self, operation: str) -> dict[str, Any] | None:
        metrics = self._metrics.get(operation)
        return metrics.to_dict() if metrics else None

    def get_all_metrics(self) -> dict[str, dict[str, Any]]:
        return {name: m.to_dict() for name, m in self._metrics.items()}

    def reset(self) -> None:
        self._metrics.clear()
        log.debug("Performance metrics reset")
