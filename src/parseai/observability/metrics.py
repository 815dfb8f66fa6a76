"""
Parse AI Metrics Store.

In-process metrics collection for observability without external dependencies.
Tracks:
- Stage latencies (per pipeline stage, percentiles)
- Error counts by code (fetch failure kinds, model errors, parse fallbacks)
- Which path produced each chat response (model vs. heuristic)

Thread-safe via locks. Singleton pattern for global access.
"""

from __future__ import annotations

import statistics
import threading
from collections import Counter, defaultdict, deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any

MAX_LATENCY_SAMPLES = 1000


@dataclass
class StageMetrics:
    """Latency window and failure breakdown for one pipeline stage.

    Stages are fetch_url, parse_document and model_call. A stage "fails"
    when it degrades to a typed failure (fetch error code, parse fallback,
    heuristic fallback), so error_rate is the share of degraded calls.
    """

    window: deque[float] = field(default_factory=lambda: deque(maxlen=MAX_LATENCY_SAMPLES))
    error_counts: Counter[str] = field(default_factory=Counter)
    call_count: int = 0
    last_called: datetime | None = None
    last_error: str | None = None

    def record_latency(self, ms: float) -> None:
        self.window.append(ms)
        self.call_count += 1
        self.last_called = datetime.now(timezone.utc)

    def record_error(self, code: str) -> None:
        self.error_counts[code] += 1
        self.last_error = code

    @property
    def error_rate(self) -> float:
        if not self.call_count:
            return 0.0
        return round(sum(self.error_counts.values()) / self.call_count, 4)

    def latency_summary(self) -> dict[str, float]:
        if not self.window:
            return {}
        ordered = sorted(self.window)

        def nearest_rank(q: float) -> float:
            return ordered[min(int(len(ordered) * q), len(ordered) - 1)]

        return {
            "p50_ms": nearest_rank(0.5),
            "p90_ms": nearest_rank(0.9),
            "p99_ms": nearest_rank(0.99),
            "mean_ms": round(statistics.fmean(ordered), 2),
            "max_ms": ordered[-1],
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "call_count": self.call_count,
            "last_called": self.last_called.isoformat() if self.last_called else None,
            **self.latency_summary(),
            "errors": dict(self.error_counts),
            "error_rate": self.error_rate,
            "last_error": self.last_error,
        }


class MetricsStore:
    """
    Central metrics store for the pipeline.

    Thread-safe singleton for collecting metrics across the application.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._stages: dict[str, StageMetrics] = defaultdict(StageMetrics)
        self._global_errors: dict[str, int] = defaultdict(int)
        self._responses: dict[str, int] = defaultdict(int)
        self._started_at = datetime.now(timezone.utc)

    # -------------------------------------------------------------------------
    # Stage Metrics
    # -------------------------------------------------------------------------

    def record_stage_latency(self, stage: str, ms: float) -> None:
        """Record a stage execution latency."""
        with self._lock:
            self._stages[stage].record_latency(ms)

    def record_stage_error(self, stage: str, code: str) -> None:
        """Record an error for a specific stage."""
        with self._lock:
            self._stages[stage].record_error(code)
            self._global_errors[code] += 1

    # -------------------------------------------------------------------------
    # Global Errors
    # -------------------------------------------------------------------------

    def record_error(self, code: str) -> None:
        """Record a global error (not tied to a specific stage)."""
        with self._lock:
            self._global_errors[code] += 1

    # -------------------------------------------------------------------------
    # Response Paths
    # -------------------------------------------------------------------------

    def record_response(self, source: str) -> None:
        """Record which path answered a chat message ("model" or "heuristic")."""
        with self._lock:
            self._responses[source] += 1

    # -------------------------------------------------------------------------
    # Summary / Export
    # -------------------------------------------------------------------------

    def get_summary(self) -> dict[str, Any]:
        """
        Get a summary of all metrics.

        Returns a dict suitable for JSON serialization and /metrics endpoint.
        """
        with self._lock:
            now = datetime.now(timezone.utc)
            uptime_seconds = (now - self._started_at).total_seconds()

            return {
                "uptime_seconds": round(uptime_seconds, 1),
                "collected_at": now.isoformat(),
                "stages": {name: metrics.to_dict() for name, metrics in self._stages.items()},
                "global_errors": dict(self._global_errors),
                "responses": dict(self._responses),
            }

    def reset(self) -> None:
        """Reset all metrics. Useful for testing."""
        with self._lock:
            self._stages.clear()
            self._global_errors.clear()
            self._responses.clear()
            self._started_at = datetime.now(timezone.utc)


# -----------------------------------------------------------------------------
# Singleton accessor
# -----------------------------------------------------------------------------

@lru_cache(maxsize=1)
def get_metrics_store() -> MetricsStore:
    """Get the global MetricsStore singleton."""
    return MetricsStore()
