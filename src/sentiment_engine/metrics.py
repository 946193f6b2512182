"""Per-orchestrator operational counters."""

from __future__ import annotations

import threading

from .models import MetricsSnapshot


class MetricsRecorder:
    """Thread-safe request / cache / error counters."""

    def __init__(self):
        self._lock = threading.Lock()
        self._reset_unlocked()

    def _reset_unlocked(self) -> None:
        self._total_requests = 0
        self._cache_hits = 0
        self._cache_misses = 0
        self._errors = 0
        self._contextual_timeouts = 0
        self._processing_ms = 0.0

    def record_request(self) -> None:
        with self._lock:
            self._total_requests += 1

    def record_completion(self, duration_ms: float, cache_hit: bool) -> None:
        with self._lock:
            if cache_hit:
                self._cache_hits += 1
            else:
                self._cache_misses += 1
            self._processing_ms += max(0.0, duration_ms)

    def record_error(self) -> None:
        with self._lock:
            self._errors += 1

    def record_contextual_timeout(self) -> None:
        with self._lock:
            self._contextual_timeouts += 1

    def reset(self) -> None:
        with self._lock:
            self._reset_unlocked()

    def snapshot(self, cache_size: int = 0) -> MetricsSnapshot:
        with self._lock:
            total = self._total_requests
            return MetricsSnapshot(
                total_requests=total,
                cache_hits=self._cache_hits,
                cache_misses=self._cache_misses,
                error_count=self._errors,
                contextual_timeouts=self._contextual_timeouts,
                cumulative_processing_time_ms=self._processing_ms,
                cache_hit_rate=self._cache_hits / total if total else 0.0,
                average_processing_time_ms=self._processing_ms / total if total else 0.0,
                cache_size=cache_size,
            )
