"""
Observability Module
====================

Counters and timings for the action search engine.

Metrics are off unless ActionSearchConfig.enable_metrics is set, in which
case the controller owns a MetricsCollector and shares it with the
aggregator. Only the standard library is used.

Recorded names:
    query                  timing of one query, from submit to last match
    actions_accepted       matches ranked for the active query
    stale_actions_dropped  matches that arrived after their query was superseded
    resets                 query sessions started
    duplicate_queries      submissions equal to the previous query
    invariant_violations   queries aborted by an InvariantViolation

Example:
    controller = QuerySessionController.from_catalog(
        catalog, config=ActionSearchConfig(enable_metrics=True)
    )
    ...
    print(controller.metrics.get_summary())

Logging Configuration:
    logging.getLogger('actionsearch').setLevel(logging.DEBUG)
"""

import functools
import inspect
import logging
import threading
import time
from collections import deque
from contextlib import contextmanager
from typing import Any, Callable, Deque, Dict, Iterator, Optional, Tuple

logger = logging.getLogger(__name__)


class _Timing:
    """Running statistics for one timed operation."""

    __slots__ = ('count', 'total_ms', 'min_ms', 'max_ms', 'history')

    def __init__(self, max_history: int):
        self.count = 0
        self.total_ms = 0.0
        self.min_ms = float('inf')
        self.max_ms = 0.0
        self.history: Deque[float] = deque(maxlen=max_history)

    def add(self, duration_ms: float) -> None:
        self.count += 1
        self.total_ms += duration_ms
        self.min_ms = min(self.min_ms, duration_ms)
        self.max_ms = max(self.max_ms, duration_ms)
        self.history.append(duration_ms)

    def stats(self) -> Dict[str, Any]:
        return {
            'count': self.count,
            'total_ms': self.total_ms,
            'avg_ms': self.total_ms / self.count if self.count else 0.0,
            'min_ms': self.min_ms if self.count else 0.0,
            'max_ms': self.max_ms,
        }


class MetricsCollector:
    """
    Collects timing and count metrics.

    Safe to share between the event loop and worker threads feeding the
    aggregator.

    Attributes:
        enabled: Whether recording is active
        max_timing_history: Timing samples kept per operation
    """

    def __init__(self, enabled: bool = True, max_timing_history: int = 1000):
        """
        Initialize metrics collector.

        Args:
            enabled: Start with recording enabled
            max_timing_history: Number of recent samples kept per operation
        """
        self.enabled = enabled
        self.max_timing_history = max(0, max_timing_history)
        self._timings: Dict[str, _Timing] = {}
        self._counts: Dict[str, int] = {}
        self._lock = threading.Lock()

    def record_timing(self, operation: str, duration_ms: float) -> None:
        """
        Record one timing sample.

        Args:
            operation: Operation name (e.g. "query")
            duration_ms: Duration in milliseconds
        """
        if not self.enabled:
            return
        with self._lock:
            timing = self._timings.get(operation)
            if timing is None:
                timing = self._timings[operation] = _Timing(self.max_timing_history)
            timing.add(duration_ms)

    def record_count(self, name: str, count: int = 1) -> None:
        """
        Add to a counter.

        Args:
            name: Counter name (e.g. "stale_actions_dropped")
            count: Amount to add (default 1)
        """
        if not self.enabled:
            return
        with self._lock:
            self._counts[name] = self._counts.get(name, 0) + count

    def get_count(self, name: str) -> int:
        """Current value of a counter (0 if never recorded)."""
        with self._lock:
            return self._counts.get(name, 0)

    def get_operation_stats(self, operation: str) -> Dict[str, Any]:
        """
        Statistics for one operation or counter.

        Returns:
            count, total_ms, avg_ms, min_ms, max_ms for timings; only count
            for counters; an empty dict for unknown names
        """
        with self._lock:
            if operation in self._timings:
                return self._timings[operation].stats()
            if operation in self._counts:
                return {'count': self._counts[operation]}
        return {}

    def get_all_stats(self) -> Dict[str, Dict[str, Any]]:
        """Statistics for every recorded name."""
        timings, counts = self._snapshot()
        stats: Dict[str, Dict[str, Any]] = {name: {'count': count} for name, count in counts.items()}
        stats.update(timings)
        return {name: stats[name] for name in sorted(stats)}

    def _snapshot(self) -> Tuple[Dict[str, Dict[str, Any]], Dict[str, int]]:
        """Timing stats and counters, copied under the lock."""
        with self._lock:
            timings = {name: timing.stats() for name, timing in self._timings.items()}
            return timings, dict(self._counts)

    def reset(self) -> None:
        """Discard everything recorded."""
        with self._lock:
            self._timings.clear()
            self._counts.clear()

    def enable(self) -> None:
        """Enable recording."""
        self.enabled = True

    def disable(self) -> None:
        """Disable recording."""
        self.enabled = False

    @contextmanager
    def measure(self, operation: str) -> Iterator[None]:
        """
        Time a block of code.

        Example:
            with metrics.measure("load_catalog"):
                catalog = load_default_catalog()
        """
        start = time.perf_counter()
        try:
            yield
        finally:
            self.record_timing(operation, (time.perf_counter() - start) * 1000.0)

    def get_summary(self) -> str:
        """Human-readable table of everything recorded."""
        timings, counts = self._snapshot()
        if not timings and not counts:
            return "No metrics collected."

        lines = ["Metrics Summary", "=" * 72]
        if timings:
            lines.append("\nTiming Operations:")
            lines.append(f"{'Operation':<28} {'Count':>8} {'Avg(ms)':>10} {'Min(ms)':>10} {'Max(ms)':>10}")
            lines.append("-" * 72)
            for name in sorted(timings):
                stats = timings[name]
                lines.append(
                    f"{name:<28} {stats['count']:>8} {stats['avg_ms']:>10.2f} "
                    f"{stats['min_ms']:>10.2f} {stats['max_ms']:>10.2f}"
                )
        if counts:
            lines.append("\nCount Metrics:")
            lines.append(f"{'Metric':<40} {'Count':>10}")
            lines.append("-" * 52)
            for name in sorted(counts):
                lines.append(f"{name:<40} {counts[name]:>10}")
        return "\n".join(lines)


def timed(operation_name: Optional[str] = None):
    """
    Decorator recording a method's duration to `self._metrics`.

    Works on plain and coroutine methods. Nothing is recorded when the
    instance has no collector or it is disabled.

    Args:
        operation_name: Name to record under (defaults to the method name)
    """
    def decorator(func: Callable) -> Callable:
        op_name = operation_name or func.__name__

        if inspect.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(self, *args, **kwargs):
                metrics = getattr(self, '_metrics', None)
                if not metrics or not metrics.enabled:
                    return await func(self, *args, **kwargs)
                with metrics.measure(op_name):
                    return await func(self, *args, **kwargs)
            return async_wrapper

        @functools.wraps(func)
        def wrapper(self, *args, **kwargs):
            metrics = getattr(self, '_metrics', None)
            if not metrics or not metrics.enabled:
                return func(self, *args, **kwargs)
            with metrics.measure(op_name):
                return func(self, *args, **kwargs)
        return wrapper
    return decorator


def measure_time(func: Callable) -> Callable:
    """
    Log a function's execution time at DEBUG level.

    For ad-hoc profiling without a collector.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            duration_ms = (time.perf_counter() - start) * 1000.0
            logger.debug(f"{func.__name__} took {duration_ms:.2f}ms")
    return wrapper
