"""Metrics collection for the aggregator."""

from collections import Counter
from dataclasses import dataclass, field
from threading import Lock

from burrow.sources.errors import SourceErrorClass


# Module-level singleton state
_metrics_instance: "AggregatorMetrics | None" = None
_metrics_lock: Lock = Lock()


@dataclass
class AggregatorMetrics:
    """Thread-safe metrics for source fetches.

    Tracks failures and timing per source. Use get_instance() for
    singleton access.
    """

    _lock: Lock = field(default_factory=Lock, repr=False, compare=False)

    # Per-source failure counts by error class
    failures_by_source_error: Counter[tuple[str, str]] = field(default_factory=Counter)

    # Per-source duration in milliseconds (last run)
    duration_by_source: dict[str, float] = field(default_factory=dict)

    total_fetches: int = 0
    total_failures: int = 0

    @classmethod
    def get_instance(cls) -> "AggregatorMetrics":
        """Get the singleton instance (thread-safe).

        Returns:
            The shared AggregatorMetrics instance.
        """
        global _metrics_instance  # noqa: PLW0603
        if _metrics_instance is None:
            with _metrics_lock:
                if _metrics_instance is None:
                    _metrics_instance = cls()
        return _metrics_instance

    @classmethod
    def reset(cls) -> None:
        """Reset the singleton instance (for testing)."""
        global _metrics_instance  # noqa: PLW0603
        with _metrics_lock:
            _metrics_instance = None

    def record_duration(self, source: str, duration_ms: float) -> None:
        """Record fetch duration for a source.

        Args:
            source: Source name.
            duration_ms: Duration in milliseconds.
        """
        with self._lock:
            self.duration_by_source[source] = duration_ms
            self.total_fetches += 1

    def record_failure(self, source: str, error_class: SourceErrorClass) -> None:
        """Record a source failure.

        Args:
            source: Source name.
            error_class: Classification of the error.
        """
        with self._lock:
            self.failures_by_source_error[(source, error_class.value)] += 1
            self.total_failures += 1

    def get_failures_total(self, source: str | None = None) -> int:
        """Get total failures, optionally for one source."""
        with self._lock:
            if source is None:
                return self.total_failures
            return sum(
                count
                for (name, _), count in self.failures_by_source_error.items()
                if name == source
            )

    def get_duration(self, source: str) -> float | None:
        """Get the last recorded duration for a source."""
        with self._lock:
            return self.duration_by_source.get(source)

    def to_prometheus_format(self) -> str:
        """Export metrics in Prometheus text format.

        Returns:
            Prometheus-formatted metrics string.
        """
        lines = [
            "# HELP burrow_source_failures_total Source failures by error class",
            "# TYPE burrow_source_failures_total counter",
        ]
        with self._lock:
            for (source, error_class), count in sorted(
                self.failures_by_source_error.items()
            ):
                lines.append(
                    f'burrow_source_failures_total{{source="{source}",'
                    f'error_class="{error_class}"}} {count}'
                )

            lines.append("# HELP burrow_source_duration_ms Fetch duration by source")
            lines.append("# TYPE burrow_source_duration_ms gauge")
            for source, duration in sorted(self.duration_by_source.items()):
                lines.append(
                    f'burrow_source_duration_ms{{source="{source}"}} {duration:.2f}'
                )

        return "\n".join(lines)

    def to_dict(self) -> dict[str, object]:
        """Export metrics as dictionary."""
        with self._lock:
            return {
                "total_fetches": self.total_fetches,
                "total_failures": self.total_failures,
                "failures_by_source_error": dict(self.failures_by_source_error),
                "duration_by_source": dict(self.duration_by_source),
            }
