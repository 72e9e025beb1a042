"""Aggregator with parallel fetching and per-source failure isolation."""

import time
from collections.abc import Sequence

import structlog

from burrow.aggregator.fanout import TaskOutcome, fan_out
from burrow.aggregator.metrics import AggregatorMetrics
from burrow.context import FetchContext
from burrow.sources.base import ContentSource, FetchResult
from burrow.sources.errors import ErrorRecord


logger = structlog.get_logger()


class Aggregator:
    """Fetches every registered source concurrently.

    Provides:
    - One pool thread per source, joined by a single barrier
    - Failure isolation (one source failing doesn't stop others)
    - Results in registration order, never completion order
    - Structured logging and per-source metrics
    """

    def __init__(
        self,
        sources: Sequence[ContentSource],
        max_workers: int | None = None,
    ) -> None:
        """Initialize the aggregator.

        Args:
            sources: Sources in registration (display) order.
            max_workers: Maximum parallel workers (default: one per source).
        """
        self._sources = tuple(sources)
        self._max_workers = max_workers
        self._metrics = AggregatorMetrics.get_instance()
        self._log = logger.bind(component="aggregator")

    def fetch_all(self, ctx: FetchContext) -> list[FetchResult]:
        """Fetch all sources and wait for every one of them.

        Args:
            ctx: Shared run context; its deadline bounds the whole call.

        Returns:
            One FetchResult per source, index-aligned with registration order.
        """
        start_time_ns = time.perf_counter_ns()
        self._log.info("fetch_all_started", source_count=len(self._sources))

        outcomes = fan_out(
            ctx,
            self._sources,
            self._run_source,
            max_workers=self._max_workers,
            thread_name_prefix="burrow-source",
        )
        results = [
            self._to_result(source, outcome)
            for source, outcome in zip(self._sources, outcomes, strict=True)
        ]

        succeeded = sum(1 for r in results if r.ok)
        self._log.info(
            "fetch_all_complete",
            duration_ms=round((time.perf_counter_ns() - start_time_ns) / 1_000_000, 2),
            sources_succeeded=succeeded,
            sources_failed=len(results) - succeeded,
        )
        return results

    def _run_source(self, ctx: FetchContext, source: ContentSource) -> FetchResult:
        """Fetch a single source, converting any failure into data.

        Args:
            ctx: Shared run context.
            source: Source to fetch.

        Returns:
            FetchResult for the source.
        """
        name = source.name()
        log = self._log.bind(source=name)
        log.info("source_started")
        start_time_ns = time.perf_counter_ns()

        try:
            data = source.fetch(ctx)
            result = FetchResult(name=name, data=data)
        except Exception as e:  # noqa: BLE001
            result = FetchResult(name=name, error=ErrorRecord.from_exception(e, name))

        duration_ms = (time.perf_counter_ns() - start_time_ns) / 1_000_000
        self._metrics.record_duration(name, duration_ms)

        if result.error:
            self._metrics.record_failure(name, result.error.error_class)
            log.warning(
                "source_failed",
                error_class=result.error.error_class.value,
                error=result.error.message,
                duration_ms=round(duration_ms, 2),
            )
        else:
            log.info("source_complete", duration_ms=round(duration_ms, 2))

        return result

    def _to_result(
        self,
        source: ContentSource,
        outcome: TaskOutcome[FetchResult],
    ) -> FetchResult:
        if outcome.value is not None:
            return outcome.value

        # Only reached for tasks that never finished before the deadline
        name = source.name()
        error = ErrorRecord.from_exception(
            outcome.error or RuntimeError("source produced no result"), name
        )
        self._metrics.record_failure(name, error.error_class)
        self._log.warning(
            "source_failed",
            source=name,
            error_class=error.error_class.value,
            error=error.message,
        )
        return FetchResult(name=name, error=error)
