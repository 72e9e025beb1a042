"""Unit tests for the concurrent Aggregator."""

import time

from burrow.aggregator import Aggregator, AggregatorMetrics
from burrow.context import FetchContext
from burrow.sources.errors import SourceErrorClass
from tests.helpers.sources import BlockingSource, StubSource, fetch_error, highlight_feed
from tests.helpers.time import FIXED_NOW


class TestAggregatorOrdering:
    """Results follow registration order, never completion order."""

    def setup_method(self) -> None:
        AggregatorMetrics.reset()

    def test_order_independent_of_latency(self) -> None:
        """The slowest source registered first still comes back first."""
        sources = [
            StubSource("slow", highlight_feed("slow"), delay=0.2),
            StubSource("medium", highlight_feed("medium"), delay=0.1),
            StubSource("fast", highlight_feed("fast")),
        ]

        results = Aggregator(sources).fetch_all(FetchContext.background(FIXED_NOW))

        assert [r.name for r in results] == ["slow", "medium", "fast"]
        assert [r.data.highlights[0].book_title for r in results] == [
            "slow",
            "medium",
            "fast",
        ]

    def test_one_result_per_source(self) -> None:
        """Every source produces exactly one result."""
        sources = [StubSource(f"s{i}") for i in range(6)]

        results = Aggregator(sources).fetch_all(FetchContext.background(FIXED_NOW))

        assert len(results) == 6
        assert all(s.calls == 1 for s in sources)

    def test_empty_registry(self) -> None:
        """No sources produces no results."""
        assert Aggregator([]).fetch_all(FetchContext.background(FIXED_NOW)) == []

    def test_sources_run_concurrently(self) -> None:
        """Total wall time tracks the slowest source, not the sum."""
        sources = [StubSource(f"s{i}", delay=0.2) for i in range(5)]

        start = time.monotonic()
        Aggregator(sources).fetch_all(FetchContext.background(FIXED_NOW))

        assert time.monotonic() - start < 0.8


class TestAggregatorFailureIsolation:
    """A failing source never affects its siblings."""

    def setup_method(self) -> None:
        AggregatorMetrics.reset()

    def test_middle_failure_isolated(self) -> None:
        """Siblings of a failing source still return their data."""
        sources = [
            StubSource("first", highlight_feed("first")),
            StubSource("broken", error=fetch_error("upstream down")),
            StubSource("last", highlight_feed("last")),
        ]

        results = Aggregator(sources).fetch_all(FetchContext.background(FIXED_NOW))

        assert [r.ok for r in results] == [True, False, True]
        assert results[1].data is None
        assert results[1].error.message == "upstream down"
        assert results[1].error.error_class == SourceErrorClass.FETCH
        assert results[1].error.source == "broken"

    def test_unexpected_exception_classified_unknown(self) -> None:
        """Non-source exceptions become UNKNOWN error records."""
        sources = [StubSource("buggy", error=KeyError("missing"))]

        results = Aggregator(sources).fetch_all(FetchContext.background(FIXED_NOW))

        assert results[0].error.error_class == SourceErrorClass.UNKNOWN
        assert "missing" in results[0].error.message

    def test_all_failing(self) -> None:
        """Every source failing still yields a full result list."""
        sources = [StubSource(f"s{i}", error=fetch_error()) for i in range(3)]

        results = Aggregator(sources).fetch_all(FetchContext.background(FIXED_NOW))

        assert len(results) == 3
        assert not any(r.ok for r in results)

    def test_failures_recorded_in_metrics(self) -> None:
        """Failures are counted per source and error class."""
        sources = [
            StubSource("ok"),
            StubSource("broken", error=fetch_error()),
        ]

        Aggregator(sources).fetch_all(FetchContext.background(FIXED_NOW))

        metrics = AggregatorMetrics.get_instance()
        assert metrics.get_failures_total() == 1
        assert metrics.get_failures_total("broken") == 1
        assert metrics.get_failures_total("ok") == 0
        assert metrics.get_duration("ok") is not None


class TestAggregatorDeadline:
    """The shared deadline bounds the whole fetch."""

    def setup_method(self) -> None:
        AggregatorMetrics.reset()

    def test_blocked_source_reported_as_deadline(self) -> None:
        """A source that never finishes gets a DEADLINE error in its slot."""
        blocked = BlockingSource("blocked")
        sources = [StubSource("quick", highlight_feed()), blocked]
        ctx = FetchContext.with_timeout(0.2, now=FIXED_NOW)

        start = time.monotonic()
        results = Aggregator(sources).fetch_all(ctx)
        elapsed = time.monotonic() - start

        assert elapsed < 2.0
        assert results[0].ok
        assert results[1].error.error_class == SourceErrorClass.DEADLINE
        assert results[1].name == "blocked"

    def test_blocked_source_observes_cancellation(self) -> None:
        """After the deadline the blocked worker sees the cancelled context."""
        blocked = BlockingSource("blocked")
        ctx = FetchContext.with_timeout(0.1, now=FIXED_NOW)

        Aggregator([blocked]).fetch_all(ctx)

        assert ctx.cancelled
        assert blocked.finished.wait(timeout=2.0)

    def test_deadline_failure_counted(self) -> None:
        """Deadline failures show up in the metrics."""
        ctx = FetchContext.with_timeout(0.1, now=FIXED_NOW)

        Aggregator([BlockingSource("blocked")]).fetch_all(ctx)

        assert AggregatorMetrics.get_instance().get_failures_total("blocked") == 1
