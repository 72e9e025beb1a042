"""Unit tests for the fan_out primitive."""

import time

from burrow.aggregator import fan_out
from burrow.context import DeadlineExceededError, FetchContext
from tests.helpers.time import FIXED_NOW


def _echo_after(delays: dict[str, float]):
    def worker(ctx: FetchContext, key: str) -> str:
        time.sleep(delays.get(key, 0.0))
        return key.upper()

    return worker


class TestFanOut:
    """Tests for index-aligned concurrent execution."""

    def test_empty_keys(self) -> None:
        """No keys means no work and no outcomes."""
        assert fan_out(FetchContext.background(FIXED_NOW), [], _echo_after({})) == []

    def test_outcomes_aligned_with_keys(self) -> None:
        """Slot i belongs to key i whatever the completion order."""
        worker = _echo_after({"a": 0.15, "b": 0.05, "c": 0.0})

        outcomes = fan_out(FetchContext.background(FIXED_NOW), ["a", "b", "c"], worker)

        assert [o.value for o in outcomes] == ["A", "B", "C"]
        assert all(o.ok for o in outcomes)

    def test_error_captured_in_own_slot(self) -> None:
        """A raising worker does not affect other slots."""

        def worker(ctx: FetchContext, key: str) -> str:
            if key == "bad":
                msg = "nope"
                raise ValueError(msg)
            return key

        outcomes = fan_out(FetchContext.background(FIXED_NOW), ["ok", "bad"], worker)

        assert outcomes[0].value == "ok"
        assert not outcomes[1].ok
        assert isinstance(outcomes[1].error, ValueError)

    def test_deadline_fills_unfinished_slots(self) -> None:
        """Tasks still running at the deadline get DeadlineExceededError."""

        def worker(ctx: FetchContext, key: str) -> str:
            if key == "stuck":
                while not ctx.cancelled:
                    time.sleep(0.01)
            return key

        ctx = FetchContext.with_timeout(0.1, now=FIXED_NOW)
        outcomes = fan_out(ctx, ["done", "stuck"], worker)

        assert outcomes[0].value == "done"
        assert isinstance(outcomes[1].error, DeadlineExceededError)
        assert ctx.cancelled

    def test_bounded_pool_still_runs_everything(self) -> None:
        """A pool smaller than the key count completes every task."""
        keys = [str(i) for i in range(8)]

        outcomes = fan_out(
            FetchContext.background(FIXED_NOW),
            keys,
            lambda ctx, key: int(key) * 2,
            max_workers=2,
        )

        assert [o.value for o in outcomes] == [i * 2 for i in range(8)]
