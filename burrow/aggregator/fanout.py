"""Fan-out/fan-in over a thread pool with index-aligned results."""

from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Generic, TypeVar

import structlog

from burrow.context import DeadlineExceededError, FetchContext


logger = structlog.get_logger()

K = TypeVar("K")
R = TypeVar("R")


@dataclass(frozen=True)
class TaskOutcome(Generic[R]):
    """Value or error produced by one fan-out task."""

    value: R | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        """Check if the task completed without error."""
        return self.error is None


def fan_out(
    ctx: FetchContext,
    keys: Sequence[K],
    worker: Callable[[FetchContext, K], R],
    max_workers: int | None = None,
    thread_name_prefix: str = "burrow",
) -> list[TaskOutcome[R]]:
    """Run ``worker(ctx, key)`` for every key concurrently and wait for all.

    Outcome slot ``i`` always belongs to ``keys[i]``; completion order never
    affects the output. A worker's exception is captured in its own slot
    and does not affect siblings.

    The barrier waits until every task has finished or the context's
    deadline fires. On deadline the context is cancelled so running
    workers can stop cooperatively, queued tasks are dropped, and every
    unfinished slot receives a DeadlineExceededError.

    Args:
        ctx: Shared run context.
        keys: Task inputs, one task per key.
        worker: Callable run in a pool thread.
        max_workers: Pool size (defaults to one thread per key).
        thread_name_prefix: Prefix for pool thread names.

    Returns:
        One TaskOutcome per key, in key order.
    """
    if not keys:
        return []

    executor = ThreadPoolExecutor(
        max_workers=max_workers or len(keys),
        thread_name_prefix=thread_name_prefix,
    )
    futures: list[Future[R]] = []
    try:
        futures = [executor.submit(worker, ctx, key) for key in keys]
        _done, not_done = wait(futures, timeout=ctx.remaining())
    finally:
        # Never block on stragglers; they hold the cancelled context.
        executor.shutdown(wait=False, cancel_futures=True)

    if not_done:
        ctx.cancel()
        logger.warning(
            "fan_out_deadline_exceeded",
            pending=len(not_done),
            total=len(futures),
        )

    outcomes: list[TaskOutcome[R]] = []
    for future in futures:
        if future in not_done:
            outcomes.append(TaskOutcome(error=DeadlineExceededError()))
            continue
        error = future.exception()
        if error is not None:
            outcomes.append(TaskOutcome(error=error))
        else:
            outcomes.append(TaskOutcome(value=future.result()))
    return outcomes
