"""Run-scoped fetch context with a shared deadline.

A single FetchContext is created at the top of a digest run and handed to
every concurrent fetch. It carries:

- an optional deadline on the monotonic clock
- a cancellation flag shared by all threads holding the context
- the run clock (``now``) so every time-window decision in a run agrees
"""

import threading
import time
from dataclasses import dataclass, field
from datetime import UTC, datetime


class DeadlineExceededError(Exception):
    """Raised when work is attempted after the run deadline or cancellation."""

    def __init__(self, message: str = "context deadline exceeded") -> None:
        """Initialize the error.

        Args:
            message: Human-readable error message.
        """
        super().__init__(message)
        self.message = message


@dataclass(frozen=True)
class FetchContext:
    """Shared deadline, cancellation flag, and run clock.

    Attributes:
        now: Timezone-aware run timestamp.
        deadline: Absolute deadline on the ``time.monotonic`` clock, or None.
    """

    now: datetime
    deadline: float | None = None
    _cancelled: threading.Event = field(
        default_factory=threading.Event, repr=False, compare=False
    )

    @classmethod
    def background(cls, now: datetime | None = None) -> "FetchContext":
        """Create a context without a deadline.

        Args:
            now: Run timestamp (defaults to current UTC time).

        Returns:
            FetchContext that only ends when cancelled.
        """
        return cls(now=now or datetime.now(UTC))

    @classmethod
    def with_timeout(
        cls,
        seconds: float,
        now: datetime | None = None,
    ) -> "FetchContext":
        """Create a context whose deadline fires after ``seconds``.

        Args:
            seconds: Time budget for the whole run.
            now: Run timestamp (defaults to current UTC time).

        Returns:
            FetchContext with a deadline.
        """
        return cls(
            now=now or datetime.now(UTC),
            deadline=time.monotonic() + seconds,
        )

    def remaining(self) -> float | None:
        """Get seconds left before the deadline.

        Returns:
            Seconds remaining (never negative), 0.0 once cancelled,
            or None when the context has no deadline.
        """
        if self._cancelled.is_set():
            return 0.0
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    @property
    def expired(self) -> bool:
        """Check whether the deadline has passed."""
        return self.deadline is not None and time.monotonic() >= self.deadline

    @property
    def cancelled(self) -> bool:
        """Check whether the context was cancelled or has expired."""
        return self._cancelled.is_set() or self.expired

    def cancel(self) -> None:
        """Cancel the context for every holder."""
        self._cancelled.set()

    def check(self) -> None:
        """Raise if the context can no longer be used.

        Raises:
            DeadlineExceededError: If cancelled or past the deadline.
        """
        if self._cancelled.is_set():
            raise DeadlineExceededError("context cancelled")
        if self.expired:
            raise DeadlineExceededError()
