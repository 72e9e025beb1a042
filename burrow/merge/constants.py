"""Constants for the guaranteed-coverage merges."""

from datetime import timedelta


# Minimum result size for the score-ranked merge
SCORE_FLOOR: int = 5

# Only items younger than this survive the recency merge
RECENCY_WINDOW: timedelta = timedelta(hours=24)

# Result size for the recency merge when the caller sets none
DEFAULT_RECENCY_LIMIT: int = 5
