"""Guaranteed-coverage merges for multi-group sources.

Every non-empty group (a subreddit, a feed author) is represented in the
merged list; remaining capacity goes to the globally best items by score
or by recency.
"""

from burrow.merge.constants import DEFAULT_RECENCY_LIMIT, RECENCY_WINDOW, SCORE_FLOOR
from burrow.merge.coverage import filter_window, merge_by_recency, merge_by_score
from burrow.merge.models import GroupedItems, RankedItem


__all__ = [
    "DEFAULT_RECENCY_LIMIT",
    "RECENCY_WINDOW",
    "SCORE_FLOOR",
    "GroupedItems",
    "RankedItem",
    "filter_window",
    "merge_by_recency",
    "merge_by_score",
]
