"""Concurrent aggregation of content sources.

Every source runs in its own pool thread; one barrier joins them all and
results come back in registration order regardless of completion order.
The same fan-out primitive is reused by sources that span several
sub-groups (one task per subreddit or feed author).
"""

from burrow.aggregator.fanout import TaskOutcome, fan_out
from burrow.aggregator.metrics import AggregatorMetrics
from burrow.aggregator.runner import Aggregator


__all__ = [
    "Aggregator",
    "AggregatorMetrics",
    "TaskOutcome",
    "fan_out",
]
