"""Guaranteed-coverage merges over grouped, ranked items.

Both merges turn per-group item lists into a single list that

1. contains at least one item from every non-empty group, and
2. fills the remaining capacity with the globally best remaining items.

The score-ranked variant sizes its output as ``max(non-empty groups, floor)``.
The recency-ranked variant first drops everything outside a trailing time
window and sizes its output by an explicit limit, which the coverage pass
may exceed.

Both functions are pure and deterministic: groups are visited in the
explicit ``order`` given by the caller, and Python's stable sort keeps
equal-rank items in visiting order.
"""

from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta

import structlog

from burrow.merge.constants import DEFAULT_RECENCY_LIMIT, RECENCY_WINDOW, SCORE_FLOOR
from burrow.merge.models import GroupedItems, T


logger = structlog.get_logger()


def _unique(order: Iterable[str]) -> list[str]:
    """Drop repeated group keys, keeping first occurrence."""
    return list(dict.fromkeys(order))


def _by_recency(items: Iterable[T]) -> list[T]:
    """Sort by timestamp descending, stable for ties."""
    return sorted(items, key=lambda item: -_epoch(item))


def _epoch(item: T) -> float:
    return item.timestamp.timestamp() if item.timestamp else 0.0


def merge_by_score(
    groups: GroupedItems[T],
    order: Sequence[str],
    floor: int = SCORE_FLOOR,
) -> list[T]:
    """Merge groups by score, guaranteeing one item per non-empty group.

    Each group contributes its own best item (the first in its list)
    unconditionally. All other items are pooled, sorted by rank value,
    and used to fill the result up to ``max(non-empty groups, floor)``.

    Args:
        groups: Items per group, each list in the group's native ranking.
        order: Group visiting order; keys missing from ``groups`` count as
            empty groups, keys missing from ``order`` are ignored.
        floor: Minimum target size.

    Returns:
        Merged items sorted by rank value descending, no dedup key twice.

    Raises:
        ValueError: If floor is negative.
    """
    if floor < 0:
        msg = f"floor must be >= 0, got {floor}"
        raise ValueError(msg)

    keys = [key for key in _unique(order) if groups.get(key)]
    target = max(len(keys), floor)
    used: set[str] = set()

    # Entries carry (group index, position) so equal ranks fall back to
    # input order across both pools
    guaranteed: list[tuple[int, int, T]] = []
    for index, key in enumerate(keys):
        # Best item of the group not already claimed by an earlier group
        for position, item in enumerate(groups[key]):
            if item.dedup_key not in used:
                used.add(item.dedup_key)
                guaranteed.append((index, position, item))
                break

    remaining: list[tuple[int, int, T]] = []
    for index, key in enumerate(keys):
        for position, item in enumerate(groups[key]):
            if item.dedup_key not in used:
                used.add(item.dedup_key)
                remaining.append((index, position, item))

    if len(guaranteed) >= target:
        entries = guaranteed
    else:
        remaining.sort(key=lambda entry: -entry[2].rank_value)
        entries = guaranteed + remaining[: target - len(guaranteed)]

    logger.debug(
        "score_merge_complete",
        group_count=len(keys),
        target=target,
        guaranteed_count=len(guaranteed),
        output_count=len(entries),
    )
    entries.sort(key=lambda entry: (-entry[2].rank_value, entry[0], entry[1]))
    return [item for _, _, item in entries]


def filter_window(
    items: Iterable[T],
    now: datetime,
    window: timedelta = RECENCY_WINDOW,
) -> list[T]:
    """Keep only items younger than the window.

    Items without a timestamp are dropped; they are never treated as new.

    Args:
        items: Items to filter.
        now: Reference time (timezone-aware).
        window: Maximum age, exclusive.

    Returns:
        Items in their original order whose age is below the window.
    """
    return [
        item
        for item in items
        if item.timestamp is not None and now - item.timestamp < window
    ]


def merge_by_recency(
    groups: GroupedItems[T],
    order: Sequence[str],
    *,
    now: datetime,
    window: timedelta = RECENCY_WINDOW,
    limit: int = DEFAULT_RECENCY_LIMIT,
) -> list[T]:
    """Merge groups by recency within a trailing window.

    Out-of-window and undated items are dropped before anything else. The
    most recent item of each group is its guaranteed item. When the
    guaranteed items alone reach ``limit`` they are the result. Otherwise
    the ``limit`` most recent items overall are taken, and every group not
    represented among them gets its guaranteed item appended, so the
    result may exceed ``limit``.

    Args:
        groups: Items per group.
        order: Group visiting order.
        now: Reference time for the window (timezone-aware).
        window: Maximum item age, exclusive.
        limit: Target result size.

    Returns:
        Merged items sorted newest first, no dedup key twice.

    Raises:
        ValueError: If limit is below 1.
    """
    if limit < 1:
        msg = f"limit must be >= 1, got {limit}"
        raise ValueError(msg)

    keys = _unique(order)
    pool: list[tuple[str, T]] = [
        (key, item)
        for key in keys
        for item in filter_window(groups.get(key, ()), now, window)
    ]
    pool.sort(key=lambda entry: -_epoch(entry[1]))

    newest: dict[str, T] = {}
    for key, item in pool:
        newest.setdefault(key, item)
    guaranteed = [newest[key] for key in keys if key in newest]

    if len(guaranteed) >= limit:
        logger.debug(
            "recency_merge_complete",
            pool_count=len(pool),
            guaranteed_count=len(guaranteed),
            output_count=len(guaranteed),
        )
        return _by_recency(guaranteed)

    result: list[T] = []
    seen: set[str] = set()
    included: set[str] = set()
    for key, item in pool:
        if len(result) >= limit:
            break
        if item.dedup_key in seen:
            continue
        seen.add(item.dedup_key)
        included.add(key)
        result.append(item)

    for key in keys:
        if key in newest and key not in included:
            item = newest[key]
            if item.dedup_key not in seen:
                seen.add(item.dedup_key)
                result.append(item)
            included.add(key)

    logger.debug(
        "recency_merge_complete",
        pool_count=len(pool),
        guaranteed_count=len(guaranteed),
        output_count=len(result),
    )
    return _by_recency(result)
