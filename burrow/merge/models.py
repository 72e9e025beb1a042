"""Item protocol and input shapes for the merges."""

from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Protocol, TypeVar, runtime_checkable


@runtime_checkable
class RankedItem(Protocol):
    """An item that can take part in a guaranteed-coverage merge.

    Attributes:
        group_key: Sub-source the item came from (subreddit, feed author).
        rank_value: Scalar the merge orders by, higher first.
        dedup_key: Identity of the item within one merge pass.
        timestamp: Publication time, if known.
    """

    @property
    def group_key(self) -> str: ...

    @property
    def rank_value(self) -> float: ...

    @property
    def dedup_key(self) -> str: ...

    @property
    def timestamp(self) -> datetime | None: ...


T = TypeVar("T", bound=RankedItem)

# Group key -> items in the group's own ranking. Always paired with an
# explicit group order; mapping iteration order is never used.
GroupedItems = Mapping[str, Sequence[T]]
