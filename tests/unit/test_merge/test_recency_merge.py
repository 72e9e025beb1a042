"""Unit tests for the recency-ranked merge and the window filter."""

from datetime import timedelta

import pytest

from burrow.merge import filter_window, merge_by_recency
from burrow.sources.models import SocialPost
from tests.helpers.time import FIXED_NOW


def _post(username: str, hours_ago: float | None, slug: str | None = None) -> SocialPost:
    """Create a test SocialPost published ``hours_ago`` before FIXED_NOW."""
    slug = slug or f"{username}-{hours_ago}"
    return SocialPost(
        username=username,
        text=f"Post {slug}",
        link=f"https://nitter.example/{username}/status/{slug}",
        pub_date=None if hours_ago is None else FIXED_NOW - timedelta(hours=hours_ago),
    )


class TestFilterWindow:
    """Tests for the trailing window filter."""

    def test_keeps_recent_items(self) -> None:
        """Items younger than the window are kept in order."""
        items = [_post("a", 1), _post("a", 23)]

        assert filter_window(items, FIXED_NOW) == items

    def test_drops_old_items(self) -> None:
        """Items older than the window are dropped."""
        assert filter_window([_post("a", 30)], FIXED_NOW) == []

    def test_boundary_is_exclusive(self) -> None:
        """An item exactly one window old is dropped."""
        assert filter_window([_post("a", 24)], FIXED_NOW) == []

    def test_drops_undated_items(self) -> None:
        """Items without a timestamp are never treated as recent."""
        assert filter_window([_post("a", None)], FIXED_NOW) == []

    def test_custom_window(self) -> None:
        """Window parameter is respected."""
        items = [_post("a", 1), _post("a", 3)]

        assert filter_window(items, FIXED_NOW, timedelta(hours=2)) == items[:1]


class TestRecencyMerge:
    """Tests for the recency-ranked merge."""

    def test_empty_input(self) -> None:
        """No groups produces an empty result."""
        assert merge_by_recency({}, [], now=FIXED_NOW) == []

    def test_sorted_newest_first(self) -> None:
        """Result is ordered by timestamp descending."""
        groups = {"a": [_post("a", 5), _post("a", 1)], "b": [_post("b", 3)]}

        result = merge_by_recency(groups, ["a", "b"], now=FIXED_NOW)

        hours = [round((FIXED_NOW - p.pub_date).total_seconds() / 3600) for p in result]
        assert hours == [1, 3, 5]

    def test_limit_applies_without_floor_inflation(self) -> None:
        """A single busy group yields exactly ``limit`` items."""
        groups = {"a": [_post("a", h) for h in range(1, 10)]}

        assert len(merge_by_recency(groups, ["a"], now=FIXED_NOW, limit=3)) == 3

    def test_old_and_undated_posts_dropped_regardless_of_limit(self) -> None:
        """Out-of-window posts never appear, even with spare capacity."""
        groups = {"a": [_post("a", 2), _post("a", 48), _post("a", None)]}

        result = merge_by_recency(groups, ["a"], now=FIXED_NOW, limit=10)

        assert [p.link for p in result] == [groups["a"][0].link]

    def test_quiet_group_force_inserted(self) -> None:
        """A group outside the top ``limit`` still gets its newest post."""
        groups = {
            "busy": [_post("busy", h) for h in (1, 2, 3)],
            "quiet": [_post("quiet", 20), _post("quiet", 22)],
        }

        result = merge_by_recency(groups, ["busy", "quiet"], now=FIXED_NOW, limit=3)

        assert len(result) == 4
        assert result[-1].username == "quiet"
        assert result[-1].link == groups["quiet"][0].link

    def test_group_with_only_old_posts_not_represented(self) -> None:
        """Coverage only applies to groups with posts inside the window."""
        groups = {"a": [_post("a", 1)], "stale": [_post("stale", 40)]}

        result = merge_by_recency(groups, ["a", "stale"], now=FIXED_NOW)

        assert {p.username for p in result} == {"a"}

    def test_guaranteed_alone_meets_limit(self) -> None:
        """With more groups than limit, each group's newest post is returned."""
        groups = {
            name: [_post(name, hours), _post(name, hours + 0.5)]
            for name, hours in (("a", 4), ("b", 1), ("c", 3))
        }

        result = merge_by_recency(groups, ["a", "b", "c"], now=FIXED_NOW, limit=2)

        assert [p.username for p in result] == ["b", "c", "a"]
        assert all(p.link.endswith(f"-{h}") for p, h in zip(result, (1, 3, 4), strict=True))

    def test_no_duplicate_links(self) -> None:
        """A post shared between two groups is included once."""
        shared = _post("a", 1, "shared")
        groups = {"a": [shared], "b": [shared, _post("b", 2)]}

        result = merge_by_recency(groups, ["a", "b"], now=FIXED_NOW)

        links = [p.link for p in result]
        assert len(links) == len(set(links))
        assert len(result) == 2

    def test_invalid_limit_rejected(self) -> None:
        """A limit below one is a programming error."""
        with pytest.raises(ValueError):
            merge_by_recency({}, [], now=FIXED_NOW, limit=0)


class TestRecencyMergeMissingLink:
    """Tests for feed entries that carried no link."""

    @staticmethod
    def _bare(username: str, hours_ago: float, text: str) -> SocialPost:
        return SocialPost(
            username=username,
            text=text,
            link="",
            pub_date=FIXED_NOW - timedelta(hours=hours_ago),
        )

    def test_linkless_posts_from_two_groups_both_covered(self) -> None:
        """Every account with a link-less post is still represented."""
        groups = {
            "u1": [self._bare("u1", 1, "hello")],
            "u2": [self._bare("u2", 2, "hello")],
        }

        result = merge_by_recency(groups, ["u1", "u2"], now=FIXED_NOW)

        assert [p.username for p in result] == ["u1", "u2"]

    def test_quiet_linkless_group_force_inserted(self) -> None:
        """The coverage pass does not skip a link-less guaranteed post."""
        groups = {
            "busy": [self._bare("busy", h, f"busy {h}") for h in (1, 2, 3)],
            "quiet": [self._bare("quiet", 20, "quiet")],
        }

        result = merge_by_recency(groups, ["busy", "quiet"], now=FIXED_NOW, limit=3)

        assert len(result) == 4
        assert result[-1].username == "quiet"

    def test_distinct_linkless_posts_from_one_account_kept(self) -> None:
        """Separate link-less posts by the same author are not collapsed."""
        groups = {"u1": [self._bare("u1", 1, "first"), self._bare("u1", 2, "second")]}

        result = merge_by_recency(groups, ["u1"], now=FIXED_NOW)

        assert [p.text for p in result] == ["first", "second"]

    def test_fallback_key_combines_author_date_and_text(self) -> None:
        """The link stays the identity whenever it is present."""
        bare = self._bare("u1", 0, "hi")

        assert bare.dedup_key == f"u1|{FIXED_NOW.isoformat()}|hi"
        assert _post("u1", 1, "x").dedup_key == "https://nitter.example/u1/status/x"
