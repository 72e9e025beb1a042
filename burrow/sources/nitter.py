"""Opinion source: recent posts from Nitter RSS feeds."""

from collections.abc import Sequence
from datetime import timedelta

import feedparser  # type: ignore[import-untyped]
import structlog

from burrow.aggregator.fanout import fan_out
from burrow.context import FetchContext
from burrow.fetch.client import HttpFetcher
from burrow.merge.constants import DEFAULT_RECENCY_LIMIT, RECENCY_WINDOW
from burrow.merge.coverage import merge_by_recency
from burrow.sources.base import check_response
from burrow.sources.errors import SourceError, SourceErrorClass
from burrow.sources.feed_utils import (
    avatar_url,
    extract_images,
    parse_feed_date,
    strip_attribution,
)
from burrow.sources.models import SocialFeed, SocialPost


logger = structlog.get_logger()

RSS_ACCEPT = "application/rss+xml, application/xml, text/xml"


class NitterSource:
    """Most recent posts across several accounts.

    Only posts from the trailing window are kept. Every account with at
    least one recent post is represented, even when that pushes the
    list past ``limit``.
    """

    def __init__(  # noqa: PLR0913
        self,
        http: HttpFetcher,
        instance: str,
        usernames: Sequence[str],
        limit: int = DEFAULT_RECENCY_LIMIT,
        window: timedelta = RECENCY_WINDOW,
    ) -> None:
        """Initialize the Nitter source.

        Args:
            http: Shared HTTP fetcher.
            instance: Nitter instance base URL.
            usernames: Account handles, in display-priority order.
            limit: Target number of posts (values below 1 use the default).
            window: Maximum post age.
        """
        self._http = http
        self._instance = instance.rstrip("/")
        self._usernames = tuple(usernames)
        self._limit = limit if limit > 0 else DEFAULT_RECENCY_LIMIT
        self._window = window
        self._log = logger.bind(component="source", source=self.name())

    def name(self) -> str:
        return "Opinion"

    @property
    def limit(self) -> int:
        """Get the effective post limit."""
        return self._limit

    def fetch(self, ctx: FetchContext) -> SocialFeed:
        """Fetch every account feed and merge by recency.

        Args:
            ctx: Shared run context; ``ctx.now`` anchors the window.

        Returns:
            SocialFeed, newest first.

        Raises:
            BaseException: The first account error in configured order
                when every account failed.
        """
        outcomes = fan_out(
            ctx,
            self._usernames,
            self._fetch_user,
            thread_name_prefix="burrow-nitter",
        )

        by_user: dict[str, list[SocialPost]] = {}
        first_error: BaseException | None = None
        for username, outcome in zip(self._usernames, outcomes, strict=True):
            if outcome.error is not None:
                first_error = first_error or outcome.error
                self._log.warning(
                    "nitter_user_failed", username=username, error=str(outcome.error)
                )
                continue
            by_user[username] = outcome.value or []

        if not by_user and first_error is not None:
            raise first_error

        posts = merge_by_recency(
            by_user,
            self._usernames,
            now=ctx.now,
            window=self._window,
            limit=self._limit,
        )
        return SocialFeed(posts=posts)

    def _fetch_user(self, ctx: FetchContext, username: str) -> list[SocialPost]:
        """Fetch and normalize one account's RSS feed.

        Args:
            ctx: Shared run context.
            username: Account handle.

        Returns:
            Normalized posts in feed order.

        Raises:
            SourceError: On HTTP or feed parsing failure.
        """
        ctx.check()
        what = f"@{username}"
        response = self._http.get(
            ctx,
            source=self.name(),
            url=f"{self._instance}/{username}/rss",
            headers={"Accept": RSS_ACCEPT},
        )
        check_response(response, self.name(), what)

        feed = feedparser.parse(response.body_bytes)
        if feed.bozo and not feed.entries:
            raise SourceError(
                SourceErrorClass.PARSE,
                f"parsing RSS for {what}: {feed.get('bozo_exception')}",
                source=self.name(),
            )

        return [self._to_post(username, entry) for entry in feed.entries]

    def _to_post(self, username: str, entry: feedparser.FeedParserDict) -> SocialPost:
        text, is_retweet, is_reply = strip_attribution(entry.get("title", ""))
        return SocialPost(
            username=username,
            text=text,
            link=entry.get("link", ""),
            pub_date=parse_feed_date(entry.get("published")),
            images=extract_images(entry.get("description", "")),
            avatar_url=avatar_url(username),
            is_retweet=is_retweet,
            is_reply=is_reply,
        )
