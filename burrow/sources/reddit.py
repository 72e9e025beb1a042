"""Reddit source: daily top posts merged across subreddits."""

from collections.abc import Sequence

import structlog
from pydantic import ValidationError

from burrow.aggregator.fanout import fan_out
from burrow.context import FetchContext
from burrow.fetch.client import HttpFetcher
from burrow.merge.constants import SCORE_FLOOR
from burrow.merge.coverage import merge_by_score
from burrow.sources.base import check_response, decode_json
from burrow.sources.errors import SourceError, SourceErrorClass
from burrow.sources.models import REDDIT_BASE_URL, RedditFeed, RedditPost


logger = structlog.get_logger()

REDDIT_USER_AGENT = "burrow/1.0 (daily digest)"
REDDIT_TOP_LIMIT = 5


class RedditSource:
    """Top posts of the day from several subreddits.

    Each subreddit is fetched concurrently. The per-subreddit lists are
    merged so every subreddit that returned posts is represented, with
    the remaining slots going to the highest-scored posts overall.
    """

    def __init__(
        self,
        http: HttpFetcher,
        subreddits: Sequence[str],
        base_url: str = REDDIT_BASE_URL,
        floor: int = SCORE_FLOOR,
    ) -> None:
        """Initialize the Reddit source.

        Args:
            http: Shared HTTP fetcher.
            subreddits: Subreddit names, in display-priority order.
            base_url: Reddit site root.
            floor: Minimum merged list size.
        """
        self._http = http
        self._subreddits = tuple(subreddits)
        self._base_url = base_url.rstrip("/")
        self._floor = floor
        self._log = logger.bind(component="source", source=self.name())

    def name(self) -> str:
        return "Reddit"

    def fetch(self, ctx: FetchContext) -> RedditFeed:
        """Fetch every subreddit and merge the results.

        Args:
            ctx: Shared run context.

        Returns:
            RedditFeed with the merged posts.

        Raises:
            BaseException: The first subreddit error in configured order
                when no subreddit succeeded.
        """
        outcomes = fan_out(
            ctx,
            self._subreddits,
            self._fetch_subreddit,
            thread_name_prefix="burrow-reddit",
        )

        by_subreddit: dict[str, list[RedditPost]] = {}
        first_error: BaseException | None = None
        for subreddit, outcome in zip(self._subreddits, outcomes, strict=True):
            if outcome.error is not None:
                first_error = first_error or outcome.error
                self._log.warning(
                    "subreddit_failed", subreddit=subreddit, error=str(outcome.error)
                )
                continue
            by_subreddit[subreddit] = outcome.value or []

        if not by_subreddit:
            if first_error is not None:
                raise first_error
            return RedditFeed()

        posts = merge_by_score(by_subreddit, self._subreddits, floor=self._floor)
        self._log.info(
            "reddit_merged",
            subreddits_ok=len(by_subreddit),
            subreddits_failed=len(self._subreddits) - len(by_subreddit),
            posts=len(posts),
        )
        return RedditFeed(posts=posts)

    def _fetch_subreddit(self, ctx: FetchContext, subreddit: str) -> list[RedditPost]:
        """Fetch one subreddit's daily top listing.

        Args:
            ctx: Shared run context.
            subreddit: Subreddit name.

        Returns:
            Posts in Reddit's own ranking.

        Raises:
            SourceError: On HTTP or decoding failure.
        """
        ctx.check()
        what = f"r/{subreddit}"
        response = self._http.get(
            ctx,
            source=self.name(),
            url=f"{self._base_url}/r/{subreddit}/top/.json",
            params={"t": "day", "limit": REDDIT_TOP_LIMIT},
            headers={"User-Agent": REDDIT_USER_AGENT},
        )
        check_response(response, self.name(), what)
        body = decode_json(response, self.name(), f"Reddit response for {what}")

        try:
            children = body["data"]["children"]
            posts = [RedditPost.model_validate(child["data"]) for child in children]
        except (KeyError, TypeError, ValidationError) as e:
            raise SourceError(
                SourceErrorClass.PARSE,
                f"decoding Reddit response for {what}: {e}",
                source=self.name(),
            ) from e

        return [
            post if post.subreddit else post.model_copy(update={"subreddit": subreddit})
            for post in posts
        ]
