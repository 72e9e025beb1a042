"""Hacker News front page source (Algolia search API)."""

from pydantic import ValidationError

from burrow.context import FetchContext
from burrow.fetch.client import HttpFetcher
from burrow.sources.base import check_response, decode_json
from burrow.sources.errors import SourceError, SourceErrorClass
from burrow.sources.models import HackerNewsFeed, HNPost


HN_SEARCH_URL = "https://hn.algolia.com/api/v1/search"
HN_HITS_PER_PAGE = 30
HN_TOP_N = 5


class HackerNewsSource:
    """Top front-page stories by points."""

    def __init__(
        self,
        http: HttpFetcher,
        base_url: str = HN_SEARCH_URL,
        top_n: int = HN_TOP_N,
    ) -> None:
        """Initialize the Hacker News source.

        Args:
            http: Shared HTTP fetcher.
            base_url: Algolia search endpoint.
            top_n: Number of stories to keep.
        """
        self._http = http
        self._base_url = base_url
        self._top_n = top_n

    def name(self) -> str:
        return "Hacker News"

    def fetch(self, ctx: FetchContext) -> HackerNewsFeed:
        """Fetch front-page stories and keep the highest scored.

        Args:
            ctx: Shared run context.

        Returns:
            HackerNewsFeed sorted by points descending.

        Raises:
            SourceError: On HTTP or decoding failure.
        """
        response = self._http.get(
            ctx,
            source=self.name(),
            url=self._base_url,
            params={"tags": "front_page", "hitsPerPage": HN_HITS_PER_PAGE},
        )
        check_response(response, self.name(), "HN posts")
        body = decode_json(response, self.name(), "HN response")

        try:
            posts = [HNPost.model_validate(hit) for hit in body.get("hits") or []]
        except (AttributeError, ValidationError) as e:
            raise SourceError(
                SourceErrorClass.PARSE,
                f"decoding HN response: {e}",
                source=self.name(),
            ) from e

        posts.sort(key=lambda post: post.points, reverse=True)
        return HackerNewsFeed(posts=posts[: self._top_n])
