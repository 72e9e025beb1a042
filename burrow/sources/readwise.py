"""Readwise highlight source."""

import random

import structlog

from burrow.context import FetchContext
from burrow.fetch.client import HttpFetcher
from burrow.sources.base import check_response, decode_json, require_setting
from burrow.sources.errors import SourceError, SourceErrorClass
from burrow.sources.models import Highlight, HighlightFeed


logger = structlog.get_logger()

READWISE_HIGHLIGHTS_URL = "https://readwise.io/api/v2/highlights/"
READWISE_PAGE_SIZE = 100


class ReadwiseSource:
    """Picks one random highlight from the most recent page.

    The picked highlight's book title doubles as the topic for header
    image enrichment.
    """

    def __init__(
        self,
        http: HttpFetcher,
        api_token: str,
        rng: random.Random | None = None,
        base_url: str = READWISE_HIGHLIGHTS_URL,
    ) -> None:
        """Initialize the Readwise source.

        Args:
            http: Shared HTTP fetcher.
            api_token: Readwise API token.
            rng: Random generator used to pick the highlight.
            base_url: Highlights endpoint.
        """
        self._http = http
        self._api_token = api_token
        self._rng = rng or random.Random()  # noqa: S311
        self._base_url = base_url

    def name(self) -> str:
        return "Readwise"

    def fetch(self, ctx: FetchContext) -> HighlightFeed:
        """Fetch highlights and pick one.

        Args:
            ctx: Shared run context.

        Returns:
            HighlightFeed with zero or one highlight.

        Raises:
            SourceError: CONFIG without a token, FETCH or PARSE otherwise.
        """
        token = require_setting(
            self._api_token, "Readwise API token not configured", self.name()
        )

        response = self._http.get(
            ctx,
            source=self.name(),
            url=self._base_url,
            params={"page_size": READWISE_PAGE_SIZE},
            headers={"Authorization": f"Token {token}"},
        )
        check_response(response, self.name(), "highlights")
        body = decode_json(response, self.name(), "Readwise response")

        results = body.get("results") if isinstance(body, dict) else None
        if results is None:
            raise SourceError(
                SourceErrorClass.PARSE,
                "decoding Readwise response: missing results",
                source=self.name(),
            )
        if not results:
            logger.info("readwise_empty", component="source", source=self.name())
            return HighlightFeed()

        pick = self._rng.choice(results)
        book = pick.get("book") or {}
        return HighlightFeed(
            highlights=[
                Highlight(
                    text=pick.get("text") or "",
                    book_title=book.get("title") or "",
                    book_author=book.get("author") or "",
                    source_url=book.get("source_url") or "",
                )
            ]
        )
