"""Unsplash header image source."""

import structlog

from burrow.context import FetchContext
from burrow.fetch.client import HttpFetcher
from burrow.sources.base import check_response, decode_json, require_setting
from burrow.sources.errors import SourceError, SourceErrorClass
from burrow.sources.models import UnsplashImage


logger = structlog.get_logger()

UNSPLASH_RANDOM_URL = "https://api.unsplash.com/photos/random"
UNSPLASH_UTM_SUFFIX = "?utm_source=burrow&utm_medium=referral"
DEFAULT_FALLBACK_QUERY = "nature"


class UnsplashSource:
    """Random landscape photo for a search query.

    The source itself is stateless. ``fetch`` uses the fallback query;
    the enrichment stage calls ``fetch_query`` with a topic first.
    """

    def __init__(
        self,
        http: HttpFetcher,
        access_key: str,
        fallback_query: str = DEFAULT_FALLBACK_QUERY,
        base_url: str = UNSPLASH_RANDOM_URL,
    ) -> None:
        """Initialize the Unsplash source.

        Args:
            http: Shared HTTP fetcher.
            access_key: Unsplash API access key.
            fallback_query: Query used when no topic is available.
            base_url: Random photo endpoint.
        """
        self._http = http
        self._access_key = access_key
        self._fallback_query = fallback_query or DEFAULT_FALLBACK_QUERY
        self._base_url = base_url

    def name(self) -> str:
        return "Unsplash"

    @property
    def fallback_query(self) -> str:
        """Get the static fallback query."""
        return self._fallback_query

    def fetch(self, ctx: FetchContext) -> UnsplashImage:
        """Fetch a photo for the fallback query."""
        return self.fetch_query(ctx, self._fallback_query)

    def fetch_query(self, ctx: FetchContext, query: str) -> UnsplashImage:
        """Fetch a random photo matching a query.

        Args:
            ctx: Shared run context.
            query: Search query.

        Returns:
            UnsplashImage with attribution.

        Raises:
            SourceError: CONFIG without an access key, FETCH or PARSE otherwise.
        """
        key = require_setting(
            self._access_key, "Unsplash access key not configured", self.name()
        )

        response = self._http.get(
            ctx,
            source=self.name(),
            url=self._base_url,
            params={
                "query": query,
                "orientation": "landscape",
                "content_filter": "high",
            },
            headers={"Authorization": f"Client-ID {key}"},
        )
        check_response(response, self.name(), f"photo for {query!r}")
        body = decode_json(response, self.name(), "Unsplash response")

        try:
            user = body.get("user") or {}
            image = UnsplashImage(
                url=(body.get("urls") or {})["regular"],
                alt_description=body.get("alt_description") or "",
                photographer_name=user.get("name") or "",
                photographer_url=((user.get("links") or {}).get("html") or "")
                + UNSPLASH_UTM_SUFFIX,
                query=query,
            )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise SourceError(
                SourceErrorClass.PARSE,
                f"decoding Unsplash response: {e}",
                source=self.name(),
            ) from e

        logger.debug("unsplash_photo", component="source", query=query)
        return image
