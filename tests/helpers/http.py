"""HTTP helpers built on httpx.MockTransport."""

from collections.abc import Callable

import httpx

from burrow.fetch.client import HttpFetcher
from burrow.fetch.config import FetchConfig


Handler = Callable[[httpx.Request], httpx.Response]


def make_fetcher(handler: Handler, config: FetchConfig | None = None) -> HttpFetcher:
    """Create an HttpFetcher whose requests are answered by ``handler``."""
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return HttpFetcher(config=config, client=client)


def routes(table: dict[str, httpx.Response]) -> Handler:
    """Answer requests by URL path; unknown paths get a 404."""

    def handler(request: httpx.Request) -> httpx.Response:
        return table.get(request.url.path, httpx.Response(404))

    return handler
