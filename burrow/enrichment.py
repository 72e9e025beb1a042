"""Context-chained enrichment: header image chosen from another result.

Runs after the aggregator barrier. The topic is read from an already
collected result (the highlight's book title) and used as the preferred
image query, with the enrichment source's static fallback query as the
second attempt.
"""

from collections.abc import Sequence
from typing import Protocol

import structlog

from burrow.context import FetchContext
from burrow.sources.base import FetchResult
from burrow.sources.errors import ErrorRecord
from burrow.sources.models import HighlightFeed, UnsplashImage


logger = structlog.get_logger()

DEFAULT_TOPIC_SOURCE = "Readwise"


class QueryableSource(Protocol):
    """A source that can be fetched with an explicit query."""

    def name(self) -> str: ...

    @property
    def fallback_query(self) -> str: ...

    def fetch_query(self, ctx: FetchContext, query: str) -> UnsplashImage: ...


def extract_topic(
    results: Sequence[FetchResult],
    source_name: str = DEFAULT_TOPIC_SOURCE,
) -> str | None:
    """Find the enrichment topic in collected results.

    Args:
        results: Results from the parallel phase.
        source_name: Name of the result carrying the topic.

    Returns:
        The first highlight's book title, or None when the source failed,
        returned nothing, or has an empty title.
    """
    for result in results:
        if result.name != source_name or not result.ok:
            continue
        if isinstance(result.data, HighlightFeed) and result.data.highlights:
            title = result.data.highlights[0].book_title.strip()
            return title or None
    return None


def enrich(
    ctx: FetchContext,
    results: Sequence[FetchResult],
    source: QueryableSource,
    topic_source_name: str = DEFAULT_TOPIC_SOURCE,
) -> list[FetchResult]:
    """Append the enrichment source's result.

    Tries the topic query first when there is one, then the fallback
    query. A double failure becomes an error entry; it never raises.

    Args:
        ctx: Shared run context.
        results: Results from the parallel phase (not modified).
        source: Enrichment source.
        topic_source_name: Name of the result the topic is read from.

    Returns:
        A new list: ``results`` plus exactly one entry named after
        ``source``.
    """
    name = source.name()
    log = logger.bind(component="enrichment", source=name)
    topic = extract_topic(results, topic_source_name)

    if topic:
        try:
            image = source.fetch_query(ctx, topic)
        except Exception as e:  # noqa: BLE001
            log.warning("enrichment_topic_failed", topic=topic, error=str(e))
        else:
            log.info("enrichment_complete", query=topic)
            return [*results, FetchResult(name=name, data=image)]
    else:
        log.info("enrichment_no_topic", topic_source=topic_source_name)

    query = source.fallback_query
    try:
        image = source.fetch_query(ctx, query)
    except Exception as e:  # noqa: BLE001
        error = ErrorRecord.from_exception(e, name)
        log.warning(
            "enrichment_failed",
            query=query,
            error_class=error.error_class.value,
            error=error.message,
        )
        return [*results, FetchResult(name=name, error=error)]

    log.info("enrichment_fallback", query=query)
    return [*results, FetchResult(name=name, data=image)]
