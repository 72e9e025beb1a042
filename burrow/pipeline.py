"""Source registry and the two-phase collection pipeline.

Phase 1 runs every configured source concurrently behind one barrier.
Phase 2 runs the enrichment stage sequentially on phase 1's output.
"""

import random
from dataclasses import dataclass

import structlog

from burrow.aggregator.runner import Aggregator
from burrow.config.schemas import BurrowConfig, SourceConfig, SourceType
from burrow.context import FetchContext
from burrow.enrichment import enrich
from burrow.fetch.client import HttpFetcher
from burrow.sources.base import ContentSource, FetchResult
from burrow.sources.hackernews import HackerNewsSource
from burrow.sources.nitter import NitterSource
from burrow.sources.readwise import ReadwiseSource
from burrow.sources.reddit import RedditSource
from burrow.sources.unsplash import UnsplashSource
from burrow.sources.weather import WeatherSource


logger = structlog.get_logger()


@dataclass(frozen=True)
class SourcePlan:
    """Sources built from config.

    Attributes:
        sources: Parallel-phase sources in display order.
        enrichment: Header image source, run after the barrier.
    """

    sources: tuple[ContentSource, ...]
    enrichment: UnsplashSource | None = None


def _build_source(
    source_config: SourceConfig,
    http: HttpFetcher,
    rng: random.Random | None,
) -> ContentSource:
    source_type = source_config.type
    if source_type == SourceType.WEATHER:
        return WeatherSource(
            http,
            latitude=source_config.latitude or 0.0,
            longitude=source_config.longitude or 0.0,
            location=source_config.name,
        )
    if source_type == SourceType.READWISE:
        return ReadwiseSource(http, api_token=source_config.api_token, rng=rng)
    if source_type == SourceType.HACKERNEWS:
        return HackerNewsSource(http)
    if source_type == SourceType.REDDIT:
        return RedditSource(http, subreddits=source_config.subreddits)
    if source_type == SourceType.NITTER:
        return NitterSource(
            http,
            instance=source_config.nitter_instance,
            usernames=source_config.usernames,
            limit=source_config.limit,
        )
    msg = f"Unknown source type: {source_type!r}"
    raise ValueError(msg)


def build_sources(
    config: BurrowConfig,
    http: HttpFetcher,
    rng: random.Random | None = None,
) -> SourcePlan:
    """Build sources from config.

    Unsplash entries become the enrichment source (the last one wins);
    every other entry becomes a parallel-phase source in config order.

    Args:
        config: Validated configuration.
        http: Shared HTTP fetcher.
        rng: Random generator for sources that pick randomly.

    Returns:
        SourcePlan for ``collect``.
    """
    sources: list[ContentSource] = []
    enrichment: UnsplashSource | None = None

    for source_config in config.sources:
        if source_config.type == SourceType.UNSPLASH:
            enrichment = UnsplashSource(
                http,
                access_key=source_config.api_token,
                fallback_query=source_config.query,
            )
            continue
        sources.append(_build_source(source_config, http, rng))

    logger.info(
        "sources_built",
        component="pipeline",
        sources=[s.name() for s in sources],
        enrichment=enrichment.name() if enrichment else None,
    )
    return SourcePlan(sources=tuple(sources), enrichment=enrichment)


def collect(
    ctx: FetchContext,
    plan: SourcePlan,
    max_workers: int | None = None,
) -> list[FetchResult]:
    """Run the two-phase pipeline.

    Args:
        ctx: Shared run context bounding both phases.
        plan: Sources to run.
        max_workers: Pool size for the parallel phase.

    Returns:
        Results in registration order, followed by the enrichment result
        when an enrichment source is configured.
    """
    results = Aggregator(plan.sources, max_workers=max_workers).fetch_all(ctx)
    if plan.enrichment is None:
        return results
    return enrich(ctx, results, plan.enrichment)
