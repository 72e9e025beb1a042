"""Content sources and their payload models."""

from burrow.sources.base import ContentSource, FetchResult
from burrow.sources.errors import ErrorRecord, SourceError, SourceErrorClass
from burrow.sources.hackernews import HackerNewsSource
from burrow.sources.models import (
    HackerNewsFeed,
    Highlight,
    HighlightFeed,
    HNPost,
    RedditFeed,
    RedditPost,
    SocialFeed,
    SocialPost,
    SourcePayload,
    UnsplashImage,
    WeatherReport,
)
from burrow.sources.nitter import NitterSource
from burrow.sources.readwise import ReadwiseSource
from burrow.sources.reddit import RedditSource
from burrow.sources.unsplash import UnsplashSource
from burrow.sources.weather import WeatherSource


__all__ = [
    "ContentSource",
    "ErrorRecord",
    "FetchResult",
    "HNPost",
    "HackerNewsFeed",
    "HackerNewsSource",
    "Highlight",
    "HighlightFeed",
    "NitterSource",
    "ReadwiseSource",
    "RedditFeed",
    "RedditPost",
    "RedditSource",
    "SocialFeed",
    "SocialPost",
    "SourceError",
    "SourceErrorClass",
    "SourcePayload",
    "UnsplashImage",
    "UnsplashSource",
    "WeatherReport",
    "WeatherSource",
]
