"""Payload models produced by content sources.

Each source returns exactly one payload type. The payloads form a tagged
union on ``kind`` (``SourcePayload``) so that only the renderer and the
enrichment stage need to know which source produced what; the aggregator
and the merges pass payloads through untouched.
"""

from datetime import datetime
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


REDDIT_BASE_URL = "https://www.reddit.com"
HN_ITEM_URL = "https://news.ycombinator.com/item?id={object_id}"


class RedditPost(BaseModel):
    """A post from a subreddit's top listing."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    title: str = ""
    score: int = 0
    num_comments: int = 0
    permalink: str = ""
    url: str = ""
    author: str = ""
    selftext: str = ""
    subreddit: str = ""

    @field_validator("score", "num_comments", mode="before")
    @classmethod
    def _null_count(cls, v: object) -> object:
        return 0 if v is None else v

    @field_validator(
        "title", "permalink", "url", "author", "selftext", "subreddit", mode="before"
    )
    @classmethod
    def _null_text(cls, v: object) -> object:
        return "" if v is None else v

    @property
    def full_permalink(self) -> str:
        """Absolute URL of the post's comment page."""
        return REDDIT_BASE_URL + self.permalink

    @property
    def group_key(self) -> str:
        return self.subreddit

    @property
    def rank_value(self) -> float:
        return float(self.score)

    @property
    def dedup_key(self) -> str:
        # Listings occasionally omit permalink; an empty key would merge
        # unrelated posts into one identity
        if self.permalink:
            return self.permalink
        return f"{self.subreddit}|{self.title}|{self.author}|{self.url}"

    @property
    def timestamp(self) -> datetime | None:
        return None


class HNPost(BaseModel):
    """A Hacker News front-page story."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    title: str = ""
    url: str | None = None
    points: int = 0
    num_comments: int = 0
    object_id: str = Field(default="", alias="objectID")
    author: str = ""
    story_text: str | None = None

    @field_validator("points", "num_comments", mode="before")
    @classmethod
    def _null_count(cls, v: object) -> object:
        # Algolia reports null counts for some front-page items
        return 0 if v is None else v

    @field_validator("title", "object_id", "author", mode="before")
    @classmethod
    def _null_text(cls, v: object) -> object:
        return "" if v is None else v

    @property
    def comments_url(self) -> str:
        """Hacker News discussion URL."""
        return HN_ITEM_URL.format(object_id=self.object_id)


class Highlight(BaseModel):
    """A saved reading highlight."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    text: str
    book_title: str = ""
    book_author: str = ""
    source_url: str = ""


class SocialPost(BaseModel):
    """A normalized social-feed post.

    ``pub_date`` is None when the feed date could not be parsed; such
    posts never pass the recency window.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    username: str
    text: str
    link: str
    pub_date: datetime | None = None
    images: list[str] = Field(default_factory=list)
    avatar_url: str = ""
    is_retweet: bool = False
    is_reply: bool = False

    @property
    def group_key(self) -> str:
        return self.username

    @property
    def rank_value(self) -> float:
        return self.pub_date.timestamp() if self.pub_date else 0.0

    @property
    def dedup_key(self) -> str:
        if self.link:
            return self.link
        published = self.pub_date.isoformat() if self.pub_date else ""
        return f"{self.username}|{published}|{self.text}"

    @property
    def timestamp(self) -> datetime | None:
        return self.pub_date


class WeatherReport(BaseModel):
    """Today's forecast snapshot for one location."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["weather"] = "weather"
    temperature: float = 0.0
    high_temp: float = 0.0
    low_temp: float = 0.0
    precipitation: float = 0.0
    weather_code: int = 0
    description: str = ""
    location: str = ""


class HighlightFeed(BaseModel):
    """Zero or one randomly chosen highlight."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["readwise"] = "readwise"
    highlights: list[Highlight] = Field(default_factory=list)


class HackerNewsFeed(BaseModel):
    """Top Hacker News stories by points."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["hackernews"] = "hackernews"
    posts: list[HNPost] = Field(default_factory=list)


class RedditFeed(BaseModel):
    """Guaranteed-coverage merge of several subreddits."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["reddit"] = "reddit"
    posts: list[RedditPost] = Field(default_factory=list)


class SocialFeed(BaseModel):
    """Recency-ranked merge of several social-feed authors."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["nitter"] = "nitter"
    posts: list[SocialPost] = Field(default_factory=list)


class UnsplashImage(BaseModel):
    """A header photo and its attribution."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["unsplash"] = "unsplash"
    url: str
    alt_description: str = ""
    photographer_name: str = ""
    photographer_url: str = ""
    query: str = ""


SourcePayload = Annotated[
    WeatherReport
    | HighlightFeed
    | HackerNewsFeed
    | RedditFeed
    | SocialFeed
    | UnsplashImage,
    Field(discriminator="kind"),
]
