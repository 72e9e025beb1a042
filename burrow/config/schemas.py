"""Configuration schema for config.yaml."""

from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from burrow.config.constants import DEFAULT_UNSPLASH_QUERY
from burrow.merge.constants import DEFAULT_RECENCY_LIMIT


class SourceType(str, Enum):
    """Supported content source types."""

    WEATHER = "weather"
    READWISE = "readwise"
    HACKERNEWS = "hackernews"
    REDDIT = "reddit"
    NITTER = "nitter"
    UNSPLASH = "unsplash"


class EmailConfig(BaseModel):
    """Delivery settings.

    Attributes:
        from_address: Sender address (``from`` in YAML).
        to: Recipient for regular runs.
        test_to: Recipient for test runs.
        resend_api_key: Resend API key, usually ``${RESEND_API_KEY}``.
        header_image: Optional path to an inline header image.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    from_address: str = Field(default="", alias="from")
    to: str = ""
    test_to: str = ""
    resend_api_key: str = ""
    header_image: str | None = None


class SourceConfig(BaseModel):
    """Configuration for a single content source.

    Only the fields relevant to ``type`` are used. Reddit accepts either
    ``subreddit`` (one name or a list) or ``subreddits``; both end up in
    ``subreddits``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: SourceType

    # weather
    latitude: float | None = None
    longitude: float | None = None
    name: str = ""

    # readwise, unsplash
    api_token: str = ""

    # reddit
    subreddits: list[str] = Field(default_factory=list)

    # nitter
    nitter_instance: str = ""
    usernames: list[str] = Field(default_factory=list)
    limit: Annotated[int, Field(ge=0)] = DEFAULT_RECENCY_LIMIT

    # unsplash
    query: str = ""

    @model_validator(mode="before")
    @classmethod
    def normalize_fields(cls, data: Any) -> Any:  # noqa: ANN401
        """Fold the single-subreddit form into ``subreddits``."""
        if not isinstance(data, dict):
            return data

        data = dict(data)
        names: list[str] = []
        for key in ("subreddit", "subreddits"):
            value = data.pop(key, None)
            if isinstance(value, str):
                names.append(value)
            elif isinstance(value, list):
                names.extend(str(v) for v in value)
            elif value is not None:
                msg = f"{key} must be a string or a list of strings"
                raise ValueError(msg)
        if names:
            data["subreddits"] = [n.strip() for n in names if n and n.strip()]

        if data.get("type") == SourceType.UNSPLASH.value and not data.get("query"):
            data["query"] = DEFAULT_UNSPLASH_QUERY
        return data

    @model_validator(mode="after")
    def validate_required_fields(self) -> "SourceConfig":
        """Check the fields each source type needs."""
        if self.type == SourceType.WEATHER and (
            self.latitude is None or self.longitude is None
        ):
            msg = "weather source requires latitude and longitude"
            raise ValueError(msg)
        if self.type == SourceType.REDDIT and not self.subreddits:
            msg = "reddit source requires at least one subreddit"
            raise ValueError(msg)
        if self.type == SourceType.NITTER:
            if not self.nitter_instance:
                msg = "nitter source requires nitter_instance"
                raise ValueError(msg)
            if not self.usernames:
                msg = "nitter source requires at least one username"
                raise ValueError(msg)
        return self


class BurrowConfig(BaseModel):
    """Root configuration.

    Attributes:
        schedule: Cron expression, informational (scheduling is external).
        edition: Number of the last digest sent.
        email: Delivery settings.
        sources: Sources in display order.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    schedule: str = ""
    edition: Annotated[int, Field(ge=0)] = 0
    email: EmailConfig = Field(default_factory=EmailConfig)
    sources: list[SourceConfig] = Field(default_factory=list)

    def sources_of_type(self, source_type: SourceType) -> list[SourceConfig]:
        """Get all configured sources of one type, in order."""
        return [s for s in self.sources if s.type == source_type]
