"""Data models for the digest renderer."""

from dataclasses import dataclass
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from burrow.sources.base import FetchResult
from burrow.sources.models import UnsplashImage, WeatherReport


class RenderedDigest(BaseModel):
    """HTML and plain-text bodies of one digest."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    html: str
    text: str


@dataclass(frozen=True)
class SectionView:
    """One body section of the digest.

    Attributes:
        index: Position among body sections, starting at 0. Drives the
            alternating layout.
        result: The source result shown in this section.
    """

    index: int
    result: FetchResult

    @property
    def name(self) -> str:
        return self.result.name

    @property
    def kind(self) -> str | None:
        """Payload kind, or None for an error result."""
        return self.result.data.kind if self.result.data is not None else None


@dataclass(frozen=True)
class DigestView:
    """Everything the templates need for one render.

    Attributes:
        date: Long-form run date, e.g. ``Monday, January 2, 2006``.
        edition: Edition number shown in the header.
        now: Reference time for relative timestamps.
        weather: Header weather, if fetched successfully.
        weather_error: Error message when the weather fetch failed.
        header_image: Header photo, if fetched successfully.
        inline_header_image: Whether a static header image is attached.
        sections: Body sections in result order.
    """

    date: str
    edition: int
    now: datetime
    weather: WeatherReport | None
    weather_error: str | None
    header_image: UnsplashImage | None
    inline_header_image: bool
    sections: tuple[SectionView, ...]
