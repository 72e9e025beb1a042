"""Digest renderer using Jinja2 templates."""

import time
from collections.abc import Sequence
from datetime import datetime

import structlog
from jinja2 import Environment, PackageLoader, select_autoescape

from burrow.renderer.filters import FILTERS, GLOBALS
from burrow.renderer.models import DigestView, RenderedDigest, SectionView
from burrow.sources.base import FetchResult
from burrow.sources.models import UnsplashImage, WeatherReport


logger = structlog.get_logger()

HTML_TEMPLATE = "digest.html"
TEXT_TEMPLATE = "digest.txt"

# Results shown in the header instead of as body sections
WEATHER_SOURCE = "Weather"
HEADER_IMAGE_SOURCE = "Unsplash"


def format_long_date(value: datetime) -> str:
    """Format a date as ``Monday, January 2, 2006``."""
    return f"{value:%A, %B} {value.day}, {value.year}"


class DigestRenderer:
    """Renders fetch results into the HTML and text digest bodies.

    Templates are loaded from burrow/renderer/templates/ with auto-escaping
    enabled for HTML, so source content can never inject markup.
    """

    def __init__(self, env: Environment | None = None) -> None:
        """Initialize the renderer.

        Args:
            env: Jinja2 environment (defaults to the packaged templates).
        """
        self._env = env or Environment(
            loader=PackageLoader("burrow.renderer", "templates"),
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self._env.filters.update(FILTERS)
        self._env.globals.update(GLOBALS)
        self._log = logger.bind(component="renderer")

    def build_view(
        self,
        results: Sequence[FetchResult],
        edition: int,
        now: datetime,
        inline_header_image: bool = False,
    ) -> DigestView:
        """Split results into header data and numbered body sections.

        Args:
            results: Results in display order.
            edition: Edition number.
            now: Run time.
            inline_header_image: Whether a static header image is attached.

        Returns:
            DigestView for the templates.
        """
        weather: WeatherReport | None = None
        weather_error: str | None = None
        header_image: UnsplashImage | None = None
        sections: list[SectionView] = []

        for result in results:
            if isinstance(result.data, WeatherReport):
                weather = result.data
            elif isinstance(result.data, UnsplashImage):
                header_image = result.data
            elif result.name == WEATHER_SOURCE and result.error:
                weather_error = result.error.message
            elif result.name == HEADER_IMAGE_SOURCE and result.error:
                self._log.info("header_image_unavailable", error=result.error.message)
            else:
                sections.append(SectionView(index=len(sections), result=result))

        return DigestView(
            date=format_long_date(now),
            edition=edition,
            now=now,
            weather=weather,
            weather_error=weather_error,
            header_image=header_image,
            inline_header_image=inline_header_image,
            sections=tuple(sections),
        )

    def render(
        self,
        results: Sequence[FetchResult],
        edition: int,
        now: datetime,
        inline_header_image: bool = False,
    ) -> RenderedDigest:
        """Render both digest bodies.

        Args:
            results: Results in display order.
            edition: Edition number.
            now: Run time.
            inline_header_image: Whether a static header image is attached.

        Returns:
            RenderedDigest with HTML and text bodies.
        """
        start_time = time.perf_counter()
        view = self.build_view(results, edition, now, inline_header_image)

        html = self._env.get_template(HTML_TEMPLATE).render(digest=view)
        text = self._env.get_template(TEXT_TEMPLATE).render(digest=view)

        self._log.info(
            "digest_rendered",
            edition=edition,
            sections=len(view.sections),
            html_bytes=len(html.encode("utf-8")),
            duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
        )
        return RenderedDigest(html=html, text=text)
