"""Jinja2 filters and helpers for the digest templates."""

import re
from collections.abc import Sequence
from datetime import datetime

import markdown2
from bs4 import BeautifulSoup
from markupsafe import Markup

from burrow.sources.models import RedditPost


EXCERPT_MAX_CHARS = 280
REDDIT_LEAD_WINDOW = 5

_SENTENCE_END_RE = re.compile(r"[.!?] ")

# Upper bounds of WMO code ranges, same ranges as the weather descriptions
_WEATHER_ICONS: tuple[tuple[int, str], ...] = (
    (0, "☀️"),
    (3, "⛅"),
    (48, "🌫️"),
    (57, "🌦️"),
    (67, "🌧️"),
    (77, "❄️"),
    (82, "🌧️"),
    (86, "🌨️"),
    (99, "⛈️"),
)


def weather_icon(code: int) -> str:
    """Map a WMO weather code to an emoji, ``"?"`` when unknown."""
    if code < 0:
        return "?"
    for upper, icon in _WEATHER_ICONS:
        if code <= upper:
            return icon
    return "?"


def excerpt(text: str | None, max_sentences: int = 2) -> str:
    """Cut text down to its first sentences.

    Args:
        text: Source text.
        max_sentences: Maximum number of sentences to keep.

    Returns:
        Up to ``max_sentences`` sentences, capped at 280 characters.
    """
    remaining = (text or "").strip()
    sentences: list[str] = []
    while remaining and len(sentences) < max_sentences:
        match = _SENTENCE_END_RE.search(remaining)
        if match is None:
            sentences.append(remaining)
            break
        sentences.append(remaining[: match.start() + 1])
        remaining = remaining[match.end() :].strip()

    result = " ".join(sentences)
    if len(result) > EXCERPT_MAX_CHARS:
        result = result[: EXCERPT_MAX_CHARS - 3] + "..."
    return result


def time_ago(value: datetime | None, now: datetime) -> str:
    """Format the age of a timestamp compactly.

    Args:
        value: Timestamp to describe.
        now: Reference time.

    Returns:
        ``now``, ``Nm``, ``Nh`` or ``Nd``; empty for a missing timestamp.
    """
    if value is None:
        return ""
    seconds = (now - value).total_seconds()
    if seconds < 60:  # noqa: PLR2004
        return "now"
    if seconds < 3600:  # noqa: PLR2004
        return f"{int(seconds // 60)}m"
    if seconds < 86400:  # noqa: PLR2004
        return f"{int(seconds // 3600)}h"
    return f"{int(seconds // 86400)}d"


def render_markdown(text: str | None) -> Markup:
    """Render Markdown to HTML, escaping any raw HTML in the input."""
    html = markdown2.markdown(text or "", safe_mode="escape", extras=["smarty"])
    return Markup(html.strip())  # noqa: S704


def plain_text(html: str | None) -> str:
    """Strip HTML tags, keeping the text."""
    if not html:
        return ""
    return BeautifulSoup(html, "html.parser").get_text(" ", strip=True)


def reddit_lead(posts: Sequence[RedditPost]) -> RedditPost | None:
    """Pick the featured post.

    Returns:
        The first of the top five posts with self-text, else the first
        post, or None for an empty list.
    """
    if not posts:
        return None
    for post in posts[:REDDIT_LEAD_WINDOW]:
        if post.selftext.strip():
            return post
    return posts[0]


def reddit_sidebar(posts: Sequence[RedditPost]) -> list[RedditPost]:
    """All posts except the featured one, in order."""
    lead = reddit_lead(posts)
    return [post for post in posts if post is not lead]


def is_even(value: int) -> bool:
    return value % 2 == 0


FILTERS = {
    "weather_icon": weather_icon,
    "excerpt": excerpt,
    "time_ago": time_ago,
    "markdown": render_markdown,
    "plain_text": plain_text,
}

GLOBALS = {
    "reddit_lead": reddit_lead,
    "reddit_sidebar": reddit_sidebar,
    "is_even": is_even,
}
