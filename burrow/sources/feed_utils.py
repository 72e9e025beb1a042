"""Normalization helpers for social-feed RSS items."""

import re
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime


RESHARE_MARKER = "RT by "
REPLY_MARKER = "R to "
ATTRIBUTION_SEPARATOR = ": "

AVATAR_URL_TEMPLATE = "https://unavatar.io/twitter/{username}"

# Decorative icons embedded in post bodies
DECORATIVE_IMAGE_MARKERS = ("emoji", "twemoji")

_IMG_SRC_RE = re.compile(r'<img[^>]+src="([^"]+)"')

# RFC 1123 with numeric zone, then with zone name
RSS_DATE_FORMATS = (
    "%a, %d %b %Y %H:%M:%S %z",
    "%a, %d %b %Y %H:%M:%S %Z",
)


def strip_attribution(text: str) -> tuple[str, bool, bool]:
    """Remove a leading reshare or reply marker and its attribution.

    ``"RT by @alice: hello"`` becomes ``"hello"``. Text with a marker but
    no separator is returned unchanged, still flagged.

    Args:
        text: Raw item title.

    Returns:
        Tuple of (cleaned text, is_retweet, is_reply).
    """
    is_retweet = text.startswith(RESHARE_MARKER)
    is_reply = text.startswith(REPLY_MARKER)

    if is_retweet or is_reply:
        _, sep, rest = text.partition(ATTRIBUTION_SEPARATOR)
        if sep:
            text = rest

    return text, is_retweet, is_reply


def extract_images(html: str) -> list[str]:
    """Extract embedded image URLs from an item description.

    Args:
        html: Item description HTML.

    Returns:
        Image URLs in document order, decorative icons excluded.
    """
    return [
        src
        for src in _IMG_SRC_RE.findall(html or "")
        if not any(marker in src for marker in DECORATIVE_IMAGE_MARKERS)
    ]


def avatar_url(username: str) -> str:
    """Build the avatar URL for a feed author."""
    return AVATAR_URL_TEMPLATE.format(username=username)


def parse_feed_date(value: str | None) -> datetime | None:
    """Parse an RSS publication date.

    Never falls back to the current time: a post whose date cannot be
    read is excluded from recency windows instead.

    Args:
        value: Raw ``pubDate`` string.

    Returns:
        Timezone-aware datetime, or None for empty, unparseable, or
        zero (year 1) dates.
    """
    if not value or not value.strip():
        return None

    value = value.strip()
    parsed: datetime | None = None

    for fmt in RSS_DATE_FORMATS:
        try:
            parsed = datetime.strptime(value, fmt)
            break
        except ValueError:
            continue

    if parsed is None:
        try:
            parsed = parsedate_to_datetime(value)
        except (TypeError, ValueError, IndexError):
            return None

    if parsed.year <= 1:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed
