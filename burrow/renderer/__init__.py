"""Digest rendering with Jinja2."""

from burrow.renderer.models import DigestView, RenderedDigest, SectionView
from burrow.renderer.renderer import DigestRenderer, format_long_date


__all__ = [
    "DigestRenderer",
    "DigestView",
    "RenderedDigest",
    "SectionView",
    "format_long_date",
]
