"""HTML fragments for the metadata and sources regions."""

from __future__ import annotations

import html
from datetime import datetime, timezone
from typing import Sequence
from urllib.parse import urlsplit
from zoneinfo import ZoneInfo

from knowledge_search.schemas import PLACEHOLDER_URL, ResponseMetadata, SourceLink

SAFE_URL_SCHEMES = frozenset({"http", "https", "mailto"})

_SOURCE_ICON = (
    '<svg class="source-icon" viewBox="0 0 24 24" fill="none" stroke="currentColor" stroke-width="2">'
    '<path d="M13 2H6a2 2 0 0 0-2 2v16a2 2 0 0 0 2 2h12a2 2 0 0 0 2-2V9z"></path>'
    '<polyline points="13 2 13 9 20 9"></polyline>'
    "</svg>"
)


def escape_html(text: object) -> str:
    """Escape ``text`` for use in HTML content and attribute values."""

    return html.escape("" if text is None else str(text), quote=True)


def safe_href(url: str | None) -> str:
    """Return an escaped href, or the placeholder for absent or unsafe URLs."""

    candidate = (url or "").strip()
    if not candidate:
        return PLACEHOLDER_URL
    # Browsers ignore control characters and whitespace inside the scheme.
    compact = "".join(ch for ch in candidate if ch.isprintable() and not ch.isspace())
    try:
        scheme = urlsplit(compact).scheme.lower()
    except ValueError:
        return PLACEHOLDER_URL
    if scheme and scheme not in SAFE_URL_SCHEMES:
        return PLACEHOLDER_URL
    return escape_html(candidate)


def format_timestamp(value: datetime, *, timezone_name: str | None = None, fmt: str = "%Y/%m/%d %H:%M:%S") -> str:
    """Render ``value`` in the display zone (local zone when unset)."""

    if value.tzinfo is None:
        # Naive timestamps from the webhook are taken as UTC.
        value = value.replace(tzinfo=timezone.utc)
    zone = ZoneInfo(timezone_name) if timezone_name else None
    try:
        return value.astimezone(zone).strftime(fmt)
    except (OverflowError, ValueError):
        # Shifting into the display zone can leave the datetime range.
        return value.isoformat()


def render_metadata(
    metadata: ResponseMetadata | None,
    *,
    timezone_name: str | None = None,
    timestamp_format: str = "%Y/%m/%d %H:%M:%S",
) -> str:
    if metadata is None:
        return ""
    items: list[str] = []
    if metadata.file_count is not None:
        items.append(f"📄 {metadata.file_count} files referenced")
    if metadata.timestamp is not None:
        items.append(f"⏱️ {format_timestamp(metadata.timestamp, timezone_name=timezone_name, fmt=timestamp_format)}")
    if metadata.processing_time is not None:
        items.append(f"⚡ {metadata.processing_time:.2f}s")
    return "".join(f'<div class="metadata-item">{escape_html(item)}</div>' for item in items)


def render_sources(sources: Sequence[SourceLink]) -> str:
    if not sources:
        return ""
    links = []
    for source in sources:
        links.append(
            f'<li><a href="{safe_href(source.url)}" target="_blank" rel="noopener noreferrer" class="source-item">'
            f'{_SOURCE_ICON}<span class="source-name">{escape_html(source.name)}</span></a></li>'
        )
    return '<ol class="sources-list">' + "".join(links) + "</ol>"


__all__ = [
    "SAFE_URL_SCHEMES",
    "escape_html",
    "format_timestamp",
    "render_metadata",
    "render_sources",
    "safe_href",
]
