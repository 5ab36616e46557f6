"""Map raw feed items to :class:`Episode` records."""

from __future__ import annotations

import re
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from xml.etree.ElementTree import Element

from podcast_downloader.feed import child_text, children
from podcast_downloader.models import EPISODE_FALLBACK_TITLE, Episode

DATE_FIELDS = ("pubDate", "updated", "published")

AUDIO_URL_RE = re.compile(r"\.(mp3|m4a)(\?.*)?$", re.IGNORECASE)


def extract_episode(item: Element, position: int) -> Episode:
    """Build an Episode from an RSS ``<item>`` or Atom ``<entry>``.

    ``position`` is the 1-based index of the item in the feed, used as the
    identifier of last resort. The returned episode may have no audio URL;
    callers filter those out before selection.
    """
    title = child_text(item, "title") or EPISODE_FALLBACK_TITLE
    audio_url = find_audio_url(item)
    stable_id = child_text(item, "guid") or child_text(item, "id") or audio_url or str(position)

    return Episode(
        title=title,
        published_at=find_publish_date(item),
        audio_url=audio_url,
        stable_id=stable_id,
    )


def extract_episodes(items: list[Element]) -> list[Episode]:
    return [extract_episode(item, i) for i, item in enumerate(items, start=1)]


def find_publish_date(item: Element) -> datetime | None:
    """First parseable date among pubDate, updated, published."""
    for name in DATE_FIELDS:
        text = child_text(item, name)
        if text is None:
            continue
        parsed = parse_date(text)
        if parsed is not None:
            return parsed
    return None


def parse_date(text: str) -> datetime | None:
    """Parse an RFC 822 (RSS) or ISO 8601 (Atom) date.

    Naive results are taken as UTC so that all dates compare.
    """
    parsed: datetime | None = None
    try:
        parsed = parsedate_to_datetime(text)
    except (TypeError, ValueError, IndexError):
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def find_audio_url(item: Element) -> str | None:
    """Resolve the downloadable URL of an item, first match wins.

    1. ``<enclosure url="...">``
    2. ``<link rel="enclosure" href="...">``
    3. ``<guid>`` or ``<link>`` text that ends in .mp3/.m4a
    """
    for enclosure in children(item, "enclosure"):
        url = (enclosure.get("url") or "").strip()
        if url:
            return url

    for link in children(item, "link"):
        if (link.get("rel") or "").strip().lower() == "enclosure":
            href = (link.get("href") or "").strip()
            if href:
                return href

    for name in ("guid", "link"):
        for node in children(item, name):
            text = (node.text or "").strip()
            if text and AUDIO_URL_RE.search(text):
                return text

    return None
