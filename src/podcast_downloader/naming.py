"""Deterministic, filesystem-safe names for podcast folders and episode files."""

from __future__ import annotations

import hashlib
import re
from urllib.parse import urlparse

from podcast_downloader.models import EPISODE_FALLBACK_TITLE, UNKNOWN_PODCAST_TITLE, Episode

# Characters Windows refuses in file names, plus ASCII control characters
_FORBIDDEN_RE = re.compile(r'[\\/:*?"<>|\x00-\x1f]')

# Leaves room for the ".part" suffix and stays under the common 255-byte limit
MAX_NAME_BYTES = 200
HASH_SUFFIX_BYTES = len("-") + 8


def truncate_utf8(text: str, max_bytes: int) -> str:
    """Cut ``text`` to at most ``max_bytes`` UTF-8 bytes on a character boundary."""
    encoded = text.encode("utf-8")
    if len(encoded) <= max_bytes:
        return text
    return encoded[:max_bytes].decode("utf-8", errors="ignore").rstrip()


def sanitize_filename(name: str, fallback: str = EPISODE_FALLBACK_TITLE) -> str:
    """Replace forbidden characters with ``_`` and trim surrounding whitespace."""
    cleaned = _FORBIDDEN_RE.sub("_", name).strip()
    return cleaned or fallback


def sanitize_folder_name(feed_title: str | None) -> str:
    name = sanitize_filename(feed_title or "", fallback=UNKNOWN_PODCAST_TITLE)
    return truncate_utf8(name, MAX_NAME_BYTES)


def audio_extension(audio_url: str | None) -> str:
    path = urlparse(audio_url or "").path
    return "m4a" if path.lower().endswith(".m4a") else "mp3"


def short_hash(value: str) -> str:
    """First 8 hex characters of the SHA-1 of ``value``."""
    return hashlib.sha1(value.encode("utf-8")).hexdigest()[:8]


def resolve_filename(episode: Episode, position: int) -> str:
    """Return the file name an episode is saved under.

    ``YYYY-MM-DD - <title>.<ext>`` for dated episodes. Undated episodes,
    episodes whose title collapsed to the fallback and titles cut to fit
    ``MAX_NAME_BYTES`` get a ``-<hash8>`` suffix derived from their stable id
    so that they cannot overwrite each other.
    """
    base = sanitize_filename(episode.title)
    ext = audio_extension(episode.audio_url)

    prefix = ""
    if episode.published_at is not None:
        prefix = episode.published_at.strftime("%Y-%m-%d") + " - "

    fixed_bytes = len(f"{prefix}.{ext}".encode("utf-8"))
    needs_hash = base == EPISODE_FALLBACK_TITLE or not prefix
    budget = MAX_NAME_BYTES - fixed_bytes - (HASH_SUFFIX_BYTES if needs_hash else 0)
    if len(base.encode("utf-8")) > budget:
        needs_hash = True
        budget = MAX_NAME_BYTES - fixed_bytes - HASH_SUFFIX_BYTES
        base = truncate_utf8(base, budget) or EPISODE_FALLBACK_TITLE

    suffix = ""
    if needs_hash:
        suffix = "-" + short_hash(episode.stable_id or episode.audio_url or str(position))

    return f"{prefix}{base}{suffix}.{ext}"
