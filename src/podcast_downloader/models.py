"""Data models for podcast-downloader."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from pathlib import Path
from xml.etree.ElementTree import Element

EPISODE_FALLBACK_TITLE = "Episode"
UNKNOWN_PODCAST_TITLE = "UnknownPodcast"


class SelectionMode(StrEnum):
    """How many of the newest episodes to act on."""

    LATEST = "latest"
    CUSTOM = "custom"
    ALL = "all"


class OutcomeStatus(StrEnum):
    """Terminal state of one episode's download."""

    DOWNLOADED = "downloaded"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class FeedSource:
    """The URL the user asked for and the feed URL it resolved to."""

    requested_url: str
    resolved_url: str

    @property
    def discovered(self) -> bool:
        return self.requested_url != self.resolved_url


@dataclass(frozen=True)
class ParsedFeed:
    """Raw result of fetching and parsing a feed document."""

    resolved_url: str
    title: str | None
    items: list[Element] = field(default_factory=list)

    @property
    def display_title(self) -> str:
        return self.title or UNKNOWN_PODCAST_TITLE


@dataclass(frozen=True)
class Episode:
    """A single podcast episode extracted from a feed item."""

    title: str = EPISODE_FALLBACK_TITLE
    published_at: datetime | None = None
    audio_url: str | None = None
    stable_id: str | None = None

    @property
    def downloadable(self) -> bool:
        return bool(self.audio_url)


@dataclass(frozen=True)
class DownloadOutcome:
    """Outcome of processing one episode."""

    status: OutcomeStatus
    episode_title: str
    target_path: Path
    error: str | None = None
    file_size: int = 0
    attempts: int = 0


@dataclass
class RunSummary:
    """Append-only record of every outcome in one run, in processing order."""

    downloaded: list[DownloadOutcome] = field(default_factory=list)
    skipped: list[DownloadOutcome] = field(default_factory=list)
    failed: list[DownloadOutcome] = field(default_factory=list)

    def record(self, outcome: DownloadOutcome) -> None:
        if outcome.status is OutcomeStatus.DOWNLOADED:
            self.downloaded.append(outcome)
        elif outcome.status is OutcomeStatus.SKIPPED:
            self.skipped.append(outcome)
        else:
            self.failed.append(outcome)

    @property
    def total(self) -> int:
        return len(self.downloaded) + len(self.skipped) + len(self.failed)

    def format_lines(self) -> list[str]:
        """Human-readable summary, one line per entry."""
        lines = [
            f"Summary: downloaded={len(self.downloaded)} "
            f"skipped={len(self.skipped)} failed={len(self.failed)}"
        ]
        for outcome in self.failed:
            lines.append(f"FAILED: {outcome.episode_title} -> {outcome.error}")
        return lines
