"""Tests for data models."""

from datetime import UTC, datetime
from pathlib import Path

import pytest

from podcast_downloader.models import (
    DownloadOutcome,
    Episode,
    FeedSource,
    OutcomeStatus,
    ParsedFeed,
    RunSummary,
    SelectionMode,
)


class TestSelectionMode:
    def test_values(self):
        assert SelectionMode.LATEST == "latest"
        assert SelectionMode("custom") is SelectionMode.CUSTOM

    def test_str(self):
        assert str(SelectionMode.ALL) == "all"


class TestFeedSource:
    def test_frozen(self):
        source = FeedSource(requested_url="a", resolved_url="a")
        with pytest.raises(AttributeError):
            source.resolved_url = "b"

    def test_discovered(self):
        assert FeedSource("https://x/show", "https://x/feed.xml").discovered
        assert not FeedSource("https://x/feed.xml", "https://x/feed.xml").discovered


class TestParsedFeed:
    def test_display_title(self):
        assert ParsedFeed(resolved_url="u", title=None).display_title == "UnknownPodcast"
        assert ParsedFeed(resolved_url="u", title="Show").display_title == "Show"


class TestEpisode:
    def test_creation(self, sample_episode):
        assert sample_episode.stable_id == "nor-005"
        assert sample_episode.published_at == datetime(2024, 1, 5, 6, 0, tzinfo=UTC)
        assert sample_episode.downloadable

    def test_defaults(self):
        ep = Episode()
        assert ep.title == "Episode"
        assert ep.published_at is None
        assert ep.audio_url is None
        assert not ep.downloadable


class TestRunSummary:
    def _outcome(self, status: OutcomeStatus, title: str, error: str | None = None):
        return DownloadOutcome(
            status=status,
            episode_title=title,
            target_path=Path("/tmp") / f"{title}.mp3",
            error=error,
        )

    def test_record_keeps_order(self):
        summary = RunSummary()
        summary.record(self._outcome(OutcomeStatus.DOWNLOADED, "a"))
        summary.record(self._outcome(OutcomeStatus.FAILED, "b", "boom"))
        summary.record(self._outcome(OutcomeStatus.DOWNLOADED, "c"))
        summary.record(self._outcome(OutcomeStatus.SKIPPED, "d"))

        assert [o.episode_title for o in summary.downloaded] == ["a", "c"]
        assert [o.episode_title for o in summary.failed] == ["b"]
        assert [o.episode_title for o in summary.skipped] == ["d"]
        assert summary.total == 4

    def test_format_lines(self):
        summary = RunSummary()
        summary.record(self._outcome(OutcomeStatus.SKIPPED, "a"))
        summary.record(self._outcome(OutcomeStatus.FAILED, "b", "HTTP 500"))

        assert summary.format_lines() == [
            "Summary: downloaded=0 skipped=1 failed=1",
            "FAILED: b -> HTTP 500",
        ]
