"""Tests for episode selection."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from podcast_downloader.exceptions import ConfigError
from podcast_downloader.models import Episode, SelectionMode
from podcast_downloader.selector import select_episodes, sort_newest_first, validate_selection


def _ep(title: str, day: int | None) -> Episode:
    published = datetime(2024, 1, day, tzinfo=UTC) if day else None
    return Episode(title=title, published_at=published, audio_url=f"https://x/{title}.mp3")


@pytest.fixture
def episodes() -> list[Episode]:
    return [
        _ep("undated-a", None),
        _ep("jan-2", 2),
        _ep("jan-5", 5),
        _ep("undated-b", None),
        _ep("jan-1", 1),
        _ep("jan-4", 4),
    ]


class TestSortNewestFirst:
    def test_order(self, episodes):
        titles = [ep.title for ep in sort_newest_first(episodes)]
        assert titles == ["jan-5", "jan-4", "jan-2", "jan-1", "undated-a", "undated-b"]

    def test_non_increasing_dates(self, episodes):
        dated = [ep.published_at for ep in sort_newest_first(episodes) if ep.published_at]
        assert dated == sorted(dated, reverse=True)

    def test_deterministic(self, episodes):
        first = sort_newest_first(episodes)
        assert sort_newest_first(episodes) == first
        assert sort_newest_first(first) == first

    def test_does_not_mutate_input(self, episodes):
        before = list(episodes)
        sort_newest_first(episodes)
        assert episodes == before


class TestSelectEpisodes:
    def test_latest(self, episodes):
        selected = select_episodes(episodes, SelectionMode.LATEST)
        assert [ep.title for ep in selected] == ["jan-5"]

    def test_latest_empty(self):
        assert select_episodes([], SelectionMode.LATEST) == []

    def test_custom(self, episodes):
        selected = select_episodes(episodes, SelectionMode.CUSTOM, 3)
        assert [ep.title for ep in selected] == ["jan-5", "jan-4", "jan-2"]

    def test_custom_more_than_available(self, episodes):
        assert len(select_episodes(episodes, SelectionMode.CUSTOM, 50)) == len(episodes)

    def test_all(self, episodes):
        assert len(select_episodes(episodes, SelectionMode.ALL)) == len(episodes)


class TestValidateSelection:
    def test_accepts_strings(self):
        assert validate_selection("all", None) is SelectionMode.ALL

    def test_unknown_mode(self):
        with pytest.raises(ConfigError, match="Unknown selection mode"):
            validate_selection("newest", None)

    def test_custom_requires_count(self):
        with pytest.raises(ConfigError, match="requires an episode count"):
            validate_selection(SelectionMode.CUSTOM, None)

    @pytest.mark.parametrize("count", [0, -3])
    def test_custom_count_below_one(self, count):
        with pytest.raises(ConfigError, match="at least 1"):
            validate_selection(SelectionMode.CUSTOM, count)

    def test_latest_ignores_count(self):
        assert validate_selection(SelectionMode.LATEST, 0) is SelectionMode.LATEST
