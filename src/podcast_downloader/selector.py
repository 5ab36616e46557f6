"""Choose which episodes to download."""

from __future__ import annotations

from podcast_downloader.exceptions import ConfigError
from podcast_downloader.models import Episode, SelectionMode


def validate_selection(mode: SelectionMode | str, count: int | None) -> SelectionMode:
    """Check a mode/count combination before any network activity."""
    try:
        mode = SelectionMode(mode)
    except ValueError as e:
        raise ConfigError(f"Unknown selection mode: {mode!r}") from e

    if mode is SelectionMode.CUSTOM:
        if count is None:
            raise ConfigError("Custom mode requires an episode count")
        if count < 1:
            raise ConfigError(f"Episode count must be at least 1, got {count}")
    return mode


def sort_newest_first(episodes: list[Episode]) -> list[Episode]:
    """Newest first; undated episodes after all dated ones, in feed order."""
    return sorted(
        episodes,
        key=lambda ep: (
            ep.published_at is None,
            -ep.published_at.timestamp() if ep.published_at else 0.0,
        ),
    )


def select_episodes(
    episodes: list[Episode],
    mode: SelectionMode,
    count: int | None = None,
) -> list[Episode]:
    ordered = sort_newest_first(episodes)
    if mode is SelectionMode.LATEST:
        return ordered[:1]
    if mode is SelectionMode.CUSTOM:
        return ordered[:count]
    return ordered
