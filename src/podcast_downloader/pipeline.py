"""End-to-end run: locate, parse, extract, select, download."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

import requests

from podcast_downloader.config import Config
from podcast_downloader.downloader import EpisodeDownloader, OutcomeCallback, ProgressCallback
from podcast_downloader.exceptions import ConfigError, NoDownloadableEpisodesError
from podcast_downloader.extractor import extract_episodes
from podcast_downloader.feed import FeedParser
from podcast_downloader.http import DEFAULT_TIMEOUT, create_session
from podcast_downloader.locator import FeedLocator
from podcast_downloader.models import Episode, FeedSource, RunSummary, SelectionMode
from podcast_downloader.naming import sanitize_folder_name
from podcast_downloader.runlog import RunLog
from podcast_downloader.selector import select_episodes, validate_selection


@dataclass(frozen=True)
class RunRequest:
    """What the user asked for."""

    url: str
    mode: SelectionMode | str = SelectionMode.LATEST
    count: int | None = None
    output_dir: Path | None = None


@dataclass(frozen=True)
class RunResult:
    feed_source: FeedSource
    feed_title: str
    podcast_dir: Path
    log_path: Path | None
    summary: RunSummary


@dataclass(frozen=True)
class FeedListing:
    """A located and parsed feed with its downloadable episodes."""

    feed_source: FeedSource
    feed_title: str
    all_episodes: list[Episode]

    @property
    def downloadable(self) -> list[Episode]:
        return [ep for ep in self.all_episodes if ep.downloadable]


def load_feed(
    url: str,
    session: requests.Session | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> FeedListing:
    """Locate the feed behind ``url``, parse it and extract every episode."""
    session = session or create_session()
    source = FeedLocator(session, timeout=timeout).locate(url)
    parsed = FeedParser(session, timeout=timeout).fetch_and_parse([source.resolved_url])
    return FeedListing(
        feed_source=source,
        feed_title=parsed.display_title,
        all_episodes=extract_episodes(parsed.items),
    )


def run_pipeline(
    request: RunRequest,
    config: Config | None = None,
    session: requests.Session | None = None,
    progress_callback: Callable[[Episode], ProgressCallback | None] | None = None,
    outcome_callback: OutcomeCallback | None = None,
    sleep: Callable[[float], None] | None = None,
) -> RunResult:
    """Run one feed to completion and return its summary.

    Raises a :class:`~podcast_downloader.exceptions.PodcastDownloaderError`
    when no usable output can be produced. Once the podcast folder is known,
    every fatal error is written to the run log before it propagates.
    """
    config = config or Config()
    if not request.url or not request.url.strip():
        raise ConfigError("No feed URL given")
    mode = validate_selection(request.mode, request.count)
    url = request.url.strip()

    session = session or create_session()
    listing = load_feed(url, session=session, timeout=config.timeout)

    output_root = Path(request.output_dir or config.output_dir).expanduser()
    podcast_dir = output_root / sanitize_folder_name(listing.feed_title)
    podcast_dir.mkdir(parents=True, exist_ok=True)

    with RunLog.create(podcast_dir, listing.feed_title) as run_log:
        try:
            run_log.info(f"Requested URL: {listing.feed_source.requested_url}")
            run_log.info(f"Resolved feed URL: {listing.feed_source.resolved_url}")
            run_log.info(f"Feed title: {listing.feed_title}")
            count_note = f" (count={request.count})" if mode is SelectionMode.CUSTOM else ""
            run_log.info(f"Mode: {mode.value}{count_note}")
            run_log.info(f"Output folder: {podcast_dir}")

            downloadable = listing.downloadable
            run_log.info(
                f"Items in feed: {len(listing.all_episodes)}; "
                f"with downloadable audio: {len(downloadable)}"
            )
            if not downloadable:
                raise NoDownloadableEpisodesError()

            selected = select_episodes(downloadable, mode, request.count)
            run_log.info(f"Selected {len(selected)} episode(s)")

            downloader = EpisodeDownloader(
                podcast_dir,
                session=session,
                run_log=run_log,
                max_attempts=config.max_attempts,
                retry_delay=config.retry_delay,
                timeout=config.timeout,
                sleep=sleep,
            )
            summary = downloader.download_all(
                selected,
                progress_callback=progress_callback,
                outcome_callback=outcome_callback,
            )
            run_log.info(f"Done. Output folder: {podcast_dir}")
        except Exception as e:
            run_log.error(f"Fatal: {type(e).__name__}: {e}")
            raise

    return RunResult(
        feed_source=listing.feed_source,
        feed_title=listing.feed_title,
        podcast_dir=podcast_dir,
        log_path=run_log.path,
        summary=summary,
    )
