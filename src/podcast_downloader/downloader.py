"""Episode download engine with bounded retries and outcome bookkeeping."""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable
from pathlib import Path

import requests
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_fixed

from podcast_downloader.exceptions import DownloadError
from podcast_downloader.http import create_session
from podcast_downloader.models import DownloadOutcome, Episode, OutcomeStatus, RunSummary
from podcast_downloader.naming import resolve_filename
from podcast_downloader.runlog import NullRunLog, RunLog

DEFAULT_CHUNK_SIZE = 8192
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_RETRY_DELAY = 3.0
DEFAULT_DOWNLOAD_TIMEOUT = 60

PART_SUFFIX = ".part"

ProgressCallback = Callable[[int, int], None]
OutcomeCallback = Callable[[DownloadOutcome], None]


class EpisodeDownloader:
    """Downloads episodes one after another into a podcast folder.

    Existing files are skipped and never overwritten. Each remaining episode
    gets up to ``max_attempts`` tries separated by a fixed ``retry_delay``;
    a failed episode is recorded and the run moves on.
    """

    def __init__(
        self,
        output_dir: str | Path,
        session: requests.Session | None = None,
        run_log: RunLog | None = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        timeout: float = DEFAULT_DOWNLOAD_TIMEOUT,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        sleep: Callable[[float], None] | None = None,
    ):
        self.output_dir = Path(output_dir)
        self.session = session or create_session()
        self.run_log = run_log or NullRunLog()
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self.timeout = timeout
        self.chunk_size = chunk_size
        self.sleep = sleep or time.sleep

    def download_all(
        self,
        episodes: Iterable[Episode],
        progress_callback: Callable[[Episode], ProgressCallback | None] | None = None,
        outcome_callback: OutcomeCallback | None = None,
    ) -> RunSummary:
        """Process every episode in order and return the run summary.

        ``progress_callback`` is a factory returning a per-episode byte
        progress callback, so a UI can create one progress bar per episode.
        """
        summary = RunSummary()
        for position, episode in enumerate(episodes, start=1):
            on_progress = progress_callback(episode) if progress_callback else None
            outcome = self.download_episode(episode, position, progress_callback=on_progress)
            summary.record(outcome)
            if outcome_callback:
                outcome_callback(outcome)

        headline, *failures = summary.format_lines()
        self.run_log.info(headline)
        for line in failures:
            self.run_log.warn(line)
        return summary

    def target_path(self, episode: Episode, position: int) -> Path:
        return self.output_dir / resolve_filename(episode, position)

    def download_episode(
        self,
        episode: Episode,
        position: int = 1,
        progress_callback: ProgressCallback | None = None,
    ) -> DownloadOutcome:
        """Download a single episode. Skips if the target file already exists.

        Filesystem errors while checking or preparing the target are reported
        as a failed outcome for this episode only.
        """
        file_path = self.target_path(episode, position)
        self.run_log.info(f"Episode '{episode.title}' -> {file_path}")

        try:
            existing_size = file_path.stat().st_size if file_path.exists() else None
        except OSError as e:
            return self._failed(episode, file_path, f"Cannot access {file_path}: {e}")

        if existing_size is not None:
            self.run_log.info(f"SKIPPED (already exists): {file_path.name}")
            return DownloadOutcome(
                status=OutcomeStatus.SKIPPED,
                episode_title=episode.title,
                target_path=file_path,
                file_size=existing_size,
            )

        if not episode.audio_url:
            return self._failed(episode, file_path, "No audio URL available")

        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            return self._failed(episode, file_path, f"Cannot create {self.output_dir}: {e}")

        attempts = 0
        try:
            for attempt in self._retrying():
                with attempt:
                    attempts = attempt.retry_state.attempt_number
                    try:
                        size = self._fetch_to_path(episode.audio_url, file_path, progress_callback)
                    except DownloadError as e:
                        self.run_log.warn(
                            f"Attempt {attempts}/{self.max_attempts} failed for "
                            f"'{episode.title}': {e}"
                        )
                        raise
        except DownloadError as e:
            self.run_log.error(f"FAILED after {attempts} attempt(s): {episode.title}")
            return DownloadOutcome(
                status=OutcomeStatus.FAILED,
                episode_title=episode.title,
                target_path=file_path,
                error=str(e),
                attempts=attempts,
            )

        self.run_log.info(f"DOWNLOADED: {file_path.name} ({size} bytes)")
        return DownloadOutcome(
            status=OutcomeStatus.DOWNLOADED,
            episode_title=episode.title,
            target_path=file_path,
            file_size=size,
            attempts=attempts,
        )

    def _failed(self, episode: Episode, file_path: Path, error: str) -> DownloadOutcome:
        self.run_log.error(f"FAILED: '{episode.title}': {error}")
        return DownloadOutcome(
            status=OutcomeStatus.FAILED,
            episode_title=episode.title,
            target_path=file_path,
            error=error,
        )

    def _retrying(self) -> Retrying:
        return Retrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_fixed(self.retry_delay),
            retry=retry_if_exception_type(DownloadError),
            sleep=self.sleep,
            reraise=True,
        )

    def _fetch_to_path(
        self,
        url: str,
        file_path: Path,
        progress_callback: ProgressCallback | None,
    ) -> int:
        """Stream ``url`` into ``file_path``; return the number of bytes written.

        Data goes to a ``.part`` file that is renamed into place only once the
        whole body has been written.
        """
        part_path = file_path.with_name(file_path.name + PART_SUFFIX)
        downloaded = 0

        try:
            with self.session.get(url, stream=True, timeout=self.timeout) as resp:
                resp.raise_for_status()
                total_size = int(resp.headers.get("content-length", 0) or 0)
                with open(part_path, "wb") as f:
                    for chunk in resp.iter_content(chunk_size=self.chunk_size):
                        if not chunk:
                            continue
                        f.write(chunk)
                        downloaded += len(chunk)
                        if progress_callback:
                            progress_callback(downloaded, total_size)
            part_path.replace(file_path)
        except requests.RequestException as e:
            part_path.unlink(missing_ok=True)
            raise DownloadError(f"Failed to download {url}: {e}") from e
        except OSError as e:
            part_path.unlink(missing_ok=True)
            raise DownloadError(f"Failed to write {file_path}: {e}") from e

        return downloaded
