"""Per-run audit log written next to the downloaded episodes."""

from __future__ import annotations

import logging
from datetime import datetime
from enum import StrEnum
from pathlib import Path

from podcast_downloader.naming import sanitize_folder_name

logger = logging.getLogger(__name__)

LINE_FORMAT = "%(asctime)s [%(run_level)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class LogLevel(StrEnum):
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"


_STDLIB_LEVELS = {
    LogLevel.INFO: logging.INFO,
    LogLevel.WARN: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}


def run_log_filename(feed_title: str | None, started_at: datetime | None = None) -> str:
    """``<YYYYMMDD>_<HHMMSS>_<SanitizedFeedTitle>.log``"""
    started_at = started_at or datetime.now()
    return f"{started_at:%Y%m%d_%H%M%S}_{sanitize_folder_name(feed_title)}.log"


class RunLog:
    """Append-only log for one run.

    Every line is flushed to disk before :meth:`log` returns. With no path,
    records only go to the module logger.
    """

    def __init__(self, path: Path | None = None):
        self.path = path
        self._handler: logging.FileHandler | None = None
        self._file_logger: logging.Logger | None = None

        if path is not None:
            handler = logging.FileHandler(path, mode="a", encoding="utf-8")
            handler.setFormatter(logging.Formatter(LINE_FORMAT, datefmt=DATE_FORMAT))
            # Unregistered logger, owned by this RunLog only
            file_logger = logging.Logger(f"{__name__}.file")
            file_logger.addHandler(handler)
            file_logger.setLevel(logging.INFO)
            file_logger.propagate = False
            self._handler = handler
            self._file_logger = file_logger

    @classmethod
    def create(cls, folder: Path, feed_title: str | None) -> RunLog:
        return cls(folder / run_log_filename(feed_title))

    def log(self, level: LogLevel | str, message: str) -> None:
        level = LogLevel(level)
        stdlib_level = _STDLIB_LEVELS[level]
        logger.log(stdlib_level, message)
        if self._file_logger is not None:
            self._file_logger.log(stdlib_level, message, extra={"run_level": level.value})

    def info(self, message: str) -> None:
        self.log(LogLevel.INFO, message)

    def warn(self, message: str) -> None:
        self.log(LogLevel.WARN, message)

    def error(self, message: str) -> None:
        self.log(LogLevel.ERROR, message)

    def close(self) -> None:
        if self._handler is not None and self._file_logger is not None:
            self._file_logger.removeHandler(self._handler)
            self._handler.close()
            self._handler = None
            self._file_logger = None

    def __enter__(self) -> RunLog:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class NullRunLog(RunLog):
    """Run log used before the podcast folder is known."""

    def __init__(self):
        super().__init__(None)
