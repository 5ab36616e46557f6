"""podcast-downloader — Download podcast episodes from RSS and Atom feeds."""

__version__ = "0.1.0"

from podcast_downloader.models import (
    DownloadOutcome,
    Episode,
    FeedSource,
    OutcomeStatus,
    RunSummary,
    SelectionMode,
)

__all__ = [
    "DownloadOutcome",
    "Episode",
    "FeedSource",
    "OutcomeStatus",
    "RunSummary",
    "SelectionMode",
    "__version__",
]
