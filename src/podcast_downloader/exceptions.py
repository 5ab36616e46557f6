"""Custom exception hierarchy for podcast-downloader."""


class PodcastDownloaderError(Exception):
    """Base exception for all podcast-downloader errors."""


class ConfigError(PodcastDownloaderError):
    """Invalid configuration or run parameters."""


class FeedDiscoveryError(PodcastDownloaderError):
    """Could not fetch a page or discover a feed URL from it."""

    def __init__(self, message: str, url: str = ""):
        self.url = url
        super().__init__(message)


class FeedParseError(PodcastDownloaderError):
    """Feed content is not valid XML or contains no episodes."""


class NoDownloadableEpisodesError(PodcastDownloaderError):
    """Feed has episodes, but none with a downloadable enclosure URL."""

    def __init__(self, message: str = "No downloadable enclosure URLs found in the feed"):
        super().__init__(message)


class DownloadError(PodcastDownloaderError):
    """Error downloading an episode file."""
