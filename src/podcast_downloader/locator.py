"""Resolve a user-supplied URL to an actual feed URL."""

from __future__ import annotations

import logging
import re
from urllib.parse import urljoin

import requests
from bs4 import BeautifulSoup

from podcast_downloader.exceptions import FeedDiscoveryError
from podcast_downloader.http import DEFAULT_TIMEOUT, create_session
from podcast_downloader.models import FeedSource

logger = logging.getLogger(__name__)

FEED_LINK_TYPES = ("application/rss+xml", "application/atom+xml")

_FEED_MARKER_RE = re.compile(r"<(?:\w+:)?(rss|feed)[\s>]", re.IGNORECASE)


class FeedLocator:
    """Finds the feed behind a feed URL or a show page that links to one."""

    def __init__(self, session: requests.Session | None = None, timeout: float = DEFAULT_TIMEOUT):
        self.session = session or create_session()
        self.timeout = timeout

    def locate(self, url: str) -> FeedSource:
        """Return the feed source for ``url``.

        A body that already looks like RSS or Atom is taken as the feed itself.
        Otherwise the page is scanned for a ``<link>`` advertising a feed.
        """
        body = self._fetch(url)

        if looks_like_feed(body):
            logger.debug("%s is a feed document", url)
            return FeedSource(requested_url=url, resolved_url=url)

        href = find_feed_link(body)
        if href is None:
            raise FeedDiscoveryError(f"No feed could be discovered at {url}", url=url)

        resolved = urljoin(url, href)
        logger.debug("Discovered feed %s from page %s", resolved, url)
        return FeedSource(requested_url=url, resolved_url=resolved)

    def _fetch(self, url: str) -> str:
        try:
            resp = self.session.get(url, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise FeedDiscoveryError(f"Failed to fetch {url}: {e}", url=url) from e
        return resp.text


def looks_like_feed(body: str) -> bool:
    """True when the body contains an RSS or Atom root element marker."""
    return _FEED_MARKER_RE.search(body) is not None


def find_feed_link(html: str) -> str | None:
    """Return the href of the first RSS/Atom ``<link>`` tag in an HTML page."""
    soup = BeautifulSoup(html, "html.parser")
    for link in soup.find_all("link"):
        link_type = (link.get("type") or "").strip().lower()
        href = (link.get("href") or "").strip()
        if link_type in FEED_LINK_TYPES and href:
            return href
    return None
