"""Fetch feeds and parse them into raw items, tolerant of RSS and Atom."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from xml.etree import ElementTree
from xml.etree.ElementTree import Element

import requests

from podcast_downloader.exceptions import FeedParseError
from podcast_downloader.http import DEFAULT_TIMEOUT, create_session
from podcast_downloader.models import ParsedFeed

logger = logging.getLogger(__name__)


# Namespace-insensitive accessors. Feeds mix default namespaces (Atom),
# prefixed extensions (itunes:, media:) and plain RSS, so every lookup
# compares local names only.


def local_name(element: Element) -> str:
    """Tag name without any ``{namespace}`` part."""
    tag = element.tag
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def children(element: Element, name: str) -> Iterator[Element]:
    """Direct children whose local name is ``name``."""
    for child in element:
        if local_name(child) == name:
            yield child


def child_text(element: Element, name: str) -> str | None:
    """Stripped text of the first matching child, or None if missing/blank."""
    for node in children(element, name):
        text = (node.text or "").strip()
        if text:
            return text
    return None


def descendants(element: Element, name: str) -> Iterator[Element]:
    """The element itself and all descendants whose local name is ``name``."""
    for node in element.iter():
        if local_name(node) == name:
            yield node


def find_items(root: Element) -> tuple[str | None, list[Element]]:
    """Return ``(feed_title, items)`` for an RSS or Atom document.

    RSS ``rss/channel/item`` is tried first; Atom ``feed/entry`` only when
    no RSS items are present.
    """
    title: str | None = None
    items: list[Element] = []

    for rss in descendants(root, "rss"):
        for channel in children(rss, "channel"):
            if title is None:
                title = child_text(channel, "title")
            items.extend(children(channel, "item"))
    if items:
        return title, items

    for feed in descendants(root, "feed"):
        if title is None:
            title = child_text(feed, "title")
        items.extend(children(feed, "entry"))
    return title, items


class FeedParser:
    """Fetch a feed over HTTP and split it into items."""

    def __init__(self, session: requests.Session | None = None, timeout: float = DEFAULT_TIMEOUT):
        self.session = session or create_session()
        self.timeout = timeout

    def fetch_and_parse(self, candidate_urls: Iterable[str]) -> ParsedFeed:
        """Return the first candidate that parses into at least one item."""
        for url in candidate_urls:
            try:
                resp = self.session.get(url, timeout=self.timeout)
                resp.raise_for_status()
            except requests.RequestException as e:
                logger.warning("Failed to fetch feed %s: %s", url, e)
                continue

            try:
                parsed = self.parse_feed(resp.content, url)
            except FeedParseError as e:
                logger.warning("Failed to parse feed %s: %s", url, e)
                continue

            if parsed.items:
                return parsed
            logger.warning("Feed %s contains no items", url)

        raise FeedParseError("No episodes found in the feed")

    def parse_feed(self, xml: str | bytes, url: str = "") -> ParsedFeed:
        """Parse feed XML into a :class:`ParsedFeed` (items may be empty)."""
        try:
            root = ElementTree.fromstring(xml)
        except ElementTree.ParseError as e:
            raise FeedParseError(f"Invalid feed XML: {e}") from e

        title, items = find_items(root)
        logger.debug("Parsed %d item(s) from %s", len(items), url or "<string>")
        return ParsedFeed(resolved_url=url, title=title, items=items)
