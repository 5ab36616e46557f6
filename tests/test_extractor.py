"""Tests for episode extraction from feed items."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone
from xml.etree import ElementTree

from podcast_downloader.extractor import (
    extract_episode,
    extract_episodes,
    find_audio_url,
    parse_date,
)
from podcast_downloader.feed import FeedParser


def _item(xml: str) -> ElementTree.Element:
    return ElementTree.fromstring(xml)


class TestExtractEpisode:
    def test_rss_item(self, rss_xml):
        items = FeedParser().parse_feed(rss_xml).items
        ep = extract_episode(items[0], 1)

        assert ep.title == "Episode Three: The Lighthouse"
        assert ep.published_at == datetime(2024, 1, 3, 6, 0, tzinfo=UTC)
        assert ep.audio_url == "https://cdn.example.com/audio/nor-003.mp3"
        assert ep.stable_id == "nor-003"

    def test_atom_link_enclosure(self, atom_xml):
        items = FeedParser().parse_feed(atom_xml).items
        ep = extract_episode(items[0], 1)

        assert ep.title == "Rain on a Tin Roof"
        assert ep.audio_url == "https://media.example.org/rain.mp3"
        assert ep.published_at == datetime(2024, 2, 10, 12, 0, tzinfo=UTC)
        assert ep.stable_id == "urn:uuid:1225c695-cfb8-4ebb-aaaa-80da344efa6a"

    def test_atom_published_date(self, atom_xml):
        items = FeedParser().parse_feed(atom_xml).items
        ep = extract_episode(items[1], 2)

        assert ep.published_at == datetime(
            2024, 2, 8, 20, 30, tzinfo=timezone(timedelta(hours=1))
        )

    def test_missing_title_uses_placeholder(self):
        ep = extract_episode(_item('<item><enclosure url="https://x/a.mp3"/></item>'), 1)
        assert ep.title == "Episode"

    def test_blank_title_uses_placeholder(self):
        ep = extract_episode(_item("<item><title>   </title></item>"), 1)
        assert ep.title == "Episode"

    def test_stable_id_falls_back_to_audio_url(self):
        ep = extract_episode(_item('<item><enclosure url="https://x/a.mp3"/></item>'), 4)
        assert ep.stable_id == "https://x/a.mp3"

    def test_stable_id_falls_back_to_position(self):
        ep = extract_episode(_item("<item><title>No audio</title></item>"), 7)
        assert ep.stable_id == "7"
        assert ep.audio_url is None
        assert not ep.downloadable

    def test_unparseable_date_is_unset(self):
        ep = extract_episode(_item("<item><pubDate>sometime soon</pubDate></item>"), 1)
        assert ep.published_at is None

    def test_date_priority(self):
        ep = extract_episode(
            _item(
                "<item>"
                "<published>2020-01-01T00:00:00Z</published>"
                "<updated>2021-01-01T00:00:00Z</updated>"
                "<pubDate>Sat, 01 Jan 2022 00:00:00 +0000</pubDate>"
                "</item>"
            ),
            1,
        )
        assert ep.published_at.year == 2022

    def test_bad_pubdate_falls_through_to_updated(self):
        ep = extract_episode(
            _item(
                "<item><pubDate>garbage</pubDate>"
                "<updated>2021-06-01T00:00:00Z</updated></item>"
            ),
            1,
        )
        assert ep.published_at == datetime(2021, 6, 1, tzinfo=UTC)

    def test_extract_episodes_positions(self):
        items = [_item("<item/>"), _item("<item/>")]
        episodes = extract_episodes(items)
        assert [ep.stable_id for ep in episodes] == ["1", "2"]


class TestFindAudioUrl:
    def test_enclosure_wins(self):
        item = _item(
            "<item>"
            '<link rel="enclosure" href="https://x/link.mp3"/>'
            '<enclosure url="https://x/enclosure.mp3"/>'
            "</item>"
        )
        assert find_audio_url(item) == "https://x/enclosure.mp3"

    def test_empty_enclosure_falls_through(self):
        item = _item(
            '<item><enclosure url=""/><link rel="enclosure" href="https://x/b.m4a"/></item>'
        )
        assert find_audio_url(item) == "https://x/b.m4a"

    def test_guid_with_audio_extension(self):
        item = _item("<item><guid>https://x/episode.mp3?ref=rss</guid></item>")
        assert find_audio_url(item) == "https://x/episode.mp3?ref=rss"

    def test_link_text_with_audio_extension(self):
        item = _item("<item><guid>abc-123</guid><link>https://x/episode.M4A</link></item>")
        assert find_audio_url(item) == "https://x/episode.M4A"

    def test_non_audio_link_ignored(self):
        item = _item("<item><link>https://x/posts/episode-1</link></item>")
        assert find_audio_url(item) is None

    def test_namespaced_enclosure(self):
        item = _item(
            '<a:entry xmlns:a="http://www.w3.org/2005/Atom">'
            '<a:link rel="enclosure" href="https://x/ns.mp3"/></a:entry>'
        )
        assert find_audio_url(item) == "https://x/ns.mp3"


class TestParseDate:
    def test_rfc822(self):
        assert parse_date("Fri, 05 Jan 2024 06:00:00 GMT") == datetime(
            2024, 1, 5, 6, 0, tzinfo=UTC
        )

    def test_iso8601_zulu(self):
        assert parse_date("2024-01-05T06:00:00Z") == datetime(2024, 1, 5, 6, 0, tzinfo=UTC)

    def test_naive_is_utc(self):
        assert parse_date("2024-01-05T06:00:00").tzinfo is not None

    def test_garbage(self):
        assert parse_date("not a date") is None
