"""Shared test fixtures."""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

import pytest
import responses as rsps

from podcast_downloader.models import Episode

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True)
def _block_http():
    """Block all unmocked HTTP requests in every test."""
    rsps.start()
    yield
    rsps.stop()
    rsps.reset()


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR


@pytest.fixture
def rss_xml(fixtures_dir: Path) -> str:
    return (fixtures_dir / "sample_rss.xml").read_text(encoding="utf-8")


@pytest.fixture
def atom_xml(fixtures_dir: Path) -> str:
    return (fixtures_dir / "sample_atom.xml").read_text(encoding="utf-8")


@pytest.fixture
def show_html(fixtures_dir: Path) -> str:
    return (fixtures_dir / "show_page.html").read_text(encoding="utf-8")


@pytest.fixture
def no_enclosure_xml(fixtures_dir: Path) -> str:
    return (fixtures_dir / "no_enclosure_rss.xml").read_text(encoding="utf-8")


@pytest.fixture
def sample_episode() -> Episode:
    return Episode(
        title="Episode Five: Dawn",
        published_at=datetime(2024, 1, 5, 6, 0, tzinfo=UTC),
        audio_url="https://cdn.example.com/audio/nor-005.mp3",
        stable_id="nor-005",
    )
