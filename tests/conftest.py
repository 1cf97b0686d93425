"""
Shared pytest fixtures for the game catalog importer tests.
"""

import pytest

from db import get_connection, init_db
from extraction.models import ExtractedGame
from models import ScrapeResult

WINGSPAN_URL = "https://source.example/item/266192/wingspan"

BOX_ART = (
    "https://cf.geekdo-images.com/yLZJCVLlIx4c7eJEWUNJ7w__itemrep/img/"
    "DR7181wU4sHT6gn6Q1XccpPxNHg=/fit-in/246x300/filters:strip_icc()/pic4458123.jpg"
)
GALLERY_PHOTO = (
    "https://cf.geekdo-images.com/abc123__imagepage/img/"
    "Xy1=/fit-in/900x600/filters:no_upscale():strip_icc()/pic4458124.jpg"
)
GALLERY_PHOTO_2 = "https://cf.geekdo-images.com/def456__imagepage/img/Zz2=/pic4458125.jpg"
THUMBNAIL = "https://cf.geekdo-images.com/ghi789__thumb/img/Aa3=/fit-in/200x150/pic4458126.jpg"


class FakeExtractor:
    """Stands in for the AI service. Returns (or raises) canned results in order."""

    def __init__(self, *results):
        self.results = list(results)
        self.calls = []

    def extract(self, markdown, candidates, source_url):
        self.calls.append({
            "markdown": markdown,
            "candidates": candidates,
            "source_url": source_url,
        })
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, Exception):
            raise result
        return result


class FakeScraper:
    def __init__(self, markdown, raw_html=""):
        self.page = ScrapeResult(markdown=markdown, raw_html=raw_html)
        self.calls = []

    def __call__(self, url):
        self.calls.append(url)
        return self.page


# ============================================================================
# Database
# ============================================================================

@pytest.fixture
def db_path(tmp_path):
    path = str(tmp_path / "catalog.db")
    init_db(path)
    return path


@pytest.fixture
def conn(db_path):
    connection = get_connection(db_path)
    yield connection
    connection.close()


# ============================================================================
# Pipeline fakes
# ============================================================================

@pytest.fixture
def make_extractor():
    """Returns a factory for FakeExtractor."""
    return FakeExtractor


@pytest.fixture
def make_scraper():
    """Returns a factory for FakeScraper."""
    return FakeScraper


@pytest.fixture
def wingspan_markdown():
    return (
        "# Wingspan\n\n"
        "BoardGameGeek item 266192 | 2019\n\n"
        "Attract a beautiful and diverse collection of birds to your wildlife preserve.\n"
    )


@pytest.fixture
def wingspan_html():
    return f"""
    <html><body>
      <img src="{BOX_ART}">
      <img src="{THUMBNAIL}">
      <a href="{GALLERY_PHOTO}">photo</a>
      <img src="https://example.com/not-trusted.jpg">
    </body></html>
    """


@pytest.fixture
def wingspan_game():
    return ExtractedGame(
        title="Wingspan",
        difficulty="2 - Medium Light",
        min_players=1,
        max_players=5,
        mechanics=["Engine Building"],
    )


@pytest.fixture
def wingspan_url():
    return WINGSPAN_URL


@pytest.fixture
def images():
    """Sample image URLs on the trusted host."""
    return {
        "box_art": BOX_ART,
        "gallery": GALLERY_PHOTO,
        "gallery_2": GALLERY_PHOTO_2,
        "thumbnail": THUMBNAIL,
    }
