"""Extraction orchestrator: scrape + image candidates + guardrail + LLM."""

import logging
from typing import Callable, Optional

from extraction.guardrails import check_content_match
from extraction.images import extract_image_candidates
from extraction.llm import ClaudeExtractor, StructuredExtractor
from extraction.models import ExtractedGame
from extraction.page_fetcher import scrape_page
from models import ImageCandidate, ScrapeResult

logger = logging.getLogger(__name__)


def extract_game_from_url(
    url: str,
    extractor: Optional[StructuredExtractor] = None,
    scrape: Callable[[str], ScrapeResult] = scrape_page,
) -> tuple[ExtractedGame, list[ImageCandidate]]:
    """Scrape a validated URL and extract structured game data from it.

    Returns (game, ranked image candidates). The content guardrail runs
    before the extractor is called, so a mismatched scrape never costs an
    AI request.
    """
    page = scrape(url)

    candidates = extract_image_candidates(page.raw_html)
    if candidates:
        logger.info(f"Best image candidate: {candidates[0].url}")

    check_content_match(url, page.markdown)

    extractor = extractor or ClaudeExtractor()
    game = extractor.extract(page.markdown, candidates, url)
    return game, candidates
