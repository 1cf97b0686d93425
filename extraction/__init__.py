"""Scraping and AI-powered structured extraction of game pages."""

from extraction.extractor import extract_game_from_url
from extraction.guardrails import validate_url

__all__ = ["extract_game_from_url", "validate_url"]
