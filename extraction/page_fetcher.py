"""Fetch game pages through the external scrape service."""

import logging
import os
from typing import Optional

import requests

from config import SCRAPE_API_URL, SCRAPE_TIMEOUT
from errors import NoContent, ScrapeUnavailable, ServiceNotConfigured
from models import ScrapeResult

logger = logging.getLogger(__name__)

_session: Optional[requests.Session] = None


def _get_session() -> requests.Session:
    global _session
    if _session is None:
        _session = requests.Session()
        _session.headers.update({"Content-Type": "application/json"})
    return _session


def _pick(payload: dict, key: str) -> str:
    """Read ``key`` from ``payload['data']``, falling back to the top level."""
    data = payload.get("data")
    if isinstance(data, dict) and data.get(key):
        return data[key]
    return payload.get(key) or ""


def scrape_page(url: str) -> ScrapeResult:
    """Scrape ``url`` and return its markdown and raw HTML.

    Only the page's main content is requested, which keeps unrelated page
    chrome (sidebars, "trending" lists) out of the markdown. Never retries.
    """
    api_key = os.environ.get("FIRECRAWL_API_KEY")
    if not api_key:
        logger.error("FIRECRAWL_API_KEY not set, cannot scrape")
        raise ServiceNotConfigured()

    session = _get_session()
    logger.info(f"Scraping {url}")
    try:
        resp = session.post(
            SCRAPE_API_URL,
            json={
                "url": url,
                "formats": ["markdown", "rawHtml"],
                "onlyMainContent": True,
            },
            headers={"Authorization": f"Bearer {api_key}"},
            timeout=SCRAPE_TIMEOUT,
        )
    except requests.Timeout as e:
        logger.error(f"Scrape timed out for {url}: {e}")
        raise ScrapeUnavailable("Failed to scrape page: timed out") from e
    except requests.RequestException as e:
        logger.error(f"Scrape request failed for {url}: {e}")
        raise ScrapeUnavailable() from e

    if not resp.ok:
        logger.error(f"Scrape service error {resp.status_code}: {resp.text[:500]}")
        raise ScrapeUnavailable(
            f"Failed to scrape page: {resp.status_code}",
            details={"status": resp.status_code},
        )

    try:
        payload = resp.json()
    except ValueError as e:
        logger.error(f"Scrape service returned a non-JSON body for {url}")
        raise ScrapeUnavailable() from e
    if not isinstance(payload, dict):
        raise ScrapeUnavailable()

    markdown = _pick(payload, "markdown")
    raw_html = _pick(payload, "rawHtml")
    if not isinstance(markdown, str) or not markdown.strip():
        raise NoContent(details={"url": url})

    logger.info(f"Scraped content length: {len(markdown)}")
    return ScrapeResult(markdown=markdown, raw_html=raw_html if isinstance(raw_html, str) else "")
