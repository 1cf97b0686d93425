"""Input and content guardrails for the import pipeline.

Both checks fail closed: a URL that does not validate never reaches the
network, and a scrape that does not mention the requested game never
reaches extraction.
"""

import logging
import re
from typing import Optional
from urllib.parse import urlparse

from errors import ContentMismatch, InvalidURL

logger = logging.getLogger(__name__)

_ALLOWED_SCHEMES = ("http", "https")

# First purely numeric path segment: /boardgame/266192/wingspan -> 266192
_SOURCE_ID_RE = re.compile(r"/(\d+)(?=/|$)")


def validate_url(url) -> str:
    """Return the stripped URL, or raise InvalidURL."""
    if not isinstance(url, str) or not url.strip():
        raise InvalidURL("URL is required")
    url = url.strip()
    try:
        parsed = urlparse(url)
    except ValueError as e:
        raise InvalidURL(details={"url": url, "reason": str(e)}) from e
    if parsed.scheme.lower() not in _ALLOWED_SCHEMES or not parsed.hostname:
        raise InvalidURL(details={"url": url})
    return url


def extract_source_id(url: str) -> Optional[str]:
    """Extract the numeric catalog id embedded in a source URL path.

    Examples:
      https://boardgamegeek.com/boardgame/266192/wingspan → '266192'
      https://source.example/item/42/foo → '42'
      https://source.example/search?q=wingspan → None
    """
    match = _SOURCE_ID_RE.search(urlparse(url).path)
    return match.group(1) if match else None


def check_content_match(url: str, markdown: Optional[str]):
    """Raise ContentMismatch if the scraped page is not about ``url``.

    The source site serves a generic page (e.g. "hotness" listings) when it
    blocks a scrape, so the markdown has to mention the requested id or the
    URL itself. Skipped when the URL carries no id.
    """
    source_id = extract_source_id(url)
    if not source_id:
        logger.debug(f"No source id in {url}, skipping content match")
        return

    text = markdown if isinstance(markdown, str) else ""
    if source_id in text or url.lower() in text.lower():
        return

    logger.error(
        f"Scrape mismatch: content does not appear to be for requested page "
        f"{url} (id={source_id})"
    )
    raise ContentMismatch(details={"url": url, "source_id": source_id})
