"""Image URL candidates and sanitizing, by URL pattern only.

Image bytes are never fetched server-side: the image CDN rejects server
fetches that succeed in a browser, which would strip valid images.
"""

import logging
import re
from typing import Optional
from urllib.parse import urlsplit, urlunsplit

from bs4 import BeautifulSoup, NavigableString, Tag

from config import MAX_GAMEPLAY_IMAGES, TRUSTED_IMAGE_HOSTS
from models import ImageCandidate, ImageTier

logger = logging.getLogger(__name__)

_IMAGE_URL_RE = re.compile(
    r"https?://(?:" + "|".join(re.escape(h) for h in TRUSTED_IMAGE_HOSTS) + r")[^\s\"'<>]+"
)

# --- Tier patterns ---
_BOX_ART_RE = re.compile(r"_itemrep", re.IGNORECASE)
_FULL_SIZE_RE = re.compile(r"_imagepage|_original", re.IGNORECASE)
_CANDIDATE_THUMB_RE = re.compile(
    r"crop100|square30|100x100|150x150|_thumb|_avatar|_micro", re.IGNORECASE
)
# Stricter: anything this small is no use as a gameplay photo.
_LOW_RES_RE = re.compile(
    r"crop100|square30|100x100|150x150|200x200|300x300|thumb", re.IGNORECASE
)
# Full-size gallery photos
_GALLERY_RE = re.compile(r"__imagepage/|/pic\d+\.", re.IGNORECASE)

_UNSAFE_PATH_CHARS = {"(": "%28", ")": "%29", " ": "%20"}


def classify_image(url: str) -> ImageTier:
    if _CANDIDATE_THUMB_RE.search(url):
        return ImageTier.THUMBNAIL
    if _BOX_ART_RE.search(url):
        return ImageTier.BOX_ART
    if _FULL_SIZE_RE.search(url):
        return ImageTier.FULL_SIZE
    return ImageTier.OTHER


def _trim_url(url: str) -> str:
    """Drop punctuation picked up from the surrounding markup.

    Trailing ``,`` and ``;`` come from srcset lists and CSS, and ``\\`` from
    escaped quotes in script strings. A trailing ``)`` closes an unquoted
    CSS ``url(...)`` unless the URL opened it.
    """
    while True:
        if url.endswith((",", ";", "\\")):
            url = url[:-1]
        elif url.endswith(")") and url.count(")") > url.count("("):
            url = url[:-1]
        else:
            return url


def _scan(text: str) -> list[str]:
    # Gallery data is often embedded as JSON with escaped slashes
    return [_trim_url(u) for u in _IMAGE_URL_RE.findall(text.replace("\\/", "/"))]


def _find_image_urls(raw_html: str) -> list[str]:
    """Trusted-host image URLs anywhere in the page, in page order.

    Every attribute value (src, data-original, style, ...) and every text
    node (scripts included) is scanned.
    """
    soup = BeautifulSoup(raw_html, "lxml")
    found: list[str] = []
    for node in soup.descendants:
        if isinstance(node, Tag):
            for value in node.attrs.values():
                if isinstance(value, list):
                    value = " ".join(value)
                if isinstance(value, str):
                    found.extend(_scan(value))
        elif isinstance(node, NavigableString):
            found.extend(_scan(str(node)))
    return list(dict.fromkeys(u for u in found if u))


def extract_image_candidates(raw_html: Optional[str]) -> list[ImageCandidate]:
    """Find trusted-host image URLs in raw HTML, best first.

    Box art ranks first, then full-size photos, then everything else.
    Thumbnails are returned only when nothing better was found.
    """
    if not raw_html:
        return []

    urls = _find_image_urls(raw_html)
    candidates = [ImageCandidate(url=u, tier=classify_image(u)) for u in urls]

    usable = [c for c in candidates if c.tier != ImageTier.THUMBNAIL]
    if usable:
        candidates = usable
    ranked = sorted(candidates, key=lambda c: c.tier)

    logger.info(f"Found {len(ranked)} image candidates ({len(urls)} unique URLs)")
    return ranked


def _encode_unsafe(text: str) -> str:
    for char, encoded in _UNSAFE_PATH_CHARS.items():
        text = text.replace(char, encoded)
    return text


def sanitize_image_url(url: str) -> str:
    """Percent-encode characters the image CDN rejects.

    Filter segments such as ``no_upscale()`` answer HTTP 400 unless their
    parentheses are encoded. Already-encoded sequences are left alone.
    """
    url = url.strip()
    try:
        parts = urlsplit(url)
    except ValueError:
        return _encode_unsafe(url)
    if not parts.scheme or not parts.netloc:
        return _encode_unsafe(url)
    return urlunsplit(parts._replace(path=_encode_unsafe(parts.path)))


def _is_gameplay_image(url: str) -> bool:
    return not _LOW_RES_RE.search(url) and not _BOX_ART_RE.search(url)


def filter_gameplay_images(
    images: list[str], main_image: Optional[str] = None
) -> list[str]:
    """Sanitize, drop thumbnails and box art, dedupe, cap."""
    result: list[str] = []
    for img in images:
        if not isinstance(img, str) or not img.strip():
            continue
        clean = sanitize_image_url(img)
        if not _is_gameplay_image(clean) or clean == main_image or clean in result:
            continue
        result.append(clean)
        if len(result) >= MAX_GAMEPLAY_IMAGES:
            break
    return result


def select_images(
    main_image: Optional[str],
    gameplay_images: list[str],
    candidates: list[ImageCandidate],
) -> tuple[Optional[str], list[str]]:
    """Pick the final (main, secondary) images for a record.

    Uses what the extractor chose, falling back to the ranked scrape
    candidates for whatever it left out. A thumbnail is never kept as the
    main image.
    """
    if main_image and classify_image(main_image) == ImageTier.THUMBNAIL:
        logger.warning(f"Extracted main image is a thumbnail, ignoring: {main_image}")
        main_image = None

    if main_image:
        main = sanitize_image_url(main_image)
    else:
        fallback = next(
            (c.url for c in candidates if c.tier != ImageTier.THUMBNAIL), None
        )
        main = sanitize_image_url(fallback) if fallback else None
        if main:
            logger.info(f"No main image extracted, using candidate {main}")

    secondary = filter_gameplay_images(gameplay_images, main)
    if not secondary:
        gallery = [c.url for c in candidates if _GALLERY_RE.search(c.url)]
        secondary = filter_gameplay_images(gallery, main)

    return main, secondary
