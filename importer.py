#!/usr/bin/env python3
"""Import games into the catalog from game page URLs."""

import argparse
import logging
import sqlite3
import sys
import time
from pathlib import Path
from typing import Callable, Optional

from dotenv import load_dotenv
load_dotenv()

from catalog import build_game_record, resolve_mechanics, resolve_publisher, save_game
from config import BULK_IMPORT_DELAY, SALE_CONDITIONS
from db import get_connection, get_game, get_game_mechanic_names, get_publisher_name, init_db
from errors import CatalogImportError
from extraction.extractor import extract_game_from_url
from extraction.guardrails import validate_url
from extraction.images import select_images
from extraction.llm import StructuredExtractor
from extraction.page_fetcher import scrape_page
from models import BulkImportResult, ImportOptions, ImportResult, ScrapeResult

logger = logging.getLogger(__name__)


def import_game(
    conn: sqlite3.Connection,
    url: str,
    options: Optional[ImportOptions] = None,
    extractor: Optional[StructuredExtractor] = None,
    scrape: Callable[[str], ScrapeResult] = scrape_page,
) -> ImportResult:
    """Run the full import pipeline for one game page.

    Raises a CatalogImportError subclass at the first failing stage.
    Re-importing the same URL updates the existing game.
    """
    url = validate_url(url)
    options = options or ImportOptions()
    logger.info(f"Importing game from URL: {url}")

    game, candidates = extract_game_from_url(url, extractor=extractor, scrape=scrape)

    mechanic_ids = resolve_mechanics(conn, game.mechanics)
    publisher_id = resolve_publisher(conn, game.publisher)

    main_image, gameplay_images = select_images(
        game.main_image, game.gameplay_images, candidates
    )

    record = build_game_record(
        url, game, options, main_image, gameplay_images, publisher_id
    )
    game_id, created = save_game(conn, record, mechanic_ids)

    logger.info(f"Game imported successfully: {record.title}")
    return ImportResult(
        game=get_game(conn, game_id),
        created=created,
        mechanics=get_game_mechanic_names(conn, game_id),
        publisher=get_publisher_name(conn, publisher_id),
    )


def import_games(
    conn: sqlite3.Connection,
    urls: list[str],
    options: Optional[ImportOptions] = None,
    extractor: Optional[StructuredExtractor] = None,
    scrape: Callable[[str], ScrapeResult] = scrape_page,
    delay: float = BULK_IMPORT_DELAY,
) -> BulkImportResult:
    """Import several URLs one after another, collecting failures."""
    result = BulkImportResult()
    total = len(urls)
    for i, url in enumerate(urls, 1):
        try:
            imported = import_game(conn, url, options, extractor=extractor, scrape=scrape)
            result.imported += 1
            result.games.append({"title": imported.game["title"], "id": imported.game["id"]})
        except CatalogImportError as e:
            logger.warning(f"  Failed to import {url}: {e.message}")
            result.failed += 1
            result.errors.append(f"{url}: {e.message}")
        if i < total and delay:
            time.sleep(delay)

    logger.info(f"=== Bulk import done: {result.imported}/{total} imported ===")
    return result


def read_urls(path: Path) -> list[str]:
    """Read one URL per line, skipping blanks and # comments."""
    urls = []
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            urls.append(line)
    return urls


def main():
    parser = argparse.ArgumentParser(description="Import games from catalog page URLs")
    parser.add_argument("urls", nargs="*", help="Game page URLs")
    parser.add_argument("--file", type=Path, help="File with one URL per line")
    parser.add_argument("--coming-soon", action="store_true", help="Mark as coming soon")
    parser.add_argument("--for-sale", action="store_true", help="Mark as for sale")
    parser.add_argument("--price", type=float, help="Sale price (with --for-sale)")
    parser.add_argument("--condition", choices=SALE_CONDITIONS, help="Sale condition (with --for-sale)")
    parser.add_argument("--expansion-of", metavar="GAME_ID", help="Import as an expansion of GAME_ID")
    parser.add_argument("--room", help="Location room")
    parser.add_argument("--shelf", help="Location shelf")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    urls = list(args.urls)
    if args.file:
        urls.extend(read_urls(args.file))
    if not urls:
        parser.error("give at least one URL or --file")

    options = ImportOptions(
        is_coming_soon=args.coming_soon,
        is_for_sale=args.for_sale,
        sale_price=args.price,
        sale_condition=args.condition,
        is_expansion=bool(args.expansion_of),
        parent_game_id=args.expansion_of,
        location_room=args.room,
        location_shelf=args.shelf,
    )

    init_db()
    conn = get_connection()
    try:
        result = import_games(conn, urls, options)
    finally:
        conn.close()

    for game in result.games:
        logger.info(f"  OK: {game['title']} ({game['id']})")
    for error in result.errors:
        logger.error(f"  FAILED: {error}")
    sys.exit(1 if result.failed else 0)


if __name__ == "__main__":
    main()
