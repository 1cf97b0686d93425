"""Entity resolution and the game upsert."""

import logging
import re
import sqlite3
from typing import Optional
from urllib.parse import urlparse

import db
from errors import PersistenceError
from extraction.models import ExtractedGame
from models import GameRecord, ImportOptions

logger = logging.getLogger(__name__)


def _clean_name(name) -> Optional[str]:
    if not isinstance(name, str):
        return None
    name = " ".join(name.split())
    return name or None


def _find_or_create(conn: sqlite3.Connection, table: str, name: str) -> str:
    try:
        with conn:
            return db.find_or_create_named(conn, table, name)
    except sqlite3.Error as e:
        logger.error(f"Failed to resolve {table} '{name}': {e}")
        raise PersistenceError(details={"table": table, "name": name}) from e


def resolve_mechanics(conn: sqlite3.Connection, names: list[str]) -> list[str]:
    """Find or create each mechanic by name. Returns their ids.

    Each mechanic commits on its own: if a later one fails, the earlier ones
    stay and a future import reuses them.
    """
    ids: list[str] = []
    for raw in names:
        name = _clean_name(raw)
        if not name:
            continue
        mechanic_id = _find_or_create(conn, "mechanics", name)
        if mechanic_id not in ids:
            ids.append(mechanic_id)
    return ids


def resolve_publisher(conn: sqlite3.Connection, name: Optional[str]) -> Optional[str]:
    name = _clean_name(name)
    if not name:
        return None
    return _find_or_create(conn, "publishers", name)


def slugify(title: str) -> str:
    """'Ticket to Ride: Europe' → 'ticket-to-ride-europe'."""
    slug = re.sub(r"[^\w\s-]", "", title.lower())
    return re.sub(r"[\s_-]+", "-", slug).strip("-")


def _derive_bgg_url(extracted: Optional[str], source_url: str) -> Optional[str]:
    if extracted:
        return extracted
    host = urlparse(source_url).hostname or ""
    return source_url if host.endswith("boardgamegeek.com") else None


def build_game_record(
    source_url: str,
    game: ExtractedGame,
    options: ImportOptions,
    main_image: Optional[str],
    gameplay_images: list[str],
    publisher_id: Optional[str],
) -> GameRecord:
    """Assemble the row written for an import.

    Sale fields only apply to games for sale and the parent only to
    expansions; blank locations are stored as NULL.
    """
    for_sale = options.is_for_sale is True
    expansion = options.is_expansion is True
    return GameRecord(
        title=game.title,
        source_url=source_url,
        slug=slugify(game.title) or None,
        description=game.description,
        image_url=main_image,
        additional_images=list(gameplay_images),
        difficulty=game.difficulty,
        game_type=game.game_type,
        play_time=game.play_time,
        min_players=game.min_players,
        max_players=game.max_players,
        suggested_age=game.suggested_age,
        publisher_id=publisher_id,
        bgg_url=_derive_bgg_url(game.bgg_url, source_url),
        is_coming_soon=options.is_coming_soon is True,
        is_for_sale=for_sale,
        sale_price=float(options.sale_price) if for_sale and options.sale_price else None,
        sale_condition=options.sale_condition if for_sale and options.sale_condition else None,
        is_expansion=expansion,
        parent_game_id=options.parent_game_id if expansion and options.parent_game_id else None,
        location_room=options.location_room or None,
        location_shelf=options.location_shelf or None,
    )


def save_game(
    conn: sqlite3.Connection, record: GameRecord, mechanic_ids: list[str]
) -> tuple[str, bool]:
    """Upsert the game on its source URL and replace its mechanic links.

    The row and its links are written in one transaction.
    Returns (game_id, created).
    """
    try:
        with conn:
            game_id, created = db.upsert_game(conn, record)
            db.replace_game_mechanics(conn, game_id, mechanic_ids)
    except sqlite3.Error as e:
        logger.error(f"Failed to save game '{record.title}' ({record.source_url}): {e}")
        raise PersistenceError(details={"source_url": record.source_url}) from e

    logger.info(
        f"{'Created' if created else 'Updated'} game '{record.title}' "
        f"with {len(mechanic_ids)} mechanics"
    )
    return game_id, created
