"""SQLite database operations for the game catalog."""

import json
import sqlite3
import uuid
from dataclasses import fields
from datetime import datetime, timezone
from typing import Optional

from config import DB_PATH
from models import GameRecord


def now_utc() -> str:
    """Return current time in UTC as ISO format string."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


def new_id() -> str:
    return str(uuid.uuid4())


SCHEMA = """
CREATE TABLE IF NOT EXISTS publishers (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL UNIQUE COLLATE NOCASE,
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS mechanics (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL UNIQUE COLLATE NOCASE,
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS games (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    slug TEXT,
    description TEXT,
    image_url TEXT,
    additional_images TEXT DEFAULT '[]',
    min_players INTEGER DEFAULT 1,
    max_players INTEGER DEFAULT 4,
    play_time TEXT DEFAULT '45-60 Minutes',
    difficulty TEXT DEFAULT '3 - Medium',
    game_type TEXT DEFAULT 'Board Game',
    suggested_age TEXT DEFAULT '10+',
    publisher_id TEXT REFERENCES publishers(id),
    source_url TEXT NOT NULL UNIQUE,
    bgg_url TEXT,
    is_expansion BOOLEAN NOT NULL DEFAULT 0,
    parent_game_id TEXT REFERENCES games(id),
    is_coming_soon BOOLEAN NOT NULL DEFAULT 0,
    is_for_sale BOOLEAN NOT NULL DEFAULT 0,
    sale_price REAL,
    sale_condition TEXT,
    location_room TEXT,
    location_shelf TEXT,
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
);

CREATE INDEX IF NOT EXISTS idx_games_slug ON games(slug);

CREATE TABLE IF NOT EXISTS game_mechanics (
    game_id TEXT NOT NULL REFERENCES games(id) ON DELETE CASCADE,
    mechanic_id TEXT NOT NULL REFERENCES mechanics(id) ON DELETE CASCADE,
    UNIQUE(game_id, mechanic_id)
);
"""

# Tables whose rows are keyed on a unique name.
_NAMED_TABLES = ("mechanics", "publishers")

_GAME_COLUMNS = [f.name for f in fields(GameRecord)]
_BOOL_COLUMNS = ("is_expansion", "is_coming_soon", "is_for_sale")


def get_connection(db_path: str = DB_PATH) -> sqlite3.Connection:
    # FastAPI may resolve the dependency and run the handler on different threads.
    conn = sqlite3.connect(db_path, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys=ON")
    return conn


def init_db(db_path: str = DB_PATH):
    conn = get_connection(db_path)
    conn.executescript(SCHEMA)
    conn.close()


def find_or_create_named(conn: sqlite3.Connection, table: str, name: str) -> str:
    """Return the id of the row called ``name``, inserting it if absent.

    The unique index on ``name`` settles concurrent inserts; the loser's
    insert is a no-op and both read back the same id.
    """
    if table not in _NAMED_TABLES:
        raise ValueError(f"Not a named table: {table}")
    conn.execute(
        f"INSERT INTO {table} (id, name) VALUES (?, ?) ON CONFLICT(name) DO NOTHING",
        (new_id(), name),
    )
    row = conn.execute(f"SELECT id FROM {table} WHERE name = ?", (name,)).fetchone()
    return row["id"]


def get_game_id_by_source_url(conn: sqlite3.Connection, source_url: str) -> Optional[str]:
    row = conn.execute(
        "SELECT id FROM games WHERE source_url = ?", (source_url,)
    ).fetchone()
    return row["id"] if row else None


def upsert_game(conn: sqlite3.Connection, record: GameRecord) -> tuple[str, bool]:
    """Insert or update the game keyed on its source URL.

    Returns (game_id, created). Does not commit.
    """
    existing_id = get_game_id_by_source_url(conn, record.source_url)
    now = now_utc()

    values = record.to_dict()
    values["additional_images"] = json.dumps(values["additional_images"])

    columns = ["id", *_GAME_COLUMNS, "created_at", "updated_at"]
    placeholders = ", ".join("?" for _ in columns)
    updates = ", ".join(
        f"{col} = excluded.{col}" for col in _GAME_COLUMNS if col != "source_url"
    )
    conn.execute(
        f"""INSERT INTO games ({", ".join(columns)})
            VALUES ({placeholders})
            ON CONFLICT(source_url) DO UPDATE SET {updates},
                updated_at = excluded.updated_at""",
        (new_id(), *(values[col] for col in _GAME_COLUMNS), now, now),
    )
    game_id = get_game_id_by_source_url(conn, record.source_url)
    return game_id, existing_id is None


def replace_game_mechanics(
    conn: sqlite3.Connection, game_id: str, mechanic_ids: list[str]
):
    conn.execute("DELETE FROM game_mechanics WHERE game_id = ?", (game_id,))
    conn.executemany(
        "INSERT OR IGNORE INTO game_mechanics (game_id, mechanic_id) VALUES (?, ?)",
        [(game_id, mechanic_id) for mechanic_id in mechanic_ids],
    )


def _game_row_to_dict(row: sqlite3.Row) -> dict:
    game = dict(row)
    game["additional_images"] = json.loads(game.get("additional_images") or "[]")
    for col in _BOOL_COLUMNS:
        game[col] = bool(game[col])
    return game


def get_game(conn: sqlite3.Connection, game_id: str) -> Optional[dict]:
    row = conn.execute("SELECT * FROM games WHERE id = ?", (game_id,)).fetchone()
    return _game_row_to_dict(row) if row else None


def get_game_by_source_url(conn: sqlite3.Connection, source_url: str) -> Optional[dict]:
    row = conn.execute(
        "SELECT * FROM games WHERE source_url = ?", (source_url,)
    ).fetchone()
    return _game_row_to_dict(row) if row else None


def get_game_mechanic_names(conn: sqlite3.Connection, game_id: str) -> list[str]:
    rows = conn.execute(
        """SELECT m.name FROM mechanics m
            JOIN game_mechanics gm ON gm.mechanic_id = m.id
            WHERE gm.game_id = ?
            ORDER BY m.name""",
        (game_id,),
    ).fetchall()
    return [r["name"] for r in rows]


def get_publisher_name(conn: sqlite3.Connection, publisher_id: Optional[str]) -> Optional[str]:
    if not publisher_id:
        return None
    row = conn.execute(
        "SELECT name FROM publishers WHERE id = ?", (publisher_id,)
    ).fetchone()
    return row["name"] if row else None


def count_rows(conn: sqlite3.Connection, table: str) -> int:
    if table not in (*_NAMED_TABLES, "games", "game_mechanics"):
        raise ValueError(f"Unknown table: {table}")
    return conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
