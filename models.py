"""Data models for the game catalog importer."""

from dataclasses import dataclass, field, asdict
from enum import IntEnum
from typing import Optional


@dataclass
class ScrapeResult:
    markdown: str
    raw_html: str = ""


class ImageTier(IntEnum):
    """Quality tier of an image URL. Lower sorts first."""

    BOX_ART = 0
    FULL_SIZE = 1
    OTHER = 2
    THUMBNAIL = 3


@dataclass(frozen=True)
class ImageCandidate:
    url: str
    tier: ImageTier


@dataclass(frozen=True)
class ImportOptions:
    """Placement flags supplied by the administrator alongside the URL."""

    is_coming_soon: bool = False
    is_for_sale: bool = False
    sale_price: Optional[float] = None
    sale_condition: Optional[str] = None  # one of config.SALE_CONDITIONS
    is_expansion: bool = False
    parent_game_id: Optional[str] = None
    location_room: Optional[str] = None
    location_shelf: Optional[str] = None


@dataclass
class GameRecord:
    """Every column the pipeline writes to a games row."""

    title: str
    source_url: str
    slug: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    additional_images: list[str] = field(default_factory=list)
    difficulty: str = "3 - Medium"
    game_type: str = "Board Game"
    play_time: str = "45-60 Minutes"
    min_players: int = 1
    max_players: int = 4
    suggested_age: str = "10+"
    publisher_id: Optional[str] = None
    bgg_url: Optional[str] = None
    is_coming_soon: bool = False
    is_for_sale: bool = False
    sale_price: Optional[float] = None
    sale_condition: Optional[str] = None
    is_expansion: bool = False
    parent_game_id: Optional[str] = None
    location_room: Optional[str] = None
    location_shelf: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ImportResult:
    game: dict
    created: bool
    mechanics: list[str] = field(default_factory=list)
    publisher: Optional[str] = None

    def to_response(self) -> dict:
        return {
            "success": True,
            "game": {**self.game, "mechanics": self.mechanics, "publisher": self.publisher},
        }


@dataclass
class BulkImportResult:
    imported: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)
    games: list[dict] = field(default_factory=list)

    def to_response(self) -> dict:
        return {"success": True, **asdict(self)}
