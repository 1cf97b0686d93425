"""Pydantic models for structured game extraction."""

import logging
from typing import Literal, Optional, get_args

from pydantic import BaseModel, field_validator, model_validator

from config import MAX_DESCRIPTION_LENGTH, MAX_TITLE_LENGTH

logger = logging.getLogger(__name__)

Difficulty = Literal[
    "1 - Light",
    "2 - Medium Light",
    "3 - Medium",
    "4 - Medium Heavy",
    "5 - Heavy",
]
PlayTime = Literal[
    "0-15 Minutes",
    "15-30 Minutes",
    "30-45 Minutes",
    "45-60 Minutes",
    "60+ Minutes",
    "2+ Hours",
    "3+ Hours",
]
GameType = Literal[
    "Board Game",
    "Card Game",
    "Dice Game",
    "Party Game",
    "War Game",
    "Miniatures",
    "RPG",
    "Other",
]

DIFFICULTY_LEVELS: tuple[str, ...] = get_args(Difficulty)
PLAY_TIME_OPTIONS: tuple[str, ...] = get_args(PlayTime)
GAME_TYPE_OPTIONS: tuple[str, ...] = get_args(GameType)

DEFAULT_DIFFICULTY = "3 - Medium"
DEFAULT_PLAY_TIME = "45-60 Minutes"
DEFAULT_GAME_TYPE = "Board Game"
DEFAULT_MIN_PLAYERS = 1
DEFAULT_MAX_PLAYERS = 4
DEFAULT_SUGGESTED_AGE = "10+"

_ENUM_FIELDS = {
    "difficulty": (DIFFICULTY_LEVELS, DEFAULT_DIFFICULTY),
    "play_time": (PLAY_TIME_OPTIONS, DEFAULT_PLAY_TIME),
    "game_type": (GAME_TYPE_OPTIONS, DEFAULT_GAME_TYPE),
}
_PLAYER_DEFAULTS = {
    "min_players": DEFAULT_MIN_PLAYERS,
    "max_players": DEFAULT_MAX_PLAYERS,
}


def _dedupe_names(values: list[str]) -> list[str]:
    """Strip names and drop blanks and case-insensitive repeats, keeping order."""
    seen: set[str] = set()
    result = []
    for value in values:
        if not isinstance(value, str):
            continue
        name = " ".join(value.split())
        if name and name.casefold() not in seen:
            seen.add(name.casefold())
            result.append(name)
    return result


class ExtractedGame(BaseModel):
    """Structured fields extracted from a game page.

    Enum fields never hold a value outside their closed set: anything the
    model returns that is missing or unknown becomes the default.
    """

    title: str
    description: Optional[str] = None
    difficulty: Difficulty = DEFAULT_DIFFICULTY
    play_time: PlayTime = DEFAULT_PLAY_TIME
    game_type: GameType = DEFAULT_GAME_TYPE
    min_players: int = DEFAULT_MIN_PLAYERS
    max_players: int = DEFAULT_MAX_PLAYERS
    suggested_age: str = DEFAULT_SUGGESTED_AGE
    mechanics: list[str] = []
    publisher: Optional[str] = None
    main_image: Optional[str] = None
    gameplay_images: list[str] = []
    bgg_url: Optional[str] = None

    @field_validator("title")
    @classmethod
    def _clean_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title must not be blank")
        return v[:MAX_TITLE_LENGTH]

    @field_validator("description", mode="before")
    @classmethod
    def _clean_description(cls, v):
        if not isinstance(v, str) or not v.strip():
            return None
        return v.strip()[:MAX_DESCRIPTION_LENGTH]

    @field_validator("difficulty", "play_time", "game_type", mode="before")
    @classmethod
    def _coerce_enum(cls, v, info):
        allowed, default = _ENUM_FIELDS[info.field_name]
        if v is None or v == "":
            return default
        if v not in allowed:
            logger.warning(
                f"Extracted {info.field_name}={v!r} is not one of the allowed values, "
                f"using {default!r}"
            )
            return default
        return v

    @field_validator("min_players", "max_players", mode="before")
    @classmethod
    def _coerce_player_count(cls, v, info):
        default = _PLAYER_DEFAULTS[info.field_name]
        try:
            count = int(float(v))
        except (TypeError, ValueError, OverflowError):
            return default
        return count if count >= 1 else default

    @field_validator("suggested_age", mode="before")
    @classmethod
    def _clean_age(cls, v):
        if v is None:
            return DEFAULT_SUGGESTED_AGE
        v = str(v).strip()
        return v or DEFAULT_SUGGESTED_AGE

    @field_validator("mechanics", mode="before")
    @classmethod
    def _clean_mechanics(cls, v):
        if not isinstance(v, list):
            return []
        return _dedupe_names(v)

    @field_validator("gameplay_images", mode="before")
    @classmethod
    def _clean_images(cls, v):
        if not isinstance(v, list):
            return []
        urls = [u.strip() for u in v if isinstance(u, str) and u.strip()]
        return list(dict.fromkeys(urls))

    @field_validator("publisher", "main_image", "bgg_url", mode="before")
    @classmethod
    def _blank_to_none(cls, v):
        if not isinstance(v, str) or not v.strip():
            return None
        return v.strip()

    @model_validator(mode="after")
    def _order_player_counts(self):
        if self.min_players > self.max_players:
            if {"min_players", "max_players"} <= self.model_fields_set:
                self.min_players, self.max_players = self.max_players, self.min_players
            else:
                self.max_players = self.min_players
        return self
