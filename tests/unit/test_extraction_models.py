"""
Unit tests for ExtractedGame validation and defaulting.
"""

import pytest
from pydantic import ValidationError

from config import MAX_DESCRIPTION_LENGTH, MAX_TITLE_LENGTH
from extraction.models import (
    DIFFICULTY_LEVELS,
    GAME_TYPE_OPTIONS,
    PLAY_TIME_OPTIONS,
    ExtractedGame,
)


class TestEnumFields:

    def test_allowed_values_kept(self):
        game = ExtractedGame(
            title="Brass", difficulty="4 - Medium Heavy", play_time="2+ Hours", game_type="Board Game"
        )
        assert game.difficulty == "4 - Medium Heavy"
        assert game.play_time == "2+ Hours"

    def test_unknown_difficulty_defaulted(self):
        game = ExtractedGame(title="Brass", difficulty="6 - Brutal")
        assert game.difficulty == "3 - Medium"
        assert game.difficulty in DIFFICULTY_LEVELS

    def test_unknown_play_time_and_type_defaulted(self):
        game = ExtractedGame(title="Brass", play_time="forever", game_type="Legacy")
        assert game.play_time == "45-60 Minutes"
        assert game.game_type == "Board Game"

    def test_missing_values_defaulted(self):
        game = ExtractedGame(title="Brass", difficulty=None, play_time="")
        assert game.difficulty == "3 - Medium"
        assert game.play_time in PLAY_TIME_OPTIONS
        assert game.game_type in GAME_TYPE_OPTIONS

    def test_unknown_value_logged(self, caplog):
        ExtractedGame(title="Brass", difficulty="Impossible")
        assert "Impossible" in caplog.text


class TestPlayerCounts:

    def test_defaults(self):
        game = ExtractedGame(title="Azul")
        assert (game.min_players, game.max_players) == (1, 4)

    def test_numeric_strings_and_floats(self):
        game = ExtractedGame(title="Azul", min_players="2", max_players=4.0)
        assert (game.min_players, game.max_players) == (2, 4)

    def test_zero_or_garbage_defaulted(self):
        game = ExtractedGame(title="Azul", min_players=0, max_players="lots")
        assert (game.min_players, game.max_players) == (1, 4)

    @pytest.mark.parametrize("value", [float("inf"), float("-inf"), float("nan"), "1e999"])
    def test_non_finite_defaulted(self, value):
        game = ExtractedGame(title="Azul", min_players=value, max_players=value)
        assert (game.min_players, game.max_players) == (1, 4)

    def test_inverted_counts_swapped(self):
        game = ExtractedGame(title="Azul", min_players=5, max_players=2)
        assert (game.min_players, game.max_players) == (2, 5)

    def test_max_raised_to_min_when_only_min_given(self):
        game = ExtractedGame(title="Azul", min_players=6)
        assert (game.min_players, game.max_players) == (6, 6)


class TestTextFields:

    def test_blank_title_rejected(self):
        with pytest.raises(ValidationError):
            ExtractedGame(title="   ")

    def test_title_stripped_and_truncated(self):
        game = ExtractedGame(title="  " + "x" * (MAX_TITLE_LENGTH + 50) + "  ")
        assert game.title == "x" * MAX_TITLE_LENGTH

    def test_description_truncated(self):
        game = ExtractedGame(title="Azul", description="d" * (MAX_DESCRIPTION_LENGTH + 1))
        assert len(game.description) == MAX_DESCRIPTION_LENGTH

    def test_blank_optional_strings_become_none(self):
        game = ExtractedGame(title="Azul", description=" ", publisher="", main_image="  ", bgg_url=None)
        assert game.description is None
        assert game.publisher is None
        assert game.main_image is None

    def test_suggested_age_default(self):
        assert ExtractedGame(title="Azul").suggested_age == "10+"
        assert ExtractedGame(title="Azul", suggested_age=8).suggested_age == "8"


class TestLists:

    def test_mechanics_deduplicated_case_insensitively(self):
        game = ExtractedGame(
            title="Agricola",
            mechanics=["Worker Placement", "worker placement", " ", "Set  Collection", 7],
        )
        assert game.mechanics == ["Worker Placement", "Set Collection"]

    def test_non_list_mechanics(self):
        assert ExtractedGame(title="Agricola", mechanics="Worker Placement").mechanics == []

    def test_gameplay_images_deduplicated(self):
        url = "https://cf.geekdo-images.com/a/pic1.jpg"
        game = ExtractedGame(title="Agricola", gameplay_images=[url, f" {url} ", ""])
        assert game.gameplay_images == [url]

    def test_unknown_keys_ignored(self):
        game = ExtractedGame(title="Agricola", image_url="https://x.example/a.jpg")
        assert not hasattr(game, "image_url")
