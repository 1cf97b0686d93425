"""Claude tool-call extraction for structured game data."""

import logging
import os
from typing import Optional, Protocol

import anthropic
from pydantic import ValidationError

from config import (
    EXTRACTION_MAX_TOKENS,
    EXTRACTION_MODEL,
    EXTRACTION_TIMEOUT,
    EXTRACTION_TOOL_NAME,
    MARKDOWN_CHAR_BUDGET,
    PROMPT_IMAGE_CANDIDATES,
)
from errors import ExtractionFailed, NoTitleFound, ServiceNotConfigured, UpstreamBusy
from extraction.models import (
    DIFFICULTY_LEVELS,
    GAME_TYPE_OPTIONS,
    PLAY_TIME_OPTIONS,
    ExtractedGame,
)
from models import ImageCandidate

logger = logging.getLogger(__name__)

# Quota, rate limit and capacity statuses. 529 is Anthropic's "overloaded".
_BUSY_STATUSES = (402, 429, 503, 529)


def _quoted(values) -> str:
    return ", ".join(f'"{v}"' for v in values)


_SYSTEM_PROMPT = f"""You are a board game data extraction expert. Extract detailed, structured game information from the provided page content.

IMPORTANT RULES:

1. For enum fields, you MUST use these EXACT values:
   - difficulty: {_quoted(DIFFICULTY_LEVELS)}
   - play_time: {_quoted(PLAY_TIME_OPTIONS)}
   - game_type: {_quoted(GAME_TYPE_OPTIONS)}

2. For the description, write a detailed markdown description (300-500 words):
   - An engaging overview paragraph about the game
   - A "## Quick Gameplay Overview" section with **Goal:**, **On Your Turn:** (numbered list), **Scoring:** and **End Game:**
   - A closing paragraph about the game's appeal

3. For images:
   - You are given a numbered list of candidate image URLs, best box art first.
   - main_image MUST be copied verbatim from that list, preferring an "_itemrep" (box art) URL.
   - gameplay_images: at most 2 URLs copied verbatim from that list showing gameplay or components. Never box art, never thumbnails.
   - NEVER invent, shorten or edit an image URL. If nothing fits, leave the field out.

4. For mechanics, list actual game mechanics (e.g. "Worker Placement", "Set Collection", "Dice Rolling").

5. For publisher, give the publisher company name."""

_USER_TEMPLATE = """Extract comprehensive board game data from this page content.

TARGET PAGE (must match): {url}

CANDIDATE IMAGES:
{images}

Page content:
{markdown}"""


def _tool_definition() -> dict:
    return {
        "name": EXTRACTION_TOOL_NAME,
        "description": "Extract structured game data from page content",
        "input_schema": {
            "type": "object",
            "properties": {
                "title": {"type": "string", "description": "The game title"},
                "description": {
                    "type": "string",
                    "description": "Markdown description with overview, Quick Gameplay Overview and closing paragraph",
                },
                "difficulty": {
                    "type": "string",
                    "enum": list(DIFFICULTY_LEVELS),
                    "description": "Difficulty level",
                },
                "play_time": {
                    "type": "string",
                    "enum": list(PLAY_TIME_OPTIONS),
                    "description": "Play time category",
                },
                "game_type": {
                    "type": "string",
                    "enum": list(GAME_TYPE_OPTIONS),
                    "description": "Type of game",
                },
                "min_players": {"type": "integer", "minimum": 1, "description": "Minimum player count"},
                "max_players": {"type": "integer", "minimum": 1, "description": "Maximum player count"},
                "suggested_age": {"type": "string", "description": "Suggested age (e.g. '10+')"},
                "mechanics": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Game mechanics like Worker Placement, Set Collection",
                },
                "publisher": {"type": "string", "description": "Publisher name"},
                "main_image": {
                    "type": "string",
                    "description": "Box art URL, copied verbatim from the candidate list",
                },
                "gameplay_images": {
                    "type": "array",
                    "items": {"type": "string"},
                    "maxItems": 2,
                    "description": "Up to 2 gameplay/component photo URLs from the candidate list",
                },
                "bgg_url": {"type": "string", "description": "BoardGameGeek URL if available"},
            },
            "required": ["title"],
            "additionalProperties": False,
        },
    }


def format_image_candidates(candidates: list[ImageCandidate]) -> str:
    """Format ranked candidates as a numbered list for the prompt."""
    shown = candidates[:PROMPT_IMAGE_CANDIDATES]
    if not shown:
        return "No images found"
    return "\n".join(
        f"{i}. [{c.tier.name.lower()}] {c.url}" for i, c in enumerate(shown, 1)
    )


class StructuredExtractor(Protocol):
    def extract(
        self, markdown: str, candidates: list[ImageCandidate], source_url: str
    ) -> ExtractedGame:
        ...


class ClaudeExtractor:
    """Extract game data with a single forced tool call."""

    def __init__(self, client: Optional[anthropic.Anthropic] = None, model: str = EXTRACTION_MODEL):
        self._client = client
        self.model = model

    def _get_client(self) -> anthropic.Anthropic:
        if self._client is None:
            if not os.environ.get("ANTHROPIC_API_KEY"):
                logger.error("ANTHROPIC_API_KEY not set, cannot extract")
                raise ServiceNotConfigured()
            # No SDK retries: the caller decides whether to try again.
            self._client = anthropic.Anthropic(timeout=EXTRACTION_TIMEOUT, max_retries=0)
        return self._client

    def extract(
        self, markdown: str, candidates: list[ImageCandidate], source_url: str
    ) -> ExtractedGame:
        client = self._get_client()
        prompt = _USER_TEMPLATE.format(
            url=source_url,
            images=format_image_candidates(candidates),
            markdown=markdown[:MARKDOWN_CHAR_BUDGET],
        )

        logger.info(f"Extracting game data with {self.model}...")
        try:
            response = client.messages.create(
                model=self.model,
                max_tokens=EXTRACTION_MAX_TOKENS,
                system=_SYSTEM_PROMPT,
                messages=[{"role": "user", "content": prompt}],
                tools=[_tool_definition()],
                tool_choice={"type": "tool", "name": EXTRACTION_TOOL_NAME},
            )
        except anthropic.APIConnectionError as e:
            # Includes APITimeoutError
            logger.error(f"AI service unreachable: {e}")
            raise UpstreamBusy(details={"reason": type(e).__name__}) from e
        except anthropic.APIStatusError as e:
            logger.error(f"AI extraction error {e.status_code}: {e.message}")
            if e.status_code in _BUSY_STATUSES:
                raise UpstreamBusy(details={"status": e.status_code}) from e
            raise ExtractionFailed(
                "Failed to extract game data", status_code=500,
                details={"status": e.status_code},
            ) from e

        return parse_tool_response(response)


def parse_tool_response(response) -> ExtractedGame:
    """Turn a Messages API response into an ExtractedGame.

    Exactly one ``tool_use`` block for the extraction tool must be present.
    """
    calls = [
        block for block in (getattr(response, "content", None) or [])
        if getattr(block, "type", None) == "tool_use"
        and getattr(block, "name", None) == EXTRACTION_TOOL_NAME
    ]
    if len(calls) != 1:
        logger.error(f"Expected one {EXTRACTION_TOOL_NAME} call, got {len(calls)}")
        raise ExtractionFailed(details={"tool_calls": len(calls)})

    data = calls[0].input
    if not isinstance(data, dict):
        raise ExtractionFailed(details={"reason": "tool input is not an object"})

    title = data.get("title")
    if not isinstance(title, str) or not title.strip():
        raise NoTitleFound()

    try:
        game = ExtractedGame(**data)
    except ValidationError as e:
        logger.error(f"Extracted data failed validation: {e}")
        raise ExtractionFailed(details={"reason": "validation"}) from e

    logger.info(f"Extracted '{game.title}' ({len(game.mechanics)} mechanics)")
    return game
