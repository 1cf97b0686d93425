"""Settings for the game catalog importer."""

import os

DB_PATH = os.environ.get("CATALOG_DB_PATH", "catalog.db")

# Scrape service (Firecrawl-compatible)
SCRAPE_API_URL = os.environ.get(
    "SCRAPE_API_URL", "https://api.firecrawl.dev/v1/scrape"
)
SCRAPE_TIMEOUT = int(os.environ.get("SCRAPE_TIMEOUT", "60"))  # seconds

# AI extraction settings
EXTRACTION_MODEL = os.environ.get("EXTRACTION_MODEL", "claude-sonnet-4-5-20250929")
EXTRACTION_MAX_TOKENS = 4096
EXTRACTION_TIMEOUT = float(os.environ.get("EXTRACTION_TIMEOUT", "90"))  # seconds
EXTRACTION_TOOL_NAME = "extract_game_data"
MARKDOWN_CHAR_BUDGET = 18000  # upstream request-size limit
PROMPT_IMAGE_CANDIDATES = 12  # how many ranked images the model gets to pick from

# Images
TRUSTED_IMAGE_HOSTS = ("cf.geekdo-images.com",)
MAX_GAMEPLAY_IMAGES = 2

# Record limits
MAX_TITLE_LENGTH = 500
MAX_DESCRIPTION_LENGTH = 10000

# Bulk import
BULK_IMPORT_MAX_URLS = 50
BULK_IMPORT_DELAY = 0.5  # seconds between imports

# HTTP API
API_HOST = os.environ.get("API_HOST", "127.0.0.1")
API_PORT = int(os.environ.get("API_PORT", "8000"))

SALE_CONDITIONS = (
    "New/Sealed",
    "Like New",
    "Very Good",
    "Good",
    "Acceptable",
)
