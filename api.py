#!/usr/bin/env python3
"""HTTP API for administrator-triggered game imports.

Run:
    python api.py
"""

import logging
import os
import secrets
import sqlite3
from collections.abc import Iterator
from contextlib import asynccontextmanager
from typing import Callable, Literal, Optional

from dotenv import load_dotenv
load_dotenv()

import uvicorn
from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import API_HOST, API_PORT, BULK_IMPORT_MAX_URLS, SALE_CONDITIONS
from db import get_connection, init_db
from errors import CatalogImportError
from extraction.llm import ClaudeExtractor, StructuredExtractor
from extraction.page_fetcher import scrape_page
from importer import import_game, import_games
from models import ImportOptions, ScrapeResult

logger = logging.getLogger(__name__)

SaleCondition = Literal[SALE_CONDITIONS]


class PlacementOptions(BaseModel):
    """Optional placement flags shared by single and bulk imports."""

    is_coming_soon: bool = False
    is_for_sale: bool = False
    sale_price: Optional[float] = Field(None, ge=0)
    sale_condition: Optional[SaleCondition] = None
    is_expansion: bool = False
    parent_game_id: Optional[str] = None
    location_room: Optional[str] = Field(None, max_length=200)
    location_shelf: Optional[str] = Field(None, max_length=200)

    def to_options(self) -> ImportOptions:
        return ImportOptions(
            is_coming_soon=self.is_coming_soon,
            is_for_sale=self.is_for_sale,
            sale_price=self.sale_price,
            sale_condition=self.sale_condition,
            is_expansion=self.is_expansion,
            parent_game_id=self.parent_game_id,
            location_room=self.location_room,
            location_shelf=self.location_shelf,
        )


class ImportRequest(PlacementOptions):
    # Checked by the pipeline so a bad URL answers with the InvalidURL error.
    url: Optional[str] = None


class BulkImportRequest(PlacementOptions):
    urls: list[str] = Field(..., min_length=1, max_length=BULK_IMPORT_MAX_URLS)


# ──────────────────────────────────────────────
# Dependencies
# ──────────────────────────────────────────────

def get_db() -> Iterator[sqlite3.Connection]:
    conn = get_connection()
    try:
        yield conn
    finally:
        conn.close()


def get_extractor() -> StructuredExtractor:
    return ClaudeExtractor()


def get_scraper() -> Callable[[str], ScrapeResult]:
    return scrape_page


def require_admin(authorization: Optional[str] = Header(None)):
    """Allow only callers holding the administrator token."""
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Authentication required")
    token = authorization[len("Bearer "):].strip()
    expected = os.environ.get("ADMIN_API_TOKEN")
    if not expected or not secrets.compare_digest(token, expected):
        raise HTTPException(status_code=403, detail="Admin access required")


# ──────────────────────────────────────────────
# App
# ──────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(title="Game Catalog Importer", lifespan=lifespan)


@app.exception_handler(CatalogImportError)
async def catalog_import_error_handler(request: Request, exc: CatalogImportError):
    logger.warning(f"Import failed: {exc.to_dict()}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.message},
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.detail},
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"success": False, "error": "Invalid request"},
    )


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.error(f"Unexpected error on {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": CatalogImportError().message},
    )


@app.get("/health")
def health():
    return {"status": "ok"}


@app.post("/api/games/import", dependencies=[Depends(require_admin)])
def import_game_endpoint(
    payload: ImportRequest,
    conn: sqlite3.Connection = Depends(get_db),
    extractor: StructuredExtractor = Depends(get_extractor),
    scrape: Callable[[str], ScrapeResult] = Depends(get_scraper),
):
    result = import_game(
        conn, payload.url, payload.to_options(), extractor=extractor, scrape=scrape
    )
    return result.to_response()


@app.post("/api/games/import/bulk", dependencies=[Depends(require_admin)])
def bulk_import_endpoint(
    payload: BulkImportRequest,
    conn: sqlite3.Connection = Depends(get_db),
    extractor: StructuredExtractor = Depends(get_extractor),
    scrape: Callable[[str], ScrapeResult] = Depends(get_scraper),
):
    result = import_games(
        conn, payload.urls, payload.to_options(), extractor=extractor, scrape=scrape
    )
    return result.to_response()


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    uvicorn.run(app, host=API_HOST, port=API_PORT)
