"""Typed failures for the catalog import pipeline.

Every stage raises a subclass of CatalogImportError. The HTTP layer maps
``status_code`` straight onto the response, and ``message`` is safe to show
to an administrator.

    CatalogImportError
    ├── InvalidURL              400
    ├── ScrapeUnavailable       502
    ├── NoContent               400
    ├── ContentMismatch         502
    ├── ExtractionFailed        400 / 500
    ├── NoTitleFound            400
    ├── UpstreamBusy            503
    ├── PersistenceError        500
    └── ServiceNotConfigured    500
"""

from typing import Any, Optional


class CatalogImportError(Exception):
    """Base class for import failures.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code
        status_code: HTTP status the endpoint answers with
        details: Extra context for logs
    """

    default_code: str = "IMPORT_ERROR"
    default_message: str = "Import failed. Please try again."
    default_status: int = 500

    def __init__(
        self,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.message = message or self.default_message
        self.code = self.default_code
        self.status_code = status_code or self.default_status
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "status_code": self.status_code,
            "details": self.details,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class InvalidURL(CatalogImportError):
    default_code = "INVALID_URL"
    default_message = "Invalid URL format"
    default_status = 400


class ScrapeUnavailable(CatalogImportError):
    default_code = "SCRAPE_UNAVAILABLE"
    default_message = "Failed to scrape page"
    default_status = 502


class NoContent(CatalogImportError):
    default_code = "NO_CONTENT"
    default_message = "Could not extract content from the page"
    default_status = 400


class ContentMismatch(CatalogImportError):
    """The scrape came back, but for some other page."""

    default_code = "CONTENT_MISMATCH"
    default_message = (
        "Could not reliably read that page (it returned unrelated content). "
        "Please try again in a moment."
    )
    default_status = 502


class ExtractionFailed(CatalogImportError):
    default_code = "EXTRACTION_FAILED"
    default_message = "Could not parse game data from page"
    default_status = 400


class NoTitleFound(CatalogImportError):
    default_code = "NO_TITLE_FOUND"
    default_message = "Could not find game title on the page"
    default_status = 400


class UpstreamBusy(CatalogImportError):
    """AI service quota, rate limit or capacity. Worth retrying later."""

    default_code = "UPSTREAM_BUSY"
    default_message = "Service temporarily busy. Please try again in a moment."
    default_status = 503


class PersistenceError(CatalogImportError):
    default_code = "PERSISTENCE_ERROR"
    default_message = "Failed to save game"
    default_status = 500


class ServiceNotConfigured(CatalogImportError):
    default_code = "SERVICE_NOT_CONFIGURED"
    default_message = "Import service temporarily unavailable. Please try again later."
    default_status = 500
