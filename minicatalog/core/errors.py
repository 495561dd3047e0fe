"""Catalog error taxonomy.

Every error raised by the services carries a human-readable ``message`` and a
machine ``code``. The HTTP layer maps codes to status codes; anything that is
not a ``CatalogError`` is treated as an internal failure.
"""

from __future__ import annotations

from typing import Optional


class CatalogError(Exception):
    """Base class for all catalog business errors."""

    code = "CATALOG_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(CatalogError):
    """Invalid input, rejected before anything is written.

    ``field`` names the offending input field when there is one.
    """

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class ConflictError(CatalogError):
    """Unique value collision (duplicate name and the like)."""

    code = "CONFLICT"


class DependentDataError(ConflictError):
    """Reference entity still has dependents and cannot be deleted."""

    code = "DEPENDENT_DATA"


class NotFoundError(CatalogError):
    """Entity does not exist."""

    code = "NOT_FOUND"


class ImageProcessingError(CatalogError):
    """Image payload could not be decoded, encoded or written."""

    code = "IMAGE_ERROR"
