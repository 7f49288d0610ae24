"""
Error taxonomy for catalog operations.

Each error carries the HTTP status it maps to so the route layer can
translate it without a lookup table.
"""

from typing import Optional

from fastapi import status


class CatalogError(Exception):
    """Base class for catalog failures."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(CatalogError):
    """Required book fields are missing or falsy."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Title, author, and publicationYear are required"


class NotFoundError(CatalogError):
    """No catalog entry matches the requested id."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Book not found"


class StorageError(CatalogError):
    """The catalog file could not be read, parsed or written."""
