"""
API models and schemas for the FastAPI application.

Field names are snake_case in Python and camelCase on the wire
(``publicationYear``, ``totalItems``, ...), matching the JSON catalog file.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class SortBy(str, Enum):
    """Sort options for book listings."""
    ID = "id"
    TITLE = "title"
    AUTHOR = "author"
    PUBLICATION_YEAR = "publicationYear"


class SortOrder(str, Enum):
    """Sort order options."""
    ASC = "asc"
    DESC = "desc"


class Book(BaseModel):
    """A catalog entry as stored in the data file."""
    id: int = Field(..., description="Unique book identifier")
    title: str = Field(..., description="Book title")
    author: str = Field(..., description="Book author")
    publication_year: int = Field(..., alias="publicationYear", description="Year of publication")

    model_config = {
        "populate_by_name": True,
        # Unknown keys in the data file survive a load/persist cycle
        "extra": "allow",
    }

    def sort_value(self, sort_by: SortBy) -> str:
        """Textual representation of a field, used for lexicographic sorting."""
        if sort_by == SortBy.PUBLICATION_YEAR:
            return str(self.publication_year)
        return str(getattr(self, sort_by.value))


class BookInput(BaseModel):
    """Client payload for creating or replacing a book."""
    title: Optional[str] = Field(None, description="Book title")
    author: Optional[str] = Field(None, description="Book author")
    publication_year: Optional[int] = Field(None, alias="publicationYear", description="Year of publication")

    model_config = {
        "populate_by_name": True,
        "extra": "ignore",
    }

    def is_complete(self) -> bool:
        """All three fields are present and truthy (``0`` and ``""`` are not)."""
        return bool(self.title and self.author and self.publication_year)


class BookQueryParams(BaseModel):
    """Query parameters for book listing."""
    page: int = Field(1, ge=1, description="Page number")
    limit: int = Field(10, ge=1, description="Items per page")
    sort_by: SortBy = Field(SortBy.ID, description="Sort field")
    sort_order: SortOrder = Field(SortOrder.ASC, description="Sort order")

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


class PaginationInfo(BaseModel):
    """Pagination metadata for a book listing."""
    page: int = Field(..., description="Current page number")
    limit: int = Field(..., description="Number of books per page")
    total_items: int = Field(..., alias="totalItems", description="Total number of books")
    total_pages: int = Field(..., alias="totalPages", description="Total number of pages")

    model_config = {"populate_by_name": True}


class BookListResponse(BaseModel):
    """Response model for book list with pagination."""
    data: List[Book] = Field(..., description="Books on the requested page")
    pagination: PaginationInfo = Field(..., description="Pagination metadata")


class MessageResponse(BaseModel):
    """Plain confirmation message."""
    message: str = Field(..., description="Confirmation message")


class ErrorResponse(BaseModel):
    """Error response model."""
    error: str = Field(..., description="Error message")
    detail: Optional[str] = Field(None, description="Additional error details")


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(..., description="Service status")
    timestamp: datetime = Field(..., description="Current timestamp")
    version: str = Field(..., description="API version")
    storage_status: str = Field(..., description="Catalog file status")
