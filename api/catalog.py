"""
Catalog service layer for the FastAPI application.

Every operation loads the full catalog from the store, transforms it in
memory and, for mutations, persists the full catalog back.
"""

import math
import re
from typing import Any, List, Optional

import structlog
from pydantic import ValidationError as PydanticValidationError

from api.exceptions import NotFoundError, ValidationError
from api.models import (
    Book, BookInput, BookListResponse, BookQueryParams,
    PaginationInfo, SortBy, SortOrder
)
from api.store import CatalogStore

logger = structlog.get_logger(__name__)

_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")


def parse_int(value: Optional[str]) -> Optional[int]:
    """
    Parse the leading integer of a query or path value.

    ``"42"`` and ``"42abc"`` give 42; ``None``, ``""`` and ``"abc"`` give None.
    """
    if value is None:
        return None
    match = _INT_PREFIX.match(value)
    if not match:
        return None
    return int(match.group(1))


def parse_book_input(payload: Any) -> BookInput:
    """
    Validate a raw request body as a BookInput.

    Raises:
        ValidationError: if the body is not an object or a field has the wrong type
    """
    try:
        return BookInput.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError() from e


def parse_query_params(
    page: Optional[str] = None,
    limit: Optional[str] = None,
    sort_by: Optional[str] = None,
    sort_order: Optional[str] = None,
) -> BookQueryParams:
    """
    Build listing parameters from raw query strings.

    Malformed values never fail the request; they fall back to defaults.
    """
    defaults = BookQueryParams()

    parsed_page = parse_int(page)
    parsed_limit = parse_int(limit)

    try:
        sort_field = SortBy(sort_by) if sort_by else defaults.sort_by
    except ValueError:
        sort_field = defaults.sort_by

    return BookQueryParams(
        page=parsed_page if parsed_page and parsed_page > 0 else defaults.page,
        limit=parsed_limit if parsed_limit and parsed_limit > 0 else defaults.limit,
        sort_by=sort_field,
        sort_order=SortOrder.DESC if sort_order == SortOrder.DESC.value else SortOrder.ASC,
    )


def sort_books(books: List[Book], sort_by: SortBy, sort_order: SortOrder) -> List[Book]:
    """
    Sort by the textual value of a field.

    Numbers compare as text too, so id 10 sorts before id 9. Case only
    breaks ties, lowercase first as in a locale compare; equal keys keep
    catalog order.
    """
    def key(book: Book):
        text = book.sort_value(sort_by)
        return (text.casefold(), text.swapcase())

    return sorted(books, key=key, reverse=sort_order == SortOrder.DESC)


class CatalogService:
    """Book catalog operations."""

    def __init__(self, store: CatalogStore):
        self.store = store

    async def list_books(self, query_params: BookQueryParams) -> BookListResponse:
        """
        Get books with sorting and pagination.

        Args:
            query_params: Page window and sort options

        Returns:
            BookListResponse with the requested page
        """
        books = await self.store.load()
        total_items = len(books)

        ordered = sort_books(books, query_params.sort_by, query_params.sort_order)
        page_items = ordered[query_params.skip:query_params.skip + query_params.limit]

        return BookListResponse(
            data=page_items,
            pagination=PaginationInfo(
                page=query_params.page,
                limit=query_params.limit,
                total_items=total_items,
                total_pages=math.ceil(total_items / query_params.limit),
            )
        )

    async def get_book(self, book_id: Optional[int]) -> Book:
        """
        Get a single book by ID.

        Raises:
            NotFoundError: if no book has this id
        """
        books = await self.store.load()
        book = next((b for b in books if b.id == book_id), None)
        if book is None:
            raise NotFoundError()
        return book

    async def create_book(self, book_input: BookInput) -> Book:
        """
        Append a new book and persist the catalog.

        The new id is the catalog length plus one.

        Raises:
            ValidationError: if title, author or publicationYear is missing
        """
        if not book_input.is_complete():
            raise ValidationError()

        books = await self.store.load()
        book = Book(id=len(books) + 1, **book_input.model_dump())
        books.append(book)
        await self.store.persist(books)

        logger.info("Book created", book_id=book.id, title=book.title)
        return book

    async def update_book(self, book_id: Optional[int], payload: Any) -> Book:
        """
        Replace a book wholesale with the given input.

        The payload is validated only after the id is found, so an absent
        id is reported as not found whatever the body holds.

        Raises:
            NotFoundError: if no book has this id
            ValidationError: if title, author or publicationYear is missing
        """
        books = await self.store.load()
        index = next((i for i, b in enumerate(books) if b.id == book_id), None)
        if index is None:
            raise NotFoundError()
        book_input = parse_book_input(payload)
        if not book_input.is_complete():
            raise ValidationError()

        book = Book(id=book_id, **book_input.model_dump())
        books[index] = book
        await self.store.persist(books)

        logger.info("Book updated", book_id=book.id)
        return book

    async def delete_book(self, book_id: Optional[int]) -> None:
        """
        Remove every book with this id.

        Raises:
            NotFoundError: if nothing was removed; the file is left untouched
        """
        books = await self.store.load()
        remaining = [b for b in books if b.id != book_id]
        if len(remaining) == len(books):
            raise NotFoundError()

        await self.store.persist(remaining)
        logger.info("Book deleted", book_id=book_id, removed=len(books) - len(remaining))

    async def books_by_year(self, year: Optional[int]) -> List[Book]:
        """Books published in ``year``; no year matches nothing."""
        books = await self.store.load()
        if year is None:
            return []
        return [b for b in books if b.publication_year == year]

    async def books_by_name(self, name: str) -> List[Book]:
        """Books whose title contains ``name``, ignoring case."""
        books = await self.store.load()
        needle = name.lower()
        return [b for b in books if needle in b.title.lower()]
