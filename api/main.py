"""
FastAPI main application for the Book Catalog API.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, List, Optional

import structlog
from fastapi import Body, Depends, FastAPI, HTTPException, Query, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.catalog import CatalogService, parse_int, parse_query_params
from api.config import config
from api.exceptions import CatalogError, StorageError, ValidationError
from api.models import (
    Book, BookInput, BookListResponse,
    ErrorResponse, HealthResponse, MessageResponse
)
from api.store import CatalogStore

# Setup logging
logger = structlog.get_logger(__name__)

INTERNAL_ERROR = "Internal server error"


def get_catalog_store() -> CatalogStore:
    """Store bound to the configured data file."""
    return CatalogStore(config.get_data_file_path())


def get_catalog_service(store: CatalogStore = Depends(get_catalog_store)) -> CatalogService:
    return CatalogService(store)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    logger.info("Starting Book Catalog API", data_file=config.data_file)

    try:
        await get_catalog_store().ensure_exists()
    except StorageError as e:
        logger.error("Failed to prepare catalog file", error=e.message)
        raise

    yield

    # Shutdown
    logger.info("Shutting down Book Catalog API")


# Create FastAPI application
app = FastAPI(
    title=config.api_title,
    description="""
    A REST API over a catalog of books stored in a single JSON file.

    ## Features

    * **Books**: create, read, replace and delete catalog entries
    * **Listing**: sort by id, title, author or publication year, with pagination
    * **Queries**: find books by publication year or by a fragment of the title
    """,
    version=config.api_version,
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins,
    allow_credentials=config.cors_allow_credentials,
    allow_methods=config.cors_allow_methods,
    allow_headers=config.cors_allow_headers,
)


def _error_content(message: str, detail: Optional[str] = None) -> dict:
    return ErrorResponse(error=message, detail=detail).model_dump(exclude_none=True)


# Exception handlers
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request, exc: StarletteHTTPException):
    """Handle HTTP exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_content(exc.detail),
        headers=getattr(exc, "headers", None)
    )


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request, exc: RequestValidationError):
    """Malformed request bodies are reported like missing fields."""
    logger.debug("Request validation failed", path=request.url.path, errors=str(exc.errors()))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_content(ValidationError.default_message)
    )


@app.exception_handler(Exception)
async def general_exception_handler(request, exc: Exception):
    """Handle general exceptions."""
    logger.error("Unhandled exception", error=str(exc), path=request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_content(INTERNAL_ERROR, str(exc) if config.debug else None)
    )


def _http_error(exc: Exception, event: str, **context) -> HTTPException:
    """Translate a service failure into the HTTP error the client sees."""
    if isinstance(exc, CatalogError) and exc.status_code < 500:
        return HTTPException(status_code=exc.status_code, detail=exc.message)

    logger.error(event, error=str(exc), **context)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=INTERNAL_ERROR
    )


# Health check endpoint
@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check(store: CatalogStore = Depends(get_catalog_store)):
    """Health check endpoint."""
    storage_status = (await store.check()).get("status", "unknown")
    return HealthResponse(
        status="healthy" if storage_status == "healthy" else "degraded",
        timestamp=datetime.now(timezone.utc),
        version=config.api_version,
        storage_status=storage_status
    )


# Books endpoints
@app.get("/books", response_model=BookListResponse, tags=["Books"])
async def get_books(
    page: Optional[str] = None,
    limit: Optional[str] = None,
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: Optional[str] = Query(None, alias="sortOrder"),
    service: CatalogService = Depends(get_catalog_service)
):
    """
    Get books with sorting and pagination.

    - **page**: Page number (starts from 1, default 1)
    - **limit**: Items per page (default 10)
    - **sortBy**: Sort field (id, title, author, publicationYear)
    - **sortOrder**: Sort order (asc, desc)

    Values are compared as text, so numeric fields sort lexicographically.
    """
    try:
        query_params = parse_query_params(page, limit, sort_by, sort_order)
        return await service.list_books(query_params)
    except Exception as e:
        raise _http_error(e, "Failed to get books")


@app.get("/books/query/year", response_model=List[Book], tags=["Queries"])
async def get_books_by_year(
    year: Optional[str] = None,
    service: CatalogService = Depends(get_catalog_service)
):
    """
    Get all books published in a given year.

    A missing or non-numeric **year** matches nothing.
    """
    try:
        return await service.books_by_year(parse_int(year))
    except Exception as e:
        raise _http_error(e, "Failed to query books by year", year=year)


@app.get("/books/query/name", response_model=List[Book], tags=["Queries"])
async def get_books_by_name(
    name: Optional[str] = None,
    service: CatalogService = Depends(get_catalog_service)
):
    """
    Get all books whose title contains **name**, ignoring case.
    """
    if name is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Query parameter 'name' is required"
        )
    try:
        return await service.books_by_name(name)
    except Exception as e:
        raise _http_error(e, "Failed to query books by name", name=name)


@app.get("/books/{book_id}", response_model=Book, tags=["Books"])
async def get_book(
    book_id: str,
    service: CatalogService = Depends(get_catalog_service)
):
    """
    Get a single book by ID.
    """
    try:
        return await service.get_book(parse_int(book_id))
    except Exception as e:
        raise _http_error(e, "Failed to get book", book_id=book_id)


@app.post(
    "/books",
    response_model=Book,
    status_code=status.HTTP_201_CREATED,
    tags=["Books"]
)
async def create_book(
    book_input: BookInput,
    service: CatalogService = Depends(get_catalog_service)
):
    """
    Create a book. **title**, **author** and **publicationYear** are required;
    the id is assigned by the service.
    """
    try:
        return await service.create_book(book_input)
    except Exception as e:
        raise _http_error(e, "Failed to create book")


@app.put("/books/{book_id}", response_model=Book, tags=["Books"])
async def update_book(
    book_id: str,
    payload: Any = Body(None),
    service: CatalogService = Depends(get_catalog_service)
):
    """
    Replace a book. The stored record is rebuilt from the path id and the
    request body; nothing from the previous record is kept.
    """
    try:
        return await service.update_book(parse_int(book_id), payload)
    except Exception as e:
        raise _http_error(e, "Failed to update book", book_id=book_id)


@app.delete("/books/{book_id}", response_model=MessageResponse, tags=["Books"])
async def delete_book(
    book_id: str,
    service: CatalogService = Depends(get_catalog_service)
):
    """
    Delete a book by ID.
    """
    try:
        await service.delete_book(parse_int(book_id))
        return MessageResponse(message="Book is deleted")
    except Exception as e:
        raise _http_error(e, "Failed to delete book", book_id=book_id)
