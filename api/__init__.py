"""
FastAPI RESTful API for the Book Catalog.

This package provides:
- CRUD endpoints over a JSON-file-backed catalog of books
- Sorted, paginated listings
- Lookups by publication year and by title fragment
"""
