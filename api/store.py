"""
JSON file storage for the book catalog.

The whole catalog lives in one file holding a JSON array of books. Every
call re-reads or rewrites the complete file; there is no cache, no
partial write and no locking between a load and the following persist.
"""

import asyncio
import json
from pathlib import Path
from typing import Dict, List, Union

import structlog
from pydantic import ValidationError as PydanticValidationError

from api.exceptions import StorageError
from api.models import Book

logger = structlog.get_logger(__name__)


class CatalogStore:
    """
    Load/persist helpers over the catalog file.
    Blocking file I/O runs in a worker thread so the event loop only
    waits at these two boundaries.
    """

    def __init__(self, data_file: Union[str, Path]):
        """
        Initialize the store.

        Args:
            data_file: Path of the JSON catalog file
        """
        self.data_file = Path(data_file)

    async def load(self) -> List[Book]:
        """
        Read the entire catalog.

        Returns:
            Books in file order

        Raises:
            StorageError: if the file is unreadable or not a JSON array of books
        """
        try:
            raw = await asyncio.to_thread(self._read)
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Failed to read catalog", path=str(self.data_file), error=str(e))
            raise StorageError(f"Catalog file is unreadable: {e}") from e
        except json.JSONDecodeError as e:
            logger.error("Catalog file is not valid JSON", path=str(self.data_file), error=str(e))
            raise StorageError(f"Catalog file is not valid JSON: {e}") from e

        if not isinstance(raw, list):
            logger.error("Catalog file is not a JSON array", path=str(self.data_file))
            raise StorageError("Catalog file must contain a JSON array")

        try:
            books = [Book.model_validate(entry) for entry in raw]
        except PydanticValidationError as e:
            logger.error("Catalog entry failed validation", path=str(self.data_file), error=str(e))
            raise StorageError(f"Catalog file holds an invalid book: {e}") from e

        logger.debug("Catalog loaded", path=str(self.data_file), count=len(books))
        return books

    async def persist(self, catalog: List[Book]) -> None:
        """
        Overwrite the entire catalog.

        Args:
            catalog: Books to write, in the order they should be stored

        Raises:
            StorageError: if the file cannot be written
        """
        payload = [self._serialize(book) for book in catalog]
        try:
            await asyncio.to_thread(self._write, payload)
        except OSError as e:
            logger.error("Failed to write catalog", path=str(self.data_file), error=str(e))
            raise StorageError(f"Catalog file is unwritable: {e}") from e

        logger.debug("Catalog persisted", path=str(self.data_file), count=len(catalog))

    async def ensure_exists(self) -> bool:
        """
        Create an empty catalog file if none exists.

        Returns:
            True if a new file was created
        """
        if self.data_file.exists():
            return False
        try:
            self.data_file.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create catalog directory: {e}") from e
        await self.persist([])
        logger.info("Created empty catalog", path=str(self.data_file))
        return True

    async def check(self) -> Dict[str, Union[str, int]]:
        """Report whether the catalog currently loads."""
        try:
            books = await self.load()
        except StorageError as e:
            return {"status": "unhealthy", "error": e.message}
        return {"status": "healthy", "count": len(books)}

    @staticmethod
    def _serialize(book: Book) -> dict:
        # id, title, author, publicationYear first; extra keys after
        return book.model_dump(by_alias=True)

    def _read(self):
        with open(self.data_file, 'r', encoding='utf-8') as f:
            return json.load(f)

    def _write(self, payload: list) -> None:
        with open(self.data_file, 'w', encoding='utf-8') as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)
