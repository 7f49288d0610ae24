"""
Tests for the JSON catalog store.
"""

import json

import pytest

from api.exceptions import StorageError
from api.models import Book
from api.store import CatalogStore


class TestCatalogStoreLoad:
    """Test cases for CatalogStore.load."""

    @pytest.mark.asyncio
    async def test_load_empty_catalog(self, store):
        """An empty array loads as an empty list."""
        assert await store.load() == []

    @pytest.mark.asyncio
    async def test_load_keeps_file_order(self, seeded_store):
        """Books come back in file order with camelCase fields mapped."""
        books = await seeded_store.load()

        assert [b.id for b in books] == [1, 2, 3]
        assert books[0].title == "Dune"
        assert books[0].publication_year == 1965

    @pytest.mark.asyncio
    async def test_load_missing_file(self, tmp_path):
        """A missing file is a storage error."""
        store = CatalogStore(tmp_path / "missing.json")

        with pytest.raises(StorageError):
            await store.load()

    @pytest.mark.asyncio
    async def test_load_invalid_json(self, data_file):
        """Garbage content is a storage error."""
        data_file.write_text("{not json", encoding="utf-8")

        with pytest.raises(StorageError) as exc_info:
            await CatalogStore(data_file).load()

        assert "not valid JSON" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_load_rejects_non_array(self, data_file):
        """The top-level value must be an array."""
        data_file.write_text('{"id": 1}', encoding="utf-8")

        with pytest.raises(StorageError):
            await CatalogStore(data_file).load()

    @pytest.mark.asyncio
    async def test_load_rejects_invalid_book(self, data_file):
        """Entries missing required fields are a storage error."""
        data_file.write_text('[{"id": 1, "title": "Dune"}]', encoding="utf-8")

        with pytest.raises(StorageError):
            await CatalogStore(data_file).load()

    @pytest.mark.asyncio
    async def test_load_accepts_non_positive_id(self, data_file):
        """Hand-edited ids outside the assigned range still load."""
        data_file.write_text(
            '[{"id": 0, "title": "Dune", "author": "Herbert", "publicationYear": 1965}]',
            encoding="utf-8"
        )

        books = await CatalogStore(data_file).load()

        assert [b.id for b in books] == [0]


class TestCatalogStorePersist:
    """Test cases for CatalogStore.persist."""

    @pytest.mark.asyncio
    async def test_round_trip(self, store):
        """Persisting then loading returns an equal ordered sequence."""
        books = [
            Book(id=2, title="Zeta", author="B", publication_year=2001),
            Book(id=1, title="Alpha", author="A", publication_year=1999),
        ]

        await store.persist(books)

        assert await store.load() == books

    @pytest.mark.asyncio
    async def test_persist_format(self, store, data_file):
        """File is a pretty-printed array with stable key order."""
        await store.persist([Book(id=1, title="Dune", author="Frank Herbert", publication_year=1965)])

        text = data_file.read_text(encoding="utf-8")
        assert text == (
            '[\n'
            '  {\n'
            '    "id": 1,\n'
            '    "title": "Dune",\n'
            '    "author": "Frank Herbert",\n'
            '    "publicationYear": 1965\n'
            '  }\n'
            ']'
        )

    @pytest.mark.asyncio
    async def test_unchanged_file_survives_cycle(self, seeded_store, seeded_data_file):
        """Load followed by persist leaves the file byte-identical."""
        before = seeded_data_file.read_text(encoding="utf-8")

        await seeded_store.persist(await seeded_store.load())

        assert seeded_data_file.read_text(encoding="utf-8") == before

    @pytest.mark.asyncio
    async def test_extra_keys_survive_cycle(self, data_file):
        """Keys the model does not know about are written back."""
        data_file.write_text(json.dumps([
            {"id": 1, "title": "Dune", "author": "Herbert", "publicationYear": 1965, "isbn": "0441013597"}
        ]), encoding="utf-8")
        store = CatalogStore(data_file)

        await store.persist(await store.load())

        assert json.loads(data_file.read_text(encoding="utf-8"))[0]["isbn"] == "0441013597"

    @pytest.mark.asyncio
    async def test_persist_unwritable(self, tmp_path):
        """Writing into a missing directory is a storage error."""
        store = CatalogStore(tmp_path / "nope" / "books.json")

        with pytest.raises(StorageError):
            await store.persist([])


class TestCatalogStoreHousekeeping:
    """Test cases for ensure_exists and check."""

    @pytest.mark.asyncio
    async def test_ensure_exists_creates_empty_catalog(self, tmp_path):
        """A missing file and directory are created with an empty array."""
        path = tmp_path / "data" / "books.json"
        store = CatalogStore(path)

        assert await store.ensure_exists() is True
        assert path.read_text(encoding="utf-8") == "[]"
        assert await store.load() == []

    @pytest.mark.asyncio
    async def test_ensure_exists_leaves_existing_file(self, seeded_store, seeded_data_file):
        """An existing catalog is never overwritten."""
        before = seeded_data_file.read_text(encoding="utf-8")

        assert await seeded_store.ensure_exists() is False
        assert seeded_data_file.read_text(encoding="utf-8") == before

    @pytest.mark.asyncio
    async def test_check_healthy(self, seeded_store):
        """A loadable catalog reports healthy with its size."""
        assert await seeded_store.check() == {"status": "healthy", "count": 3}

    @pytest.mark.asyncio
    async def test_check_unhealthy(self, tmp_path):
        """An unreadable catalog reports unhealthy."""
        result = await CatalogStore(tmp_path / "missing.json").check()

        assert result["status"] == "unhealthy"
        assert "error" in result
