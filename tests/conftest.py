"""
Pytest configuration and shared fixtures.
"""

import json

import pytest
from fastapi.testclient import TestClient

from api.catalog import CatalogService
from api.main import app, get_catalog_store
from api.store import CatalogStore


def write_catalog(path, books):
    """Write raw book dicts to a catalog file the way the store does."""
    path.write_text(json.dumps(books, indent=2), encoding="utf-8")


@pytest.fixture
def sample_books():
    """Three books in insertion order."""
    return [
        {"id": 1, "title": "Dune", "author": "Frank Herbert", "publicationYear": 1965},
        {"id": 2, "title": "Neuromancer", "author": "William Gibson", "publicationYear": 1984},
        {"id": 3, "title": "The Left Hand of Darkness", "author": "Ursula K. Le Guin", "publicationYear": 1969},
    ]


@pytest.fixture
def data_file(tmp_path):
    """Path to an empty catalog file."""
    path = tmp_path / "books.json"
    write_catalog(path, [])
    return path


@pytest.fixture
def seeded_data_file(data_file, sample_books):
    """Catalog file holding the sample books."""
    write_catalog(data_file, sample_books)
    return data_file


@pytest.fixture
def store(data_file):
    """Store over the empty catalog file."""
    return CatalogStore(data_file)


@pytest.fixture
def seeded_store(seeded_data_file):
    """Store over the sample catalog."""
    return CatalogStore(seeded_data_file)


@pytest.fixture
def catalog_service(seeded_store):
    """Service over the sample catalog."""
    return CatalogService(seeded_store)


def _client_for(path):
    app.dependency_overrides[get_catalog_store] = lambda: CatalogStore(path)
    return TestClient(app)


@pytest.fixture
def client(data_file):
    """Test client over an empty catalog."""
    yield _client_for(data_file)
    app.dependency_overrides.clear()


@pytest.fixture
def seeded_client(seeded_data_file):
    """Test client over the sample catalog."""
    yield _client_for(seeded_data_file)
    app.dependency_overrides.clear()
