import mongomock
import pytest

from books_mongodb import books, connect_db, sample_data


@pytest.fixture
def collection():
    """A fresh in-memory books collection per test."""
    client = mongomock.MongoClient()
    yield client["library_test"]["books"]
    client.close()


@pytest.fixture
def seeded(collection):
    books.insert_books(collection, sample_data.all_books())
    return collection


@pytest.fixture
def reset_client():
    """Make sure no cached MongoClient leaks between connection tests."""
    connect_db._client = None
    yield
    connect_db._client = None
