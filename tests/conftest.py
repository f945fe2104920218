"""
Pytest configuration and shared fixtures.
"""

import re
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId

from inventory.authors import AuthorStore
from inventory.books import BookStore
from inventory.models import AuthorRecord, BookRecord
from inventory.resolver import ReferenceResolver


def _matches(document, filter_query):
    for field, condition in filter_query.items():
        value = document.get(field)
        if isinstance(condition, dict):
            if "$in" in condition and value not in condition["$in"]:
                return False
            if "$regex" in condition:
                flags = re.IGNORECASE if "i" in condition.get("$options", "") else 0
                if not isinstance(value, str) or not re.search(condition["$regex"], value, flags):
                    return False
        elif value != condition:
            return False
    return True


class InMemoryCursor:
    """Cursor over a snapshot of documents, consumed once."""

    def __init__(self, documents):
        self.documents = documents

    async def to_list(self, length=None):
        documents, self.documents = self.documents, []
        return documents if length is None else documents[:length]


class InMemoryCollection:
    """Subset of the Motor collection API used by the stores."""

    def __init__(self):
        self.documents = []
        self.find_calls = 0

    async def insert_one(self, document):
        document = dict(document)
        document.setdefault("_id", ObjectId())
        self.documents.append(document)
        return SimpleNamespace(inserted_id=document["_id"])

    def find(self, filter_query=None):
        self.find_calls += 1
        return InMemoryCursor([
            dict(doc) for doc in self.documents if _matches(doc, filter_query or {})
        ])

    async def find_one_and_update(self, filter_query, update, return_document=None):
        for doc in self.documents:
            if _matches(doc, filter_query):
                doc.update(update.get("$set", {}))
                return dict(doc)
        return None

    async def delete_one(self, filter_query):
        for index, doc in enumerate(self.documents):
            if _matches(doc, filter_query):
                del self.documents[index]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)

    async def count_documents(self, filter_query):
        return len([doc for doc in self.documents if _matches(doc, filter_query)])


@pytest.fixture
def authors_collection():
    return InMemoryCollection()


@pytest.fixture
def books_collection():
    return InMemoryCollection()


@pytest.fixture
def author_store(authors_collection):
    return AuthorStore(authors_collection)


@pytest.fixture
def book_store(books_collection):
    return BookStore(books_collection)


@pytest.fixture
def resolver(author_store):
    return ReferenceResolver(author_store)


@pytest.fixture
def inventory(author_store, book_store, resolver):
    """Store context wired to in-memory collections."""
    context = MagicMock()
    context.authors = author_store
    context.books = book_store
    context.resolver = resolver
    context.health_check = AsyncMock(return_value={"status": "healthy"})
    return context


@pytest.fixture
def tolkien():
    return AuthorRecord(id=ObjectId(), name="Tolkien", biography="")


@pytest.fixture
def pratchett():
    return AuthorRecord(id=ObjectId(), name="Terry Pratchett", biography="Discworld")


@pytest.fixture
def hobbit(tolkien):
    return BookRecord(id=ObjectId(), title="The Hobbit", authors=[tolkien.id], nums_of_copies=3)


@pytest.fixture
def mock_author_store(tolkien, pratchett):
    """AuthorStore double that knows two authors."""
    store = AsyncMock(spec=AuthorStore)
    known = {tolkien.id: tolkien, pratchett.id: pratchett}

    async def find_authors_by_ids(author_ids):
        return {author_id: known[author_id] for author_id in author_ids if author_id in known}

    store.find_authors_by_ids.side_effect = find_authors_by_ids
    return store
