"""
Tests for the authors collection store.
"""

import pytest
from unittest.mock import MagicMock, AsyncMock
from bson import ObjectId
from pymongo.errors import ServerSelectionTimeoutError

from inventory.authors import AuthorStore
from inventory.errors import UpstreamUnavailable, ValidationError


class TestAuthorStore:
    """Test cases for AuthorStore."""

    @pytest.mark.asyncio
    async def test_create_author_defaults_biography(self, author_store, authors_collection):
        author = await author_store.create_author("Tolkien")

        assert author.name == "Tolkien"
        assert author.biography == ""
        assert authors_collection.documents == [
            {"_id": author.id, "name": "Tolkien", "biography": ""}
        ]

    @pytest.mark.asyncio
    async def test_created_author_is_found_by_id(self, author_store):
        author = await author_store.create_author("Ursula K. Le Guin", "Earthsea")

        found = await author_store.find_authors_by_ids({author.id})

        assert set(found) == {author.id}
        assert found[author.id].name == "Ursula K. Le Guin"
        assert found[author.id].biography == "Earthsea"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", ["", "   ", None])
    async def test_create_author_requires_name(self, author_store, authors_collection, name):
        with pytest.raises(ValidationError):
            await author_store.create_author(name)
        assert authors_collection.documents == []

    @pytest.mark.asyncio
    async def test_find_returns_only_existing(self, author_store):
        author = await author_store.create_author("Tolkien")
        missing = ObjectId()

        found = await author_store.find_authors_by_ids([author.id, missing])

        assert list(found) == [author.id]

    @pytest.mark.asyncio
    async def test_find_empty_input_skips_query(self, author_store, authors_collection):
        assert await author_store.find_authors_by_ids([]) == {}
        assert authors_collection.find_calls == 0

    @pytest.mark.asyncio
    async def test_find_collapses_duplicates_into_one_query(self):
        collection = MagicMock()
        collection.find.return_value.to_list = AsyncMock(return_value=[])
        store = AuthorStore(collection)
        author_id = ObjectId()

        await store.find_authors_by_ids([author_id, author_id])

        collection.find.assert_called_once_with({"_id": {"$in": [author_id]}})

    @pytest.mark.asyncio
    async def test_malformed_author_is_treated_as_missing(self, author_store, authors_collection):
        author = await author_store.create_author("Tolkien")
        broken = ObjectId()
        authors_collection.documents.append({"_id": broken, "biography": "no name"})

        found = await author_store.find_authors_by_ids([author.id, broken])

        assert list(found) == [author.id]

    @pytest.mark.asyncio
    async def test_connection_failure_is_upstream_unavailable(self):
        collection = MagicMock()
        collection.insert_one = AsyncMock(side_effect=ServerSelectionTimeoutError("no servers"))
        store = AuthorStore(collection)

        with pytest.raises(UpstreamUnavailable):
            await store.create_author("Tolkien")
