"""
Store access for the authors collection.
"""

from typing import Dict, Iterable, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorCollection
from pydantic import ValidationError as SchemaError
from pymongo.errors import ConnectionFailure

from inventory.errors import UpstreamUnavailable, ValidationError
from inventory.models import AuthorRecord
from utilities.logger import StoreLogger


class AuthorStore:
    """
    Insert and lookup operations on the authors collection.
    Authors are never updated or deleted here.
    """

    def __init__(self, collection: AsyncIOMotorCollection):
        self.collection = collection
        self.log = StoreLogger(__name__, collection="authors")

    async def create_author(self, name: str, biography: Optional[str] = None) -> AuthorRecord:
        """
        Insert a new author.

        Args:
            name: Author name, must not be empty
            biography: Optional biography, stored as "" when absent

        Returns:
            The stored author with its assigned identifier
        """
        if not name or not name.strip():
            raise ValidationError("El nombre es un campo necesario.")

        document = {"name": name, "biography": biography or ""}
        try:
            result = await self.collection.insert_one(document)
        except ConnectionFailure as e:
            self.log.log_database_operation("insert_author", success=False, error=str(e))
            raise UpstreamUnavailable("Document store unavailable") from e

        self.log.log_database_operation("insert_author", author_id=str(result.inserted_id))
        return AuthorRecord(id=result.inserted_id, name=name, biography=document["biography"])

    async def find_authors_by_ids(self, author_ids: Iterable[ObjectId]) -> Dict[ObjectId, AuthorRecord]:
        """
        Look up a set of authors in a single query.

        Args:
            author_ids: Author identifiers; duplicates are ignored

        Returns:
            Mapping of identifier to author for the ids that exist.
            Missing ids are simply absent from the mapping.
        """
        wanted = list(dict.fromkeys(author_ids))
        if not wanted:
            return {}

        try:
            cursor = self.collection.find({"_id": {"$in": wanted}})
            documents = await cursor.to_list(length=None)
        except ConnectionFailure as e:
            self.log.log_database_operation("find_authors", success=False, error=str(e))
            raise UpstreamUnavailable("Document store unavailable") from e

        authors = {}
        for doc in documents:
            try:
                record = AuthorRecord.from_document(doc)
            except (KeyError, SchemaError) as e:
                # Treated as missing, so projection leaves a hole
                self.log.log_malformed_document(doc.get("_id"), str(e))
                continue
            authors[record.id] = record

        self.log.log_database_operation("find_authors", requested=len(wanted), found=len(authors))
        return authors
