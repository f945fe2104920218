"""
Store access for the books collection.
Books hold author ObjectIds; existence of those authors is checked by the
caller through ReferenceResolver before any write.
"""

import re
from typing import Any, Dict, List, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo import ReturnDocument
from pydantic import ValidationError as SchemaError
from pymongo.errors import ConnectionFailure

from inventory.errors import NotFound, UpstreamUnavailable, ValidationError
from inventory.models import BookQuery, BookRecord
from utilities.logger import StoreLogger


class BookStore:
    """CRUD operations on the books collection."""

    def __init__(self, collection: AsyncIOMotorCollection):
        self.collection = collection
        self.log = StoreLogger(__name__, collection="books")

    async def create_book(
        self,
        title: str,
        author_ids: Optional[List[ObjectId]],
        nums_of_copies: Optional[int] = None
    ) -> BookRecord:
        """
        Insert a new book.

        Args:
            title: Book title, must not be empty
            author_ids: Ordered author identifiers, may be empty but not None
            nums_of_copies: Copies held; falsy values are stored as 0

        Returns:
            The stored book with its assigned identifier
        """
        if not title or author_ids is None:
            raise ValidationError("Los campos de libro y autores son campos necesarios.")

        document = {
            "title": title,
            "authors": list(author_ids),
            "numsOfCopies": nums_of_copies or 0,
        }
        try:
            result = await self.collection.insert_one(document)
        except ConnectionFailure as e:
            self.log.log_database_operation("insert_book", success=False, error=str(e))
            raise UpstreamUnavailable("Document store unavailable") from e

        self.log.log_database_operation("insert_book", book_id=str(result.inserted_id))
        document["_id"] = result.inserted_id
        return BookRecord.from_document(document)

    async def find_books(self, query: Optional[BookQuery] = None) -> List[BookRecord]:
        """
        Find books matching a query.

        Args:
            query: Empty for all books, an exact id, or a title substring
                   matched case-insensitively

        Returns:
            Matching books; an empty list when nothing matches
        """
        filter_query = self._build_filter(query or BookQuery())
        try:
            cursor = self.collection.find(filter_query)
            documents = await cursor.to_list(length=None)
        except ConnectionFailure as e:
            self.log.log_database_operation("find_books", success=False, error=str(e))
            raise UpstreamUnavailable("Document store unavailable") from e

        books = []
        for doc in documents:
            try:
                books.append(BookRecord.from_document(doc))
            except (KeyError, SchemaError) as e:
                self.log.log_malformed_document(doc.get("_id"), str(e))

        self.log.log_database_operation("find_books", count=len(books))
        return books

    async def find_book_by_id(self, book_id: ObjectId) -> Optional[BookRecord]:
        books = await self.find_books(BookQuery(book_id=book_id))
        return books[0] if books else None

    async def update_book(
        self,
        book_id: ObjectId,
        title: Optional[str] = None,
        author_ids: Optional[List[ObjectId]] = None,
        nums_of_copies: Optional[int] = None
    ) -> BookRecord:
        """
        Overwrite the supplied fields of a book.

        Supplied fields replace the stored ones. numsOfCopies is always
        written and becomes 0 when not supplied, so callers editing other
        fields must resend it to keep the stored count.

        Args:
            book_id: Book to update
            title: Replacement title
            author_ids: Replacement author list
            nums_of_copies: Replacement copy count

        Returns:
            The book as stored after the update

        Raises:
            NotFound: if no book has this id
        """
        update_data: Dict[str, Any] = {"numsOfCopies": nums_of_copies or 0}
        if title is not None:
            if not title:
                raise ValidationError("El titulo no puede estar vacio.")
            update_data["title"] = title
        if author_ids is not None:
            update_data["authors"] = list(author_ids)

        try:
            document = await self.collection.find_one_and_update(
                {"_id": book_id},
                {"$set": update_data},
                return_document=ReturnDocument.AFTER
            )
        except ConnectionFailure as e:
            self.log.log_database_operation("update_book", success=False, book_id=str(book_id), error=str(e))
            raise UpstreamUnavailable("Document store unavailable") from e

        if document is None:
            self.log.log_not_found("update_book", book_id=str(book_id))
            raise NotFound("El libro no se ha encontrado")

        self.log.log_database_operation("update_book", book_id=str(book_id), fields=sorted(update_data))
        return BookRecord.from_document(document)

    async def delete_book(self, book_id: ObjectId) -> bool:
        """
        Delete a book.

        Returns:
            True if a record was removed, False if none had this id
        """
        try:
            result = await self.collection.delete_one({"_id": book_id})
        except ConnectionFailure as e:
            self.log.log_database_operation("delete_book", success=False, book_id=str(book_id), error=str(e))
            raise UpstreamUnavailable("Document store unavailable") from e

        if result.deleted_count > 0:
            self.log.log_database_operation("delete_book", book_id=str(book_id))
            return True

        self.log.log_not_found("delete_book", book_id=str(book_id))
        return False

    @staticmethod
    def _build_filter(query: BookQuery) -> Dict[str, Any]:
        filter_query: Dict[str, Any] = {}
        if query.book_id is not None:
            filter_query["_id"] = query.book_id
        if query.title:
            # Titles are matched literally, not as a pattern
            filter_query["title"] = {"$regex": re.escape(query.title), "$options": "i"}
        return filter_query
