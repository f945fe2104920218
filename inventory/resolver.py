"""
Reference resolution between books and authors.

Books store author ObjectIds. On the write path the resolver confirms every
referenced author exists; on the read path it expands stored ids back into
author views.

Neither direction is isolated from concurrent writes. The existence check
and the subsequent book write are separate round trips, and so are the book
read and the author expansion; an author removed in between leaves a
dangling reference, which projection reports as a None entry.
"""

from typing import Dict, Iterable, List, Sequence

from bson import ObjectId

from inventory.authors import AuthorStore
from inventory.identifiers import identifier_to_string
from inventory.models import AuthorRecord, Book, BookRecord
from utilities.logger import StoreLogger


class ReferenceResolver:
    """Checks and expands book-to-author references."""

    def __init__(self, authors: AuthorStore):
        self.authors = authors
        self.log = StoreLogger(__name__, collection="authors")

    async def missing_authors(self, author_ids: Iterable[ObjectId]) -> List[ObjectId]:
        """
        Return the ids that do not name an existing author, in input order.
        """
        wanted = list(dict.fromkeys(author_ids))
        if not wanted:
            return []
        found = await self.authors.find_authors_by_ids(wanted)
        return [author_id for author_id in wanted if author_id not in found]

    async def verify_authors_exist(self, author_ids: Iterable[ObjectId]) -> bool:
        """
        Check that every id names an existing author.

        An empty input is vacuously valid. Call immediately before the book
        write that depends on it.
        """
        return not await self.missing_authors(author_ids)

    async def project_book(self, book: BookRecord) -> Book:
        projected = await self.project_books([book])
        return projected[0]

    async def project_books(self, books: Sequence[BookRecord]) -> List[Book]:
        """
        Expand the author references of several books.

        All referenced authors are fetched with one lookup keyed by the
        union of ids across the batch.

        Args:
            books: Stored books

        Returns:
            Projected books in the same order. Each author slot holds the
            author view, or None if the id no longer resolves.
        """
        wanted = list(dict.fromkeys(
            author_id for book in books for author_id in book.authors
        ))
        found: Dict[ObjectId, AuthorRecord] = {}
        if wanted:
            found = await self.authors.find_authors_by_ids(wanted)

        return [self._project(book, found) for book in books]

    def _project(self, book: BookRecord, found: Dict[ObjectId, AuthorRecord]) -> Book:
        authors = []
        missing = []
        for author_id in book.authors:
            record = found.get(author_id)
            if record is None:
                missing.append(identifier_to_string(author_id))
                authors.append(None)
            else:
                authors.append(record.to_view())

        if missing:
            self.log.log_dangling_references(identifier_to_string(book.id), missing)

        return Book(
            id=identifier_to_string(book.id),
            title=book.title,
            authors=authors,
            numsOfCopies=book.nums_of_copies,
        )
