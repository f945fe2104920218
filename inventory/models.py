"""
Pydantic models for stored records and their projected views.
Stored records carry ObjectIds; projected views carry transport strings.
"""

from typing import Any, Dict, List, Optional

from bson import ObjectId
from pydantic import BaseModel, Field

from inventory.identifiers import identifier_to_string


class AuthorRecord(BaseModel):
    """Author document as stored in the authors collection."""
    id: ObjectId = Field(..., description="Store-assigned identifier")
    name: str = Field(..., description="Author name")
    biography: str = Field("", description="Author biography")

    model_config = {"arbitrary_types_allowed": True}

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "AuthorRecord":
        return cls(
            id=doc["_id"],
            name=doc["name"],
            biography=doc.get("biography") or "",
        )

    def to_view(self) -> "Author":
        return Author(id=identifier_to_string(self.id), name=self.name, biography=self.biography)


class BookRecord(BaseModel):
    """Book document as stored in the books collection."""
    id: ObjectId = Field(..., description="Store-assigned identifier")
    title: str = Field(..., description="Book title")
    authors: List[ObjectId] = Field(default_factory=list, description="Referenced author ids, in order")
    nums_of_copies: int = Field(0, ge=0, description="Copies held")

    model_config = {"arbitrary_types_allowed": True}

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "BookRecord":
        return cls(
            id=doc["_id"],
            title=doc.get("title") or "",
            authors=doc.get("authors") or [],
            nums_of_copies=doc.get("numsOfCopies") or 0,
        )


class Author(BaseModel):
    """Author view exposed to clients."""
    id: str = Field(..., description="Author identifier")
    name: str = Field(..., description="Author name")
    biography: str = Field("", description="Author biography")


class Book(BaseModel):
    """
    Book view with author references expanded.

    An entry of ``authors`` is None where the referenced author no longer
    exists.
    """
    id: str = Field(..., description="Book identifier")
    title: str = Field(..., description="Book title")
    authors: List[Optional[Author]] = Field(default_factory=list, description="Expanded authors")
    numsOfCopies: int = Field(0, description="Copies held")


class BookQuery(BaseModel):
    """Filter for book lookups: all books, one id, or a title substring."""
    book_id: Optional[ObjectId] = Field(None, description="Exact book identifier")
    title: Optional[str] = Field(None, description="Case-insensitive title substring")

    model_config = {"arbitrary_types_allowed": True}
