"""
API request and response schemas for the FastAPI application.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from inventory.models import Author, Book

# BSON stores integers as signed 64-bit
MAX_COPIES = 2**63 - 1


class CreateAuthorRequest(BaseModel):
    """Body of POST /autor."""
    name: str = Field(..., description="Author name")
    biography: Optional[str] = Field(None, description="Author biography")

    model_config = {"extra": "forbid"}


class CreateBookRequest(BaseModel):
    """Body of POST /libro."""
    title: str = Field(..., description="Book title")
    authors: List[str] = Field(..., description="Identifiers of existing authors")
    numsOfCopies: Optional[int] = Field(None, ge=0, le=MAX_COPIES, description="Copies held, 0 when omitted")

    model_config = {"extra": "forbid"}


class UpdateBookRequest(BaseModel):
    """
    Body of PUT /libro.

    Supplied fields replace the stored ones. numsOfCopies is reset to 0 when
    omitted.
    """
    id: str = Field(..., description="Identifier of the book to update")
    title: Optional[str] = Field(None, description="Replacement title")
    authors: Optional[List[str]] = Field(None, description="Replacement author identifiers")
    numsOfCopies: Optional[int] = Field(None, ge=0, le=MAX_COPIES, description="Replacement copy count")

    model_config = {"extra": "forbid"}


class AuthorCreatedResponse(BaseModel):
    message: str = Field(..., description="Outcome message")
    autor: Author = Field(..., description="Created author")


class BookWrittenResponse(BaseModel):
    message: str = Field(..., description="Outcome message")
    libro: Book = Field(..., description="Book with authors expanded")


class ErrorResponse(BaseModel):
    """Error response model."""
    error: str = Field(..., description="Error message")


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(..., description="Service status")
    timestamp: datetime = Field(..., description="Current timestamp")
    version: str = Field(..., description="API version")
    database_status: str = Field(..., description="Database connection status")
