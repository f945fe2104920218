"""
Error taxonomy for inventory operations.
"""

from typing import List, Optional


class InventoryError(Exception):
    """Base class for inventory errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(InventoryError):
    """A required field is missing or empty."""


class UnknownAuthors(ValidationError):
    """One or more referenced authors do not exist."""

    def __init__(self, message: str, author_ids: Optional[List[str]] = None):
        super().__init__(message)
        self.author_ids = author_ids or []


class InvalidIdentifier(InventoryError):
    """A client-supplied identifier is not a well-formed ObjectId string."""

    def __init__(self, raw):
        super().__init__(f"Invalid identifier: {raw!r}")
        self.raw = raw


class NotFound(InventoryError):
    """The targeted record does not exist."""


class UpstreamUnavailable(InventoryError):
    """The document store cannot be reached."""
