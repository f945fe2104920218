"""
MongoDB connection context for the inventory.
Owns the client and builds the stores and resolver that share it.
"""

from typing import Any, Dict, Optional

import structlog
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import ConnectionFailure

from inventory.authors import AuthorStore
from inventory.books import BookStore
from inventory.errors import UpstreamUnavailable
from inventory.resolver import ReferenceResolver

logger = structlog.get_logger(__name__)


class InventoryDatabase:
    """
    Process-wide store context.

    Constructed once at startup and handed to request handlers, so tests can
    substitute their own stores.
    """

    def __init__(
        self,
        connection_url: str,
        database_name: str,
        books_collection: str = "books",
        authors_collection: str = "authors",
        server_selection_timeout_ms: int = 5000
    ):
        """
        Initialize the store context.

        Args:
            connection_url: MongoDB connection URL
            database_name: Name of the database
            books_collection: Name of the books collection
            authors_collection: Name of the authors collection
            server_selection_timeout_ms: How long the driver waits for a server
        """
        self.connection_url = connection_url
        self.database_name = database_name
        self.books_collection = books_collection
        self.authors_collection = authors_collection
        self.server_selection_timeout_ms = server_selection_timeout_ms
        self.client: Optional[AsyncIOMotorClient] = None
        self.database: Optional[AsyncIOMotorDatabase] = None
        self.authors: Optional[AuthorStore] = None
        self.books: Optional[BookStore] = None
        self.resolver: Optional[ReferenceResolver] = None

    @classmethod
    def from_config(cls, config) -> "InventoryDatabase":
        return cls(
            connection_url=config.mongodb_url,
            database_name=config.mongodb_database,
            books_collection=config.books_collection,
            authors_collection=config.authors_collection,
            server_selection_timeout_ms=config.server_selection_timeout_ms,
        )

    async def connect(self) -> None:
        """
        Establish the connection and build the stores.

        Raises:
            UpstreamUnavailable: if the server cannot be reached
        """
        self.client = AsyncIOMotorClient(
            self.connection_url,
            serverSelectionTimeoutMS=self.server_selection_timeout_ms
        )
        self.database = self.client[self.database_name]

        try:
            await self.client.admin.command('ping')
        except ConnectionFailure as e:
            logger.error("Failed to connect to MongoDB", error=str(e))
            self.client.close()
            raise UpstreamUnavailable("Could not connect to MongoDB") from e

        logger.info("Successfully connected to MongoDB", database=self.database_name)

        self.authors = AuthorStore(self.database[self.authors_collection])
        self.books = BookStore(self.database[self.books_collection])
        self.resolver = ReferenceResolver(self.authors)

        await self._create_indexes()

    async def disconnect(self) -> None:
        """Close MongoDB connection."""
        if self.client:
            self.client.close()
            logger.info("Disconnected from MongoDB")

    async def _create_indexes(self) -> None:
        """Create indexes for title search and author lookups from books."""
        books = self.database[self.books_collection]
        await books.create_index("title")
        await books.create_index("authors")
        logger.info("Successfully created MongoDB indexes")

    async def health_check(self) -> Dict[str, Any]:
        """
        Perform database health check.

        Returns:
            Dictionary with health status
        """
        if self.database is None:
            return {"status": "unhealthy", "error": "not connected"}
        try:
            await self.database.command("ping")
            books_count = await self.database[self.books_collection].count_documents({})
            authors_count = await self.database[self.authors_collection].count_documents({})
            return {
                "status": "healthy",
                "books_count": books_count,
                "authors_count": authors_count
            }
        except ConnectionFailure as e:
            logger.error("Database health check failed", error=str(e))
            return {
                "status": "unhealthy",
                "error": str(e)
            }
