"""
MongoDB persistence layer for Map Locations Service.
"""

from typing import Any, Dict, List, Optional

from pydantic import ValidationError
from pymongo import AsyncMongoClient
from pymongo.errors import PyMongoError

from shared.logging import get_logger
from ..exceptions import DecodeError, FetchError, StartupError
from ..models import MapLocation
from .base import LocationStore


class MongoLocationStore(LocationStore):
    """MongoDB-backed storage for map locations."""

    def __init__(
        self,
        uri: Optional[str],
        database: str = "soulforged-db",
        collection: str = "maplocations",
        *,
        max_pool_size: int = 10,
        connect_timeout_seconds: float = 10.0,
    ):
        self.uri = uri
        self.database_name = database
        self.collection_name = collection
        self.max_pool_size = max_pool_size
        self.connect_timeout_seconds = connect_timeout_seconds
        self.logger = get_logger("maplocations.persistence.mongo")
        self.client: Optional[AsyncMongoClient] = None
        self.collection = None

    async def start(self):
        """Connect to MongoDB and verify the connection."""
        if not self.uri:
            raise StartupError("MONGO_URI environment variable is not set")

        timeout_ms = int(self.connect_timeout_seconds * 1000)
        try:
            self.client = AsyncMongoClient(
                self.uri,
                maxPoolSize=self.max_pool_size,
                serverSelectionTimeoutMS=timeout_ms,
                connectTimeoutMS=timeout_ms,
            )
            self.collection = self.client[self.database_name][self.collection_name]

            await self.client.admin.command("ping")
        except (PyMongoError, ValueError) as e:
            self.logger.error("Failed to connect to MongoDB", error=str(e))
            await self.stop()
            raise StartupError(
                "Failed to connect to MongoDB",
                {"error": str(e), "database": self.database_name},
            ) from e

        self.logger.info(
            "Connected to MongoDB",
            database=self.database_name,
            collection=self.collection_name,
            max_pool_size=self.max_pool_size,
        )

    async def stop(self):
        """Close the MongoDB client."""
        if self.client is not None:
            await self.client.close()
            self.client = None
            self.collection = None
            self.logger.info("MongoDB connection closed")

    async def health_check(self) -> bool:
        if self.client is None:
            return False
        try:
            await self.client.admin.command("ping")
            return True
        except PyMongoError as e:
            self.logger.warning("MongoDB health check failed", error=str(e))
            return False

    async def find_all(self, timeout: float) -> List[MapLocation]:
        """Load every document of the collection."""
        if self.collection is None:
            raise FetchError(details={"error": "not connected"})

        try:
            cursor = self.collection.find({}, max_time_ms=int(timeout * 1000))
            documents = await cursor.to_list()
        except PyMongoError as e:
            raise FetchError(details={"error": str(e)}) from e

        return self._decode(documents)

    @staticmethod
    def _decode(documents: List[Dict[str, Any]]) -> List[MapLocation]:
        try:
            return [MapLocation.model_validate(document) for document in documents]
        except ValidationError as e:
            raise DecodeError(
                "Failed to decode map data",
                {"error": str(e), "documents": len(documents)},
            ) from e
