"""Async MongoDB connection holding the problems collection."""

from __future__ import annotations

import logging

from pymongo import AsyncMongoClient
from pymongo.asynchronous.collection import AsyncCollection

from problems.config import Settings

logger = logging.getLogger("problems.storage")


class MongoStore:
    """Owns the client for the lifetime of the service; built once at startup."""

    def __init__(self, client: AsyncMongoClient, database: str, collection: str) -> None:
        self._client = client
        self._collection = client[database][collection]

    @classmethod
    def from_settings(cls, settings: Settings) -> MongoStore:
        client = AsyncMongoClient(
            settings.mongodb_uri,
            serverSelectionTimeoutMS=settings.server_selection_timeout_ms,
        )
        return cls(client, settings.mongodb_database, settings.mongodb_collection)

    @property
    def collection(self) -> AsyncCollection:
        return self._collection

    async def ping(self) -> bool:
        await self._client.admin.command("ping")
        return True

    async def close(self) -> None:
        await self._client.close()
        logger.info("MongoDB connection closed")
