from __future__ import annotations

from typing import Any, Mapping, Protocol

import structlog
from bson.errors import BSONError
from pymongo import AsyncMongoClient
from pymongo.errors import PyMongoError

from .config import Settings
from .errors import PersistenceFailure, StartupFailure

log = structlog.get_logger("sentinel.sink")


class FrameSink(Protocol):
    """Durable store taking one record at a time per logical collection."""

    name: str

    async def insert(self, collection: str, document: Mapping[str, Any]) -> None:
        """Persist ``document``; raise ``PersistenceFailure`` when the store refuses it."""

    async def close(self) -> None:
        ...


class MongoSink:
    name = "mongo"

    def __init__(self, client: AsyncMongoClient, database_name: str) -> None:
        self._client = client
        self._database = client[database_name]
        self.database_name = database_name
        self.inserted_total = 0

    @classmethod
    async def connect(cls, settings: Settings) -> "MongoSink":
        """Open the client and ping the database; failures are fatal at startup."""

        try:
            client: AsyncMongoClient = AsyncMongoClient(
                settings.mongo_url,
                appname=settings.app_title,
                tls=settings.mongo_tls,
                serverSelectionTimeoutMS=settings.mongo_timeout_ms,
            )
        except PyMongoError as exc:
            raise StartupFailure(f"invalid MongoDB configuration: {exc}") from exc

        sink = cls(client, settings.mongo_database)
        try:
            await sink._database.command("ping")
        except PyMongoError as exc:
            await client.close()
            raise StartupFailure(f"MongoDB is unreachable: {exc}") from exc

        log.info("connected to mongo database", database=settings.mongo_database)
        return sink

    async def insert(self, collection: str, document: Mapping[str, Any]) -> None:
        # insert_one adds ``_id`` to the mapping it is given
        record = dict(document)
        try:
            await self._database[collection].insert_one(record)
        except (PyMongoError, BSONError, OverflowError) as exc:
            # BSON has no unsigned 64-bit type; timestamps at or above 2**63 overflow
            raise PersistenceFailure(str(exc), collection=collection) from exc
        self.inserted_total += 1

    async def close(self) -> None:
        await self._client.close()


async def open_sink(settings: Settings) -> FrameSink:
    if settings.sink_backend == "ndjson":
        from tools.recorder import NDJSONSink

        sink = NDJSONSink(settings.records_dir, max_age_hours=settings.recorder_retention_hours)
        await sink.start()
        return sink
    return await MongoSink.connect(settings)


__all__ = ["FrameSink", "MongoSink", "open_sink"]
