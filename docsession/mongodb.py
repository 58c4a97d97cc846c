"""MongoDB session backend using PyMongo's asyncio API."""

from __future__ import annotations

import contextlib
import logging
from datetime import timezone
from typing import Any

import pymongo
from pymongo.asynchronous.collection import AsyncCollection

from .backend import SessionDocument

logger = logging.getLogger(__name__)


class MongoDBSessionBackend:
    """Session backend using a MongoDB collection.

    Document schema:
        _id (string, 24-char hex), user_id (int or null), data (string,
        sealed payload), last_accessed (date)

    ``timeout`` (seconds) bounds every operation via ``pymongo.timeout``;
    leave it unset to inherit the client's ``timeoutMS``.
    """

    def __init__(self, collection: AsyncCollection, *, timeout: float | None = None) -> None:
        self._collection = collection
        self._timeout = timeout

    def _deadline(self) -> contextlib.AbstractContextManager[Any]:
        if self._timeout is None:
            return contextlib.nullcontext()
        return pymongo.timeout(self._timeout)

    async def find_one(self, session_id: str) -> SessionDocument | None:
        with self._deadline():
            row = await self._collection.find_one({"_id": session_id})
        if row is None:
            return None

        last_accessed = row["last_accessed"]
        if last_accessed.tzinfo is None:
            last_accessed = last_accessed.replace(tzinfo=timezone.utc)
        return SessionDocument(
            id=row["_id"],
            data=row["data"],
            last_accessed=last_accessed,
            user_id=row.get("user_id"),
        )

    async def update_one(self, document: SessionDocument) -> None:
        row = {
            "_id": document.id,
            "user_id": document.user_id,
            "data": document.data,
            "last_accessed": document.last_accessed,
        }
        with self._deadline():
            result = await self._collection.replace_one(
                {"_id": document.id}, row, upsert=True
            )
        logger.debug(
            "Upserted session %s (matched=%s)", document.id, result.matched_count
        )

    async def delete_one(self, session_id: str) -> None:
        with self._deadline():
            await self._collection.delete_one({"_id": session_id})
