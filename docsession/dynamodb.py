"""DynamoDB session backend."""

from __future__ import annotations

import time
from datetime import datetime
from typing import Any

import aioboto3

from .backend import SessionDocument


class DynamoDBSessionBackend:
    """Session backend using AWS DynamoDB.

    Table schema:
        Partition key: session_id (S)
        Attributes: data (S, sealed payload), last_accessed (S, ISO 8601),
        user_id (N, optional), ttl (N)

    Enable TTL on the `ttl` attribute for automatic cleanup.
    """

    def __init__(
        self,
        table_name: str = "sessions",
        max_age: int = 30 * 24 * 3600,
        endpoint_url: str = "",
        region_name: str = "us-west-2",
    ) -> None:
        self._table_name = table_name
        self._max_age = max_age
        self._session = aioboto3.Session()
        self._endpoint_url = endpoint_url or None
        self._region_name = region_name

    def _resource(self):
        return self._session.resource(
            "dynamodb",
            endpoint_url=self._endpoint_url,
            region_name=self._region_name,
        )

    async def find_one(self, session_id: str) -> SessionDocument | None:
        async with self._resource() as dynamodb:
            table = await dynamodb.Table(self._table_name)
            response = await table.get_item(Key={"session_id": session_id})

        item = response.get("Item")
        if item is None:
            return None

        # TTL deletion lags; treat anything past its ttl as gone
        if "ttl" in item and time.time() > float(item["ttl"]):
            await self.delete_one(session_id)
            return None

        user_id = item.get("user_id")
        return SessionDocument(
            id=item["session_id"],
            data=item["data"],
            last_accessed=datetime.fromisoformat(item["last_accessed"]),
            user_id=int(user_id) if user_id is not None else None,
        )

    async def update_one(self, document: SessionDocument) -> None:
        item: dict[str, Any] = {
            "session_id": document.id,
            "data": document.data,
            "last_accessed": document.last_accessed.isoformat(),
            "ttl": int(time.time() + self._max_age),
        }
        if document.user_id is not None:
            item["user_id"] = document.user_id

        async with self._resource() as dynamodb:
            table = await dynamodb.Table(self._table_name)
            await table.put_item(Item=item)

    async def delete_one(self, session_id: str) -> None:
        async with self._resource() as dynamodb:
            table = await dynamodb.Table(self._table_name)
            await table.delete_item(Key={"session_id": session_id})
