"""Build a SessionStore from Settings."""

from __future__ import annotations

import logging

from pymongo import AsyncMongoClient

from .backend import InMemoryBackend, SessionBackend
from .config import Settings, get_settings
from .dynamodb import DynamoDBSessionBackend
from .mongodb import MongoDBSessionBackend
from .store import SessionStore

logger = logging.getLogger(__name__)


def create_backend(s: Settings) -> SessionBackend:
    """Choose the session backend named by ``s.session_backend``."""
    if s.session_backend == "mongodb":
        client: AsyncMongoClient = AsyncMongoClient(s.mongodb_url)
        collection = client[s.mongodb_database][s.mongodb_collection]
        return MongoDBSessionBackend(collection, timeout=s.mongodb_timeout)
    if s.session_backend == "dynamodb":
        return DynamoDBSessionBackend(
            table_name=s.dynamodb_table,
            max_age=s.session_max_age,
            endpoint_url=s.dynamodb_endpoint,
            region_name=s.dynamodb_region,
        )
    if s.session_backend != "memory":
        raise ValueError(f"Unknown session backend: {s.session_backend!r}")
    logger.warning("Using in-memory sessions; data is lost on restart")
    return InMemoryBackend()


def create_store(s: Settings | None = None) -> SessionStore:
    s = s or get_settings()
    return SessionStore(create_backend(s), s.key_pairs, options=s.options)
