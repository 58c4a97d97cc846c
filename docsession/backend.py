"""Session document storage backends."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Protocol, runtime_checkable


@dataclass
class SessionDocument:
    """At-rest form of one session, keyed by its hex identifier."""

    id: str
    data: str
    last_accessed: datetime
    user_id: int | None = None


@runtime_checkable
class SessionBackend(Protocol):
    """Protocol for server-side session document storage."""

    async def find_one(self, session_id: str) -> SessionDocument | None:
        """Fetch a document by ID. Returns None if not found."""
        ...

    async def update_one(self, document: SessionDocument) -> None:
        """Replace the document with the same ID, inserting it if absent."""
        ...

    async def delete_one(self, session_id: str) -> None:
        """Delete a document. Deleting a missing ID is not an error."""
        ...


class InMemoryBackend:
    """In-memory session backend for development/testing.

    Not suitable for production: sessions are lost on restart and not
    shared across processes.
    """

    def __init__(self) -> None:
        self._store: dict[str, SessionDocument] = {}

    async def find_one(self, session_id: str) -> SessionDocument | None:
        document = self._store.get(session_id)
        return replace(document) if document is not None else None

    async def update_one(self, document: SessionDocument) -> None:
        self._store[document.id] = replace(document)

    async def delete_one(self, session_id: str) -> None:
        self._store.pop(session_id, None)

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._store
