"""Session value object, cookie options and the per-request registry."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any

from starlette.requests import HTTPConnection

from .errors import SessionError

if TYPE_CHECKING:
    from .store import SessionStore

LAST_ACCESSED_KEY = "lastAccessed"
REGISTRY_ATTR = "session_registry"


@dataclass
class Options:
    """Token attributes plus ``max_age``.

    A negative ``max_age`` destroys the session on the next save; ``0``
    makes the cookie last for the browser session only.
    """

    path: str = "/"
    domain: str | None = None
    max_age: int = 30 * 24 * 3600
    secure: bool = False
    http_only: bool = True
    same_site: str = "lax"


class Session:
    """One named session for the duration of one request.

    Attributes:
        id: Canonical hex identifier, ``None`` until the first save.
        values: Application data; sealed and stored as a whole.
        is_new: ``True`` unless the session was loaded from the backend.
        last_accessed: Timestamp of the last load or save, if any.
    """

    def __init__(self, store: SessionStore, name: str, *, options: Options) -> None:
        self.store = store
        self.name = name
        self.options = options
        self.id: str | None = None
        self.values: dict[str, Any] = {}
        self.is_new = True
        self.user_id: int | None = None
        self.last_accessed: datetime | None = None

    def reset(self) -> None:
        """Return to a clean, unsaved state."""
        self.id = None
        self.values = {}
        self.is_new = True
        self.user_id = None
        self.last_accessed = None

    async def save(self, request: HTTPConnection, response: Any) -> None:
        await self.store.save(request, response, self)

    def __repr__(self) -> str:
        return f"<Session name={self.name!r} id={self.id!r} is_new={self.is_new}>"


class Registry:
    """Caches sessions by name for one request."""

    def __init__(self, request: HTTPConnection) -> None:
        self.request = request
        self._sessions: dict[str, tuple[Session, SessionError | None]] = {}

    async def get(self, store: SessionStore, name: str) -> Session:
        cached = self._sessions.get(name)
        if cached is not None:
            session, error = cached
            if error is not None:
                raise error
            return session

        try:
            session = await store.new(self.request, name)
        except SessionError as e:
            if e.session is not None:
                self._sessions[name] = (e.session, e)
            raise
        self._sessions[name] = (session, None)
        return session

    async def save(self, response: Any) -> None:
        """Save every session fetched through this registry."""
        for session, _ in self._sessions.values():
            await session.save(self.request, response)


def get_registry(request: HTTPConnection) -> Registry:
    registry = getattr(request.state, REGISTRY_ATTR, None)
    if registry is None:
        registry = Registry(request)
        setattr(request.state, REGISTRY_ATTR, registry)
    return registry


async def save_all(request: HTTPConnection, response: Any) -> None:
    """Save all sessions used during ``request``."""
    await get_registry(request).save(response)
