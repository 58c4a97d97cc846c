"""Shared fixtures for the session store test suite."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import pytest
from cryptography.fernet import Fernet
from starlette.requests import Request

from docsession import InMemoryBackend, Options, SessionStore
from docsession.backend import SessionDocument

SESSION_NAME = "session"


class RecordingBackend(InMemoryBackend):
    """InMemoryBackend that records every call as (method, session_id)."""

    def __init__(self) -> None:
        super().__init__()
        self.calls: list[tuple[str, str]] = []

    async def find_one(self, session_id: str) -> SessionDocument | None:
        self.calls.append(("find_one", session_id))
        return await super().find_one(session_id)

    async def update_one(self, document: SessionDocument) -> None:
        self.calls.append(("update_one", document.id))
        await super().update_one(document)

    async def delete_one(self, session_id: str) -> None:
        self.calls.append(("delete_one", session_id))
        await super().delete_one(session_id)


class FakeClock:
    """Advances one second every time it is read."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


# ── Keys ──────────────────────────────────────────────────────────────────

@pytest.fixture(scope="session")
def block_key() -> bytes:
    return Fernet.generate_key()


@pytest.fixture(scope="session")
def key_pair(block_key) -> tuple[str, bytes]:
    return ("test-hash-key", block_key)


# ── Store ─────────────────────────────────────────────────────────────────

@pytest.fixture
def backend() -> RecordingBackend:
    return RecordingBackend()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(backend, key_pair, clock) -> SessionStore:
    return SessionStore(backend, [key_pair], options=Options(max_age=3600), clock=clock)


# ── Requests ──────────────────────────────────────────────────────────────

def make_request(cookies: dict[str, str] | None = None) -> Request:
    """Build a bare Starlette request carrying ``cookies``."""
    headers: list[tuple[bytes, bytes]] = []
    if cookies:
        cookie = "; ".join(f"{k}={v}" for k, v in cookies.items())
        headers.append((b"cookie", cookie.encode("latin-1")))
    scope: dict[str, Any] = {
        "type": "http",
        "method": "GET",
        "path": "/",
        "query_string": b"",
        "headers": headers,
    }
    return Request(scope)


def set_cookies(response) -> list[str]:
    return response.headers.getlist("set-cookie")


def cookie_value(header: str) -> str:
    """Value part of a Set-Cookie header."""
    return header.split(";", 1)[0].split("=", 1)[1]
