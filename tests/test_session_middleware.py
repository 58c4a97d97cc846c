"""Tests for the ASGI session middleware."""

import pytest
from fastapi import Depends, FastAPI, Request
from fastapi.testclient import TestClient

from docsession import Options, Session, SessionMiddleware, SessionStore
from docsession.dependencies import destroy_session, get_session, require_session

from conftest import FakeClock, RecordingBackend


def _make_app(backend, key_pair, *, touch=False):
    """Minimal app for testing session middleware in isolation."""
    app = FastAPI()
    store = SessionStore(backend, [key_pair], options=Options(max_age=3600), clock=FakeClock())

    @app.get("/set")
    async def set_value(session: Session = Depends(get_session)):
        session.values["key"] = "value"
        return {"ok": True}

    @app.get("/get")
    async def get_value(request: Request):
        return {"key": request.state.session.values.get("key")}

    @app.get("/me")
    async def me(session: Session = Depends(require_session)):
        return {"id": session.id}

    @app.get("/login")
    async def login(session: Session = Depends(get_session)):
        session.user_id = 42
        return {"ok": True}

    @app.get("/destroy")
    async def destroy(request: Request):
        destroy_session(request)
        return {"ok": True}

    app.add_middleware(SessionMiddleware, store=store, touch=touch)
    return app


@pytest.fixture
def session_backend():
    return RecordingBackend()


@pytest.fixture
def session_client(session_backend, key_pair):
    return TestClient(_make_app(session_backend, key_pair), cookies={})


def test_new_session_sets_cookie(session_client):
    resp = session_client.get("/set")
    assert resp.status_code == 200
    assert "session" in resp.cookies


def test_session_persists_across_requests(session_client):
    session_client.get("/set")
    resp = session_client.get("/get")
    assert resp.json()["key"] == "value"


def test_session_empty_by_default(session_client):
    resp = session_client.get("/get")
    assert resp.json()["key"] is None


def test_untouched_new_session_is_not_saved(session_client, session_backend):
    resp = session_client.get("/get")
    assert "set-cookie" not in resp.headers
    assert session_backend.calls == []


def test_unchanged_loaded_session_is_not_saved(session_client, session_backend):
    session_client.get("/set")
    session_backend.calls.clear()

    resp = session_client.get("/get")
    assert "set-cookie" not in resp.headers
    assert [c[0] for c in session_backend.calls] == ["find_one"]


def test_require_session(session_client):
    assert session_client.get("/me").status_code == 401
    session_client.get("/set")
    resp = session_client.get("/me")
    assert resp.status_code == 200
    assert len(resp.json()["id"]) == 24


def test_session_destroy_clears_data(session_client, session_backend):
    session_client.get("/set")
    resp = session_client.get("/destroy")

    assert "Max-Age=0" in resp.headers.get("set-cookie", "")
    assert len(session_backend) == 0
    resp = session_client.get("/get")
    assert resp.json()["key"] is None


def test_destroy_without_session(session_client, session_backend):
    resp = session_client.get("/destroy")
    assert resp.status_code == 200
    assert session_backend.calls == []


def test_session_cookie_is_httponly(session_client):
    resp = session_client.get("/set")
    cookie_header = resp.headers.get("set-cookie", "")
    assert "HttpOnly" in cookie_header
    assert "SameSite=lax" in cookie_header


def test_invalid_cookie_creates_new_session(session_client):
    session_client.cookies.set("session", "garbage-value")
    resp = session_client.get("/get")
    assert resp.status_code == 200
    assert resp.json()["key"] is None


def test_touch_saves_loaded_session(session_backend, key_pair):
    client = TestClient(_make_app(session_backend, key_pair, touch=True), cookies={})
    client.get("/set")
    session_id = client.get("/me").json()["id"]
    session_backend.calls.clear()

    resp = client.get("/get")
    assert "set-cookie" in resp.headers
    assert ("update_one", session_id) in session_backend.calls


def test_touch_skips_new_session(session_backend, key_pair):
    client = TestClient(_make_app(session_backend, key_pair, touch=True), cookies={})
    resp = client.get("/get")
    assert "set-cookie" not in resp.headers
    assert session_backend.calls == []


def test_user_id_change_is_saved(session_client, session_backend):
    resp = session_client.get("/login")

    assert "session" in resp.cookies
    [(method, session_id)] = session_backend.calls
    assert method == "update_one"

    assert session_backend._store[session_id].user_id == 42
