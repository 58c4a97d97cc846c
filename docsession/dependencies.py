"""FastAPI dependency injection: session access and destruction."""

from __future__ import annotations

from fastapi import HTTPException, Request

from .sessions import Session


def get_session(request: Request) -> Session:
    """Get the session from request state."""
    return request.state.session


def require_session(request: Request) -> Session:
    """Require a session that was loaded from the backend."""
    session = request.state.session
    if session.is_new:
        raise HTTPException(status_code=401, detail={"error": "No session"})
    return session


def destroy_session(request: Request) -> None:
    """Mark the session for destruction on the next save."""
    session = request.state.session
    session.values.clear()
    session.options.max_age = -1
