"""Session error taxonomy."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .sessions import Session


class SessionError(Exception):
    """Base class for session lifecycle errors.

    When raised from :meth:`SessionStore.new`, ``session`` holds the fresh
    session the caller can continue with.
    """

    session: Session | None = None


class InvalidIdentifier(SessionError):
    """Session identifier is not a 24-character hex ObjectId."""


class AuthenticationError(SessionError):
    """Sealed payload failed verification under every configured key pair."""


class DecodingError(SessionError):
    """Sealed payload verified but could not be deserialized."""


class EncodingError(SessionError):
    """Value could not be serialized for sealing."""


class InvalidLastAccessedTime(SessionError):
    """Reserved last-accessed value is present but is not a datetime."""


class NotFound(SessionError):
    pass


class SessionNotFound(NotFound):
    """No session document exists for the identifier."""


class TokenNotFound(NotFound):
    """The request carries no token under the given name."""
