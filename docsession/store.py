"""Session store: the session lifecycle on top of a document backend.

The client holds a sealed session identifier; the backend holds one sealed
document per identifier. A negative ``max_age`` on save destroys the session,
anything else persists it.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Callable, Iterable

from bson import ObjectId
from starlette.requests import HTTPConnection

from . import ocsf
from .backend import SessionBackend, SessionDocument
from .codec import DEFAULT_MAX_AGE, KeyPair, codecs_from_pairs, decode_multi, encode_multi
from .errors import (
    AuthenticationError,
    InvalidIdentifier,
    InvalidLastAccessedTime,
    SessionError,
    SessionNotFound,
    TokenNotFound,
)
from .sessions import LAST_ACCESSED_KEY, Options, Session, get_registry
from .transport import CookieToken, ResponseLike, TokenProvider

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def canonical_id(session_id: Any) -> str:
    """Validate a session identifier and return its canonical hex form."""
    if not isinstance(session_id, str) or len(session_id) != 24 or not ObjectId.is_valid(session_id):
        raise InvalidIdentifier(f"Invalid session identifier: {session_id!r}")
    return str(ObjectId(session_id))


class SessionStore:
    """Stores sealed sessions in a backend, keyed by a sealed client token.

    Args:
        backend: Document storage (see :class:`SessionBackend`).
        key_pairs: Hash keys or ``(hash_key, block_key)`` tuples, primary
            first. Older pairs are kept only to open existing tokens.
        options: Default token options copied onto every new session.
        token: Token transport (default: cookies).
        clock: Source of UTC timestamps for last-accessed bookkeeping.
    """

    def __init__(
        self,
        backend: SessionBackend,
        key_pairs: Iterable[KeyPair],
        *,
        options: Options | None = None,
        token: TokenProvider | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.backend = backend
        self.options = options or Options()
        codec_max_age = self.options.max_age if self.options.max_age > 0 else DEFAULT_MAX_AGE
        self.codecs = codecs_from_pairs(key_pairs, max_age=codec_max_age)
        if not self.codecs:
            raise ValueError("At least one key pair is required")
        self.token = token or CookieToken()
        self.clock = clock or utcnow

    async def get(self, request: HTTPConnection, name: str) -> Session:
        """Return the named session for this request, creating it once."""
        return await get_registry(request).get(self, name)

    async def new(self, request: HTTPConnection, name: str) -> Session:
        """Create a session, loading it if the request carries a valid token.

        A missing token or a missing document yields a new, empty session.
        Other failures raise, with the fresh session attached to the error.
        """
        session = Session(self, name, options=replace(self.options))

        try:
            token = self.token.get_token(request, name)
        except TokenNotFound:
            return session

        try:
            session.id = decode_multi(name, token, self.codecs, expected_type=str)
            await self.load(session)
        except SessionNotFound:
            logger.debug("Session %s not found, starting a new one", session.id)
            session.reset()
            return session
        except SessionError as e:
            session.reset()
            if isinstance(e, AuthenticationError):
                logger.warning("Rejected %r session: %s", name, e)
                ocsf.session_event(
                    activity_id=ocsf.AuthActivity.LOGON,
                    activity_name="Logon",
                    status_id=ocsf.Status.FAILURE,
                    severity_id=ocsf.Severity.MEDIUM,
                    session_name=name,
                    message="Session verification failed",
                )
            e.session = session
            raise
        except Exception:
            session.reset()
            raise

        session.is_new = False
        return session

    async def load(self, session: Session) -> None:
        """Fill ``session`` from its backend document."""
        session_id = canonical_id(session.id)

        document = await self.backend.find_one(session_id)
        if document is None:
            raise SessionNotFound(f"No session document for {session_id}")

        session.values = decode_multi(
            session.name, document.data, self.codecs, expected_type=dict
        )
        session.user_id = document.user_id
        session.last_accessed = document.last_accessed

    async def save(
        self, request: HTTPConnection, response: ResponseLike, session: Session
    ) -> None:
        """Persist ``session`` and write its token, or destroy it.

        A negative ``session.options.max_age`` deletes the document and
        clears the client token.
        """
        if session.options.max_age < 0:
            await self._destroy(response, session)
            return

        first_save = session.id is None
        session_id = str(ObjectId()) if first_save else session.id

        # id is only assigned once the document exists
        await self._upsert(session, session_id)
        session.id = canonical_id(session_id)

        encoded = encode_multi(session.name, session.id, self.codecs)
        self.token.set_token(response, session.name, encoded, session.options)

        if first_save:
            ocsf.session_event(
                activity_id=ocsf.AuthActivity.LOGON,
                activity_name="Logon",
                status_id=ocsf.Status.SUCCESS,
                severity_id=ocsf.Severity.INFORMATIONAL,
                session_name=session.name,
                session_id=session.id,
                message="Session created",
            )

    async def get_and_touch(
        self, request: HTTPConnection, response: ResponseLike, name: str
    ) -> Session:
        """Get a session and, if it already existed, save it with a fresh timestamp."""
        session = await self.get(request, name)
        if session.is_new:
            return session

        session.values.pop(LAST_ACCESSED_KEY, None)
        await self.save(request, response, session)
        return session

    async def _destroy(self, response: ResponseLike, session: Session) -> None:
        session_id = canonical_id(session.id)

        await self.backend.delete_one(session_id)
        self.token.set_token(response, session.name, "", session.options)
        logger.debug("Destroyed session %s", session_id)

        ocsf.session_event(
            activity_id=ocsf.AuthActivity.LOGOFF,
            activity_name="Logoff",
            status_id=ocsf.Status.SUCCESS,
            severity_id=ocsf.Severity.INFORMATIONAL,
            session_name=session.name,
            session_id=session_id,
            message="Session destroyed",
        )

    async def _upsert(self, session: Session, session_id: str | None) -> None:
        session_id = canonical_id(session_id)

        if LAST_ACCESSED_KEY in session.values:
            accessed = session.values[LAST_ACCESSED_KEY]
            if not isinstance(accessed, datetime):
                raise InvalidLastAccessedTime(
                    f"{LAST_ACCESSED_KEY!r} is {type(accessed).__name__}, not datetime"
                )
            if accessed.tzinfo is None:
                accessed = accessed.replace(tzinfo=timezone.utc)
        else:
            accessed = self.clock()

        data = encode_multi(session.name, session.values, self.codecs)
        await self.backend.update_one(
            SessionDocument(
                id=session_id,
                data=data,
                last_accessed=accessed,
                user_id=session.user_id,
            )
        )
        session.last_accessed = accessed
        logger.debug("Saved session %s", session_id)
