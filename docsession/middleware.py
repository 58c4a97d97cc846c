"""ASGI server-side session middleware.

Opens the sealed session token from a cookie, loads the session through a
SessionStore and attaches it to request.state.session. When the response
starts, modified sessions are saved and destroyed ones are deleted.
"""

from __future__ import annotations

import copy
import logging

from starlette.datastructures import MutableHeaders
from starlette.requests import HTTPConnection
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from .errors import SessionError
from .sessions import LAST_ACCESSED_KEY, Session
from .store import SessionStore

logger = logging.getLogger(__name__)

COOKIE_NAME = "session"


class SessionMiddleware:
    """ASGI middleware for server-side sessions.

    Args:
        app: The wrapped ASGI application.
        store: Session store used to load and save sessions.
        cookie_name: Name of the session (and of its cookie).
        touch: Save loaded sessions on every response, refreshing their
            last-accessed time even when unchanged.
    """

    def __init__(
        self,
        app: ASGIApp,
        store: SessionStore,
        cookie_name: str = COOKIE_NAME,
        touch: bool = False,
    ) -> None:
        self.app = app
        self.store = store
        self.cookie_name = cookie_name
        self.touch = touch

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] not in ("http", "websocket"):
            await self.app(scope, receive, send)
            return

        conn = HTTPConnection(scope)
        session = await self._load_session(conn)
        initial_values = copy.deepcopy(session.values)
        initial_user_id = session.user_id

        # Attach session to scope so request.state.session works
        scope["state"] = scope.get("state", {})
        scope["state"]["session"] = session

        async def send_wrapper(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                current: Session = scope["state"]["session"]

                if current.options.max_age < 0:
                    if current.id is not None:
                        await self.store.save(conn, headers, current)
                elif (
                    current.values != initial_values
                    or current.user_id != initial_user_id
                ):
                    await self.store.save(conn, headers, current)
                elif self.touch and not current.is_new:
                    current.values.pop(LAST_ACCESSED_KEY, None)
                    await self.store.save(conn, headers, current)

            await send(message)

        await self.app(scope, receive, send_wrapper)

    async def _load_session(self, conn: HTTPConnection) -> Session:
        try:
            return await self.store.get(conn, self.cookie_name)
        except SessionError as e:
            if e.session is None:
                raise
            logger.error("Could not load %r session: %s", self.cookie_name, e)
            return e.session
