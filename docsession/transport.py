"""Token transport: where the sealed session identifier travels."""

from __future__ import annotations

import time
from email.utils import formatdate
from typing import Protocol, Union, runtime_checkable

from starlette.datastructures import MutableHeaders
from starlette.requests import HTTPConnection
from starlette.responses import Response

from .errors import TokenNotFound
from .sessions import Options

ResponseLike = Union[Response, MutableHeaders]

EPOCH = "Thu, 01 Jan 1970 00:00:00 GMT"


@runtime_checkable
class TokenProvider(Protocol):
    """Reads a named token from a request and writes one onto a response."""

    def get_token(self, request: HTTPConnection, name: str) -> str:
        """Return the token, raising TokenNotFound if it is absent."""
        ...

    def set_token(
        self, response: ResponseLike, name: str, token: str, options: Options
    ) -> None:
        """Write the token; an empty token clears it on the client."""
        ...


class CookieToken:
    """Carries the token in a cookie."""

    def get_token(self, request: HTTPConnection, name: str) -> str:
        value = request.cookies.get(name)
        if not value:
            raise TokenNotFound(f"No {name!r} cookie on request")
        return value

    def set_token(
        self, response: ResponseLike, name: str, token: str, options: Options
    ) -> None:
        headers = response if isinstance(response, MutableHeaders) else response.headers
        headers.append("set-cookie", make_cookie(name, token, options))


def make_cookie(name: str, value: str, options: Options) -> str:
    """Render a Set-Cookie header value."""
    parts = [f"{name}={value}"]

    if not value or options.max_age < 0:
        parts.append("Max-Age=0")
        parts.append(f"Expires={EPOCH}")
    elif options.max_age > 0:
        parts.append(f"Max-Age={options.max_age}")
        parts.append(f"Expires={_http_date(time.time() + options.max_age)}")

    if options.path:
        parts.append(f"Path={options.path}")
    if options.domain:
        parts.append(f"Domain={options.domain}")
    if options.http_only:
        parts.append("HttpOnly")
    if options.secure:
        parts.append("Secure")
    if options.same_site:
        parts.append(f"SameSite={options.same_site}")
    return "; ".join(parts)


def _http_date(timestamp: float) -> str:
    return formatdate(timestamp, usegmt=True)
