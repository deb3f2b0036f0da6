"""Browser session middleware.

Assigns each browser an opaque session id cookie and exposes it to handlers as
``request.state.browser_session_id``. The id keys the per-browser context
(local store, authentication state, role resolver) in BrowserSessionRegistry.
Client-provided ids are validated (length + character set) and replaced when
malformed. Uses raw ASGI (no BaseHTTPMiddleware).
"""

import re
import secrets
from http.cookies import CookieError, SimpleCookie
from typing import Callable

SESSION_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{32,64}$")
_SESSION_ID_BYTES = 32


def _get_header(scope: dict, name: str) -> str | None:
    """Return first header value for name (case-insensitive). Headers are (bytes, bytes)."""
    want = name.lower().encode()
    for k, v in scope.get("headers", []):
        if k.lower() == want:
            return v.decode("latin-1")
    return None


def _read_session_id(scope: dict, cookie_name: str) -> str | None:
    raw = _get_header(scope, "cookie")
    if not raw:
        return None
    try:
        cookie = SimpleCookie(raw)
    except CookieError:
        return None
    morsel = cookie.get(cookie_name)
    if morsel is None or not SESSION_ID_PATTERN.match(morsel.value):
        return None
    return morsel.value


def _set_cookie_header(
    cookie_name: str, session_id: str, max_age: int, secure: bool
) -> bytes:
    parts = [
        f"{cookie_name}={session_id}",
        "Path=/",
        f"Max-Age={max_age}",
        "HttpOnly",
        "SameSite=Lax",
    ]
    if secure:
        parts.append("Secure")
    return "; ".join(parts).encode("latin-1")


def BrowserSessionMiddleware(
    app: Callable,
    cookie_name: str = "portal_session",
    max_age: int = 8 * 60 * 60,
    secure: bool = True,
) -> Callable:
    """Forward or issue the browser session cookie on every HTTP request. Raw ASGI.

    The cookie is re-sent on each response so its lifetime slides with activity.
    """

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        session_id = _read_session_id(scope, cookie_name) or secrets.token_urlsafe(
            _SESSION_ID_BYTES
        )
        scope.setdefault("state", {})["browser_session_id"] = session_id
        cookie_header = _set_cookie_header(cookie_name, session_id, max_age, secure)

        async def send_wrapper(message: dict) -> None:
            if message["type"] == "http.response.start":
                headers = list(message.get("headers", []))
                headers.append((b"set-cookie", cookie_header))
                message["headers"] = headers
            await send(message)

        await app(scope, receive, send_wrapper)

    return asgi_app
