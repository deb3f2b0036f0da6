"""Firebase Authentication through the Identity Toolkit REST API.

One FirebaseAuthClient models the authentication state of one browser: it
holds the signed-in principal and notifies subscribers when it changes.
Notifications are scheduled on the event loop (``call_soon``), never run
inline, so they race independently with whatever caused the change.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

import httpx

from app.application.interfaces.services import PrincipalListener
from app.domain.entities import Principal
from app.domain.exceptions import (
    AuthBackendError,
    AuthenticationException,
    IdentityConflictError,
)

logger = logging.getLogger(__name__)

_BASE = "https://identitytoolkit.googleapis.com/v1"

_EMAIL_REGISTERED_MESSAGE = (
    "An account already exists for this ArcGIS identity. Sign in instead."
)
_UNKNOWN_IDENTITY_MESSAGE = (
    "No account is linked to this ArcGIS identity; sign up first."
)
_BAD_CREDENTIAL_CODES = frozenset(
    {"EMAIL_NOT_FOUND", "INVALID_PASSWORD", "INVALID_LOGIN_CREDENTIALS"}
)


def _error_code(resp: httpx.Response) -> str:
    """Return the Identity Toolkit error code, e.g. 'EMAIL_EXISTS' from 'EMAIL_EXISTS : ...'."""
    try:
        message = resp.json().get("error", {}).get("message", "")
    except (ValueError, AttributeError):
        return f"HTTP_{resp.status_code}"
    return message.split(" ", 1)[0].strip() or f"HTTP_{resp.status_code}"


class FirebaseAuthClient:
    """Email/password authentication backend for one browser session."""

    def __init__(
        self,
        api_key: str,
        http_client: httpx.AsyncClient,
        *,
        base_url: str = _BASE,
    ) -> None:
        self._api_key = api_key
        self._http = http_client
        self._base_url = base_url.rstrip("/")
        self._principal: Principal | None = None
        self._listeners: list[PrincipalListener] = []

    @property
    def current_principal(self) -> Principal | None:
        return self._principal

    async def create_principal(self, email: str, password: str) -> Principal:
        """Create a principal (accounts:signUp) and sign it in.

        Raises:
            IdentityConflictError: the email is already registered.
            AuthBackendError: any other backend failure.
        """
        data = await self._call(
            "accounts:signUp",
            {"email": email, "password": password, "returnSecureToken": True},
            operation="create_principal",
        )
        principal = self._principal_from(data, email)
        logger.info("Created principal %s", principal.uid)
        self._set_principal(principal)
        return principal

    async def sign_in(self, email: str, password: str) -> Principal:
        """Sign in (accounts:signInWithPassword).

        Raises:
            AuthenticationException: unknown email or wrong password.
            AuthBackendError: any other backend failure.
        """
        data = await self._call(
            "accounts:signInWithPassword",
            {"email": email, "password": password, "returnSecureToken": True},
            operation="sign_in",
        )
        principal = self._principal_from(data, email)
        self._set_principal(principal)
        return principal

    async def delete_principal(self, principal: Principal) -> None:
        """Delete principal (accounts:delete) using its own session token."""
        if not principal.id_token:
            raise AuthBackendError("delete_principal", "missing_id_token")
        await self._call(
            "accounts:delete", {"idToken": principal.id_token}, operation="delete_principal"
        )
        logger.info("Deleted principal %s", principal.uid)
        if self._principal is not None and self._principal.uid == principal.uid:
            self._set_principal(None)

    def sign_out(self) -> None:
        self._set_principal(None)

    def subscribe(self, listener: PrincipalListener) -> Callable[[], None]:
        """Register listener; it is scheduled with the current principal, then on each change."""
        self._listeners.append(listener)
        asyncio.get_running_loop().call_soon(self._dispatch, listener, self._principal)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _set_principal(self, principal: Principal | None) -> None:
        previous = self._principal
        self._principal = principal
        previous_uid = previous.uid if previous else None
        new_uid = principal.uid if principal else None
        if previous_uid == new_uid:
            return
        loop = asyncio.get_running_loop()
        for listener in list(self._listeners):
            loop.call_soon(self._dispatch, listener, principal)

    def _dispatch(self, listener: PrincipalListener, principal: Principal | None) -> None:
        if listener not in self._listeners:
            return
        try:
            listener(principal)
        except Exception:
            logger.exception("Principal-change listener failed")

    async def _call(self, method: str, body: dict[str, Any], *, operation: str) -> dict:
        url = f"{self._base_url}/{method}"
        try:
            resp = await self._http.post(url, params={"key": self._api_key}, json=body)
        except httpx.HTTPError as e:
            logger.warning("Identity Toolkit %s unreachable: %s", operation, type(e).__name__)
            raise AuthBackendError(operation, "unavailable") from e
        if resp.status_code == 200:
            return resp.json() if resp.content else {}

        code = _error_code(resp)
        logger.info("Identity Toolkit %s failed: %s", operation, code)
        if code == "EMAIL_EXISTS":
            raise IdentityConflictError(_EMAIL_REGISTERED_MESSAGE, reason="email_registered")
        if code in _BAD_CREDENTIAL_CODES:
            raise AuthenticationException(_UNKNOWN_IDENTITY_MESSAGE)
        if code == "USER_DISABLED":
            raise AuthenticationException("This account has been disabled.")
        raise AuthBackendError(operation, code)

    @staticmethod
    def _principal_from(data: dict, email: str) -> Principal:
        uid = data.get("localId")
        if not uid:
            raise AuthBackendError("parse_response", "missing_local_id")
        return Principal(
            uid=uid,
            email=data.get("email") or email,
            id_token=data.get("idToken"),
        )
