"""Service interfaces (ports) for the application layer.

Protocols define contracts for external collaborators (DIP).
"""

from __future__ import annotations

from collections.abc import Callable, MutableMapping
from typing import Protocol

from app.application.dtos.identity import ProviderIdentity
from app.domain.entities import Principal
from app.domain.enums import OAuthMode

# Browser-local ephemeral key/value store (one per browser session).
ClientStore = MutableMapping[str, str]

PrincipalListener = Callable[["Principal | None"], None]


# Authentication backend interface
class IAuthBackend(Protocol):
    """Password-based authentication backend as seen by one browser.

    Principal-change listeners are scheduled on the event loop independently of
    the call that changed the principal, never invoked inline.
    """

    @property
    def current_principal(self) -> Principal | None:
        """Currently signed-in principal, or None."""

    async def create_principal(self, email: str, password: str) -> Principal:
        """Create a principal and sign it in.

        Raises IdentityConflictError(reason='email_registered') if the email is taken.
        """

    async def sign_in(self, email: str, password: str) -> Principal:
        """Sign in with email and password. Raises AuthenticationException on bad credentials."""

    async def delete_principal(self, principal: Principal) -> None:
        """Delete a principal created by this client (compensation)."""

    def sign_out(self) -> None:
        """Forget the current principal and notify listeners."""

    def subscribe(self, listener: PrincipalListener) -> Callable[[], None]:
        """Register listener; it is scheduled once with the current principal, then on every change."""


# Identity provider interface
class IIdentityProvider(Protocol):
    """OAuth 2.0 authorization-code identity provider."""

    def authorization_url(
        self, state: str, mode: OAuthMode, client_id: str | None = None
    ) -> str:
        """Build the authorize URL the browser is sent to."""

    async def complete(self, code: str, client_id: str | None = None) -> ProviderIdentity:
        """Exchange the code and return the provider identity. Raises ProviderError."""
