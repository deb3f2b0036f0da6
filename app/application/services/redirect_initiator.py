"""Redirect initiator: builds the outbound authorization request."""

from __future__ import annotations

import logging
import secrets

from app.application.interfaces.services import ClientStore, IIdentityProvider
from app.domain.enums import OAuthMode
from app.domain.exceptions import ValidationException
from app.domain.value_objects import TenantSlug

logger = logging.getLogger(__name__)

OAUTH_STATE_KEY = "arcgis_oauth_state"
OAUTH_MODE_KEY = "arcgis_oauth_mode"
OAUTH_CLIENT_ID_KEY = "arcgis_oauth_client_id"
SIGNUP_TARGET_ORG_KEY = "signup_target_org"

_STATE_BYTES = 32


class RedirectInitiator:
    """Generates the anti-forgery token, persists the intent browser-locally, and returns the provider URL."""

    def __init__(self, provider: IIdentityProvider, store: ClientStore) -> None:
        self.provider = provider
        self.store = store

    def begin(
        self,
        mode: OAuthMode | str,
        client_id: str | None = None,
        target_organization: str | None = None,
    ) -> str:
        """Persist state, mode, client id and optional deep-link target; return the authorize URL.

        Each call replaces any previous pending request for this browser.
        """
        try:
            mode = OAuthMode(mode)
        except ValueError as e:
            raise ValidationException(
                f"mode must be one of: {', '.join(m.value for m in OAuthMode)}",
                field="mode",
            ) from e
        if target_organization:
            try:
                TenantSlug(target_organization)
            except ValueError as e:
                raise ValidationException(str(e), field="org") from e

        state = secrets.token_urlsafe(_STATE_BYTES)
        self.store[OAUTH_STATE_KEY] = state
        self.store[OAUTH_MODE_KEY] = mode.value
        if client_id:
            self.store[OAUTH_CLIENT_ID_KEY] = client_id
        else:
            self.store.pop(OAUTH_CLIENT_ID_KEY, None)
        if target_organization:
            self.store[SIGNUP_TARGET_ORG_KEY] = target_organization
        else:
            self.store.pop(SIGNUP_TARGET_ORG_KEY, None)

        logger.info("OAuth redirect initiated (mode=%s)", mode.value)
        return self.provider.authorization_url(state, mode, client_id)
