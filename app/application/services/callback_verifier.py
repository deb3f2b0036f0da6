"""Callback parser and anti-forgery verifier."""

from __future__ import annotations

import hmac
import logging
from collections.abc import Mapping

from app.application.dtos.identity import CallbackParams, VerifiedCallback
from app.application.interfaces.services import ClientStore
from app.application.services.redirect_initiator import (
    OAUTH_CLIENT_ID_KEY,
    OAUTH_MODE_KEY,
    OAUTH_STATE_KEY,
    SIGNUP_TARGET_ORG_KEY,
)
from app.domain.enums import OAuthMode
from app.domain.exceptions import OAuthProtocolError

logger = logging.getLogger(__name__)


def parse_callback(query: Mapping[str, str]) -> CallbackParams:
    """Recover code, state, error and error_description from the return URL query."""

    def _get(name: str) -> str | None:
        value = query.get(name)
        return value or None

    return CallbackParams(
        code=_get("code"),
        state=_get("state"),
        error=_get("error"),
        error_description=_get("error_description"),
    )


class CallbackVerifier:
    """Validates a callback against the intent persisted by the redirect initiator."""

    def __init__(self, store: ClientStore) -> None:
        self.store = store

    def verify(self, params: CallbackParams) -> VerifiedCallback:
        """Return the verified callback or raise OAuthProtocolError.

        The persisted request is consumed first, so a callback can be
        processed at most once whatever the outcome.
        """
        expected_state = self.store.pop(OAUTH_STATE_KEY, None)
        stored_mode = self.store.pop(OAUTH_MODE_KEY, None)
        client_id = self.store.pop(OAUTH_CLIENT_ID_KEY, None)
        target = self.store.pop(SIGNUP_TARGET_ORG_KEY, None)

        if params.error:
            logger.info("Provider returned error on callback: %s", params.error)
            raise OAuthProtocolError(
                params.error_description or params.error,
                provider_error=params.error,
            )
        if not params.code:
            raise OAuthProtocolError("Authorization response is missing the code")
        if not expected_state or not params.state:
            logger.warning("OAuth callback without persisted or returned state")
            raise OAuthProtocolError(
                "Sign-in session expired or was started elsewhere. Please try again."
            )
        if not hmac.compare_digest(
            expected_state.encode("utf-8"), params.state.encode("utf-8")
        ):
            logger.warning("OAuth state mismatch on callback")
            raise OAuthProtocolError("Invalid OAuth state. Please try again.")

        try:
            mode = OAuthMode(stored_mode) if stored_mode else OAuthMode.SIGNIN
        except ValueError:
            mode = OAuthMode.SIGNIN
        return VerifiedCallback(
            code=params.code,
            mode=mode,
            client_id=client_id,
            target_organization=target,
        )
