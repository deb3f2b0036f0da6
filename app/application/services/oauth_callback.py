"""OAuth callback handling: verified code -> provider identity -> signed-in principal."""

from __future__ import annotations

import logging

from app.application.dtos.identity import CallbackOutcome, CallbackParams
from app.application.interfaces.services import IAuthBackend, IIdentityProvider
from app.application.services.callback_verifier import CallbackVerifier
from app.application.services.credential_bridge import CredentialBridge
from app.application.services.tenant_provisioner import TenantProvisioner
from app.domain.enums import OAuthMode
from app.shared.telemetry.tracing import add_span_attributes, traced

logger = logging.getLogger(__name__)


class OAuthCallbackHandler:
    """Runs one callback: verify, exchange the code, then provision or sign in.

    Sign-in never provisions: a returning provider user without an admin
    record is signed in and left for the role resolver to deny.
    """

    def __init__(
        self,
        verifier: CallbackVerifier,
        provider: IIdentityProvider,
        auth: IAuthBackend,
        bridge: CredentialBridge,
        provisioner: TenantProvisioner,
    ) -> None:
        self.verifier = verifier
        self.provider = provider
        self.auth = auth
        self.bridge = bridge
        self.provisioner = provisioner

    @traced("oauth.callback")
    async def handle(self, params: CallbackParams) -> CallbackOutcome:
        """Process callback parameters; raises PortalException subclasses on failure."""
        verified = self.verifier.verify(params)
        add_span_attributes(**{"oauth.mode": verified.mode.value})
        identity = await self.provider.complete(verified.code, verified.client_id)

        if verified.mode == OAuthMode.SIGNUP:
            result = await self.provisioner.provision(identity)
            return CallbackOutcome(
                mode=verified.mode,
                uid=result.uid,
                organization_id=result.organization_id,
                target_organization=verified.target_organization,
            )

        email, secret = self.bridge.credentials_for(identity)
        principal = await self.auth.sign_in(email, secret)
        logger.info("Provider sign-in completed for uid %s", principal.uid)
        return CallbackOutcome(
            mode=verified.mode,
            uid=principal.uid,
            target_organization=verified.target_organization,
        )
