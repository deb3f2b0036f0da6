"""Application services (identity federation, provisioning, role resolution)."""

from app.application.services.callback_verifier import CallbackVerifier, parse_callback
from app.application.services.credential_bridge import (
    CredentialBridge,
    select_salt_material,
)
from app.application.services.oauth_callback import OAuthCallbackHandler
from app.application.services.provisioning_signal import ProvisioningSignal
from app.application.services.redirect_initiator import RedirectInitiator
from app.application.services.session_coordinator import SessionCoordinator
from app.application.services.tenant_provisioner import TenantProvisioner

__all__ = [
    "CallbackVerifier",
    "CredentialBridge",
    "OAuthCallbackHandler",
    "ProvisioningSignal",
    "RedirectInitiator",
    "SessionCoordinator",
    "TenantProvisioner",
    "parse_callback",
    "select_salt_material",
]
