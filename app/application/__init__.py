"""Application layer: interfaces, services, DTOs.

Depends only on domain and protocol definitions (DIP).
Infrastructure implements the interfaces (repositories, auth backend, identity provider).
"""

from app.application.interfaces import (
    ClientStore,
    IAdminRepository,
    IAuthBackend,
    IIdentityProvider,
    IOrganizationRepository,
    ITenantWriter,
)
from app.application.services import (
    CallbackVerifier,
    CredentialBridge,
    OAuthCallbackHandler,
    ProvisioningSignal,
    RedirectInitiator,
    SessionCoordinator,
    TenantProvisioner,
)

__all__ = [
    "CallbackVerifier",
    "ClientStore",
    "CredentialBridge",
    "IAdminRepository",
    "IAuthBackend",
    "IIdentityProvider",
    "IOrganizationRepository",
    "ITenantWriter",
    "OAuthCallbackHandler",
    "ProvisioningSignal",
    "RedirectInitiator",
    "SessionCoordinator",
    "TenantProvisioner",
]
