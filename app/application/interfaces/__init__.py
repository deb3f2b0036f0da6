"""Application interfaces (ports). Infrastructure implements these."""

from app.application.interfaces.repositories import (
    IAdminRepository,
    IOrganizationRepository,
    ITenantWriter,
    OrganizationListener,
    Unsubscribe,
)
from app.application.interfaces.services import (
    ClientStore,
    IAuthBackend,
    IIdentityProvider,
    PrincipalListener,
)

__all__ = [
    "ClientStore",
    "IAdminRepository",
    "IAuthBackend",
    "IIdentityProvider",
    "IOrganizationRepository",
    "ITenantWriter",
    "OrganizationListener",
    "PrincipalListener",
    "Unsubscribe",
]
