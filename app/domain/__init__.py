"""Domain layer: entities, value objects, enums, and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from app.domain.entities import AdminRecord, Organization, Principal
from app.domain.enums import AdminRole, OAuthMode, SessionState
from app.domain.exceptions import (
    AuthBackendError,
    AuthenticationException,
    AuthorizationException,
    IdentityConflictError,
    OAuthProtocolError,
    PortalException,
    ProviderError,
    ProvisioningPartialFailure,
    RoleNotFoundError,
    TenantDocumentConflict,
    ValidationException,
)
from app.domain.value_objects import EmailAddress, TenantSlug

__all__ = [
    # Entities
    "AdminRecord",
    "Organization",
    "Principal",
    # Enums
    "AdminRole",
    "OAuthMode",
    "SessionState",
    # Exceptions
    "AuthBackendError",
    "AuthenticationException",
    "AuthorizationException",
    "IdentityConflictError",
    "OAuthProtocolError",
    "PortalException",
    "ProviderError",
    "ProvisioningPartialFailure",
    "RoleNotFoundError",
    "TenantDocumentConflict",
    "ValidationException",
    # Value objects
    "EmailAddress",
    "TenantSlug",
]
