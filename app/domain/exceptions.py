"""Domain exceptions for the admin portal identity subsystem.

Defines domain-level exceptions that represent protocol and business rule
violations. These exceptions are independent of infrastructure concerns.
Presentation layer maps them to HTTP responses in exception handlers, or
(for the OAuth callback) records them for the user and redirects.
"""

from typing import Any


class PortalException(Exception):
    """Base exception for all portal identity errors.

    All custom exceptions should inherit from this class to allow
    consistent error handling and logging. Presentation layer maps
    these to HTTP responses using message, error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, reason).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON body used by exception handlers."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(PortalException):
    """Raised when input validation fails (e.g. invalid format or range)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class AuthenticationException(PortalException):
    """Raised when the authentication backend rejects a credential."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message, "AUTHENTICATION_ERROR")


class AuthorizationException(PortalException):
    """Raised when the resolved admin may not act on a resource."""

    def __init__(
        self,
        resource: str | None = None,
        action: str | None = None,
        message: str = "Permission denied",
    ) -> None:
        """Initialize with optional resource, action, and message.

        Args:
            resource: Optional resource type (e.g. 'organization').
            action: Optional action that was attempted (e.g. 'read').
            message: Human-readable message; default used when resource/action omitted.
        """
        if resource and action:
            message = f"Permission denied: {action} on {resource}"
        details: dict[str, Any] = {}
        if resource:
            details["resource"] = resource
        if action:
            details["action"] = action
        super().__init__(message, "PERMISSION_DENIED", details)


class OAuthProtocolError(PortalException):
    """Missing or mismatched anti-forgery state, or a provider-reported error.

    Fatal and never retried: the user must restart the sign-in flow.
    """

    def __init__(
        self,
        message: str,
        provider_error: str | None = None,
    ) -> None:
        """Initialize with message and the provider's ``error`` value, if any.

        Args:
            message: Description shown to the user.
            provider_error: ``error`` query parameter returned by the provider.
        """
        details = {"provider_error": provider_error} if provider_error else {}
        super().__init__(message, "OAUTH_PROTOCOL_ERROR", details)


class IdentityConflictError(PortalException):
    """Signup attempt conflicts with an existing identity or tenant.

    Raised for personal (organization-less) provider accounts, provider
    organizations that already own a tenant, and emails already registered
    with the authentication backend. The message directs the user to sign in.
    """

    def __init__(self, message: str, reason: str) -> None:
        """Initialize with user-facing message and machine-readable reason.

        Args:
            message: Description shown to the user.
            reason: One of 'personal_account', 'organization_exists', 'email_registered'.
        """
        super().__init__(message, "IDENTITY_CONFLICT", {"reason": reason})


class ProvisioningPartialFailure(PortalException):
    """Principal was created but the tenant documents were not committed."""

    def __init__(
        self,
        uid: str,
        organization_id: str,
        principal_removed: bool,
    ) -> None:
        super().__init__(
            "Account setup could not be completed. Please try again.",
            "PROVISIONING_FAILED",
            {
                "uid": uid,
                "organization_id": organization_id,
                "principal_removed": principal_removed,
            },
        )


class RoleNotFoundError(PortalException):
    """No usable admin record exists for a principal.

    Never surfaced as an HTTP error: the session coordinator converts it into
    the ACCESS_DENIED terminal state.
    """

    def __init__(self, uid: str, reason: str = "no_admin_record") -> None:
        super().__init__(
            "You don't have admin privileges.",
            "ROLE_NOT_FOUND",
            {"uid": uid, "reason": reason},
        )


class AuthBackendError(PortalException):
    """Authentication backend returned an unexpected error."""

    def __init__(self, operation: str, reason: str) -> None:
        super().__init__(
            f"Authentication backend error during {operation}",
            "AUTH_BACKEND_ERROR",
            {"operation": operation, "reason": reason},
        )


class ProviderError(PortalException):
    """Identity provider token exchange or profile lookup failed."""

    def __init__(self, operation: str, status_code: int | None = None) -> None:
        details: dict[str, Any] = {"operation": operation}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(
            f"Identity provider request failed: {operation}",
            "PROVIDER_ERROR",
            details,
        )


class TenantDocumentConflict(PortalException):
    """A tenant document that must not exist yet already exists at commit time."""

    def __init__(self, organization_id: str) -> None:
        super().__init__(
            f"Tenant documents already exist for {organization_id}",
            "DOCUMENT_CONFLICT",
            {"organization_id": organization_id},
        )
