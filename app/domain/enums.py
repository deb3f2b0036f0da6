"""Domain enumerations for the admin portal.

Enums represent fixed sets of domain values (roles, OAuth modes, session states).
"""

from enum import Enum


class AdminRole(str, Enum):
    """Role carried by an admin record."""

    SUPER_ADMIN = "super_admin"
    ORG_ADMIN = "org_admin"

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid role values as strings."""
        return [role.value for role in cls]


class OAuthMode(str, Enum):
    """Intent recorded at redirect time and read back on callback."""

    SIGNIN = "signin"
    SIGNUP = "signup"


class SessionState(str, Enum):
    """States of the session coordinator.

    LOADING -> UNAUTHENTICATED | PRINCIPAL_KNOWN
    PRINCIPAL_KNOWN -> SUPER_ADMIN | ORG_ADMIN | ACCESS_DENIED
    """

    LOADING = "loading"
    UNAUTHENTICATED = "unauthenticated"
    PRINCIPAL_KNOWN = "principal_known"
    SUPER_ADMIN = "super_admin"
    ORG_ADMIN = "org_admin"
    ACCESS_DENIED = "access_denied"

    @property
    def is_terminal(self) -> bool:
        """Return True for states the dashboard can render without waiting."""
        return self not in (SessionState.LOADING, SessionState.PRINCIPAL_KNOWN)
