"""DTOs for the identity federation and provisioning flow (no infrastructure types)."""

from dataclasses import dataclass

from app.domain.enums import OAuthMode


@dataclass(frozen=True)
class ProviderIdentity:
    """Profile of the identity-provider account returned after the code exchange.

    org_id is None for personal accounts. org_name and org_url_key come from the
    provider's organization lookup, which may fail independently of the profile.
    """

    username: str
    email: str | None = None
    full_name: str | None = None
    org_id: str | None = None
    org_name: str | None = None
    org_url_key: str | None = None


@dataclass(frozen=True)
class CallbackParams:
    """Protocol parameters recovered from the redirect URL."""

    code: str | None = None
    state: str | None = None
    error: str | None = None
    error_description: str | None = None

    @property
    def is_callback(self) -> bool:
        """True when the URL carries any OAuth return parameter."""
        return bool(self.code or self.state or self.error)


@dataclass(frozen=True)
class VerifiedCallback:
    """Callback that passed the anti-forgery check, with the intent recorded at redirect time."""

    code: str
    mode: OAuthMode
    client_id: str | None = None
    target_organization: str | None = None


@dataclass(frozen=True)
class ProvisioningResult:
    """Outcome of a successful tenant provisioning."""

    uid: str
    email: str
    organization_id: str
    arcgis_org_id: str


@dataclass(frozen=True)
class CallbackOutcome:
    """Result of handling a verified callback: who is now signed in, and where to go."""

    mode: OAuthMode
    uid: str
    organization_id: str | None = None
    target_organization: str | None = None
