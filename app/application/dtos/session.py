"""Read model of a browser's resolved session."""

from dataclasses import dataclass, field
from typing import Any

from app.domain.enums import AdminRole, SessionState


@dataclass(frozen=True)
class SessionSnapshot:
    """Point-in-time view of the session coordinator.

    organization holds the latest snapshot of the live organization
    subscription (org admins only). reason explains ACCESS_DENIED.
    """

    state: SessionState
    uid: str | None = None
    email: str | None = None
    role: AdminRole | None = None
    organization_id: str | None = None
    organization: dict[str, Any] | None = field(default=None)
    reason: str | None = None
    is_new_account: bool = False
