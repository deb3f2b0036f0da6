"""Auth API schemas."""

from typing import Any

from pydantic import BaseModel, Field

from app.domain.enums import AdminRole, SessionState


class AuthErrorResponse(BaseModel):
    """Error recorded by the last OAuth callback (reported once)."""

    error: str = Field(..., description="Machine-readable code, e.g. IDENTITY_CONFLICT")
    message: str = Field(..., description="Message shown to the user")


class SessionResponse(BaseModel):
    """Response for GET /auth/session: the resolved role of this browser's principal."""

    state: SessionState
    uid: str | None = None
    email: str | None = None
    role: AdminRole | None = None
    organization_id: str | None = None
    organization: dict[str, Any] | None = Field(
        default=None, description="Live snapshot of the admin's organization (org admins)"
    )
    reason: str | None = Field(default=None, description="Why access was denied")
    is_new_account: bool = Field(
        default=False, description="True once, right after a successful signup"
    )
    error: AuthErrorResponse | None = None
