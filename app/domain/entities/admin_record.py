"""AdminRecord domain entity.

One record per principal uid grants portal access: either system-wide
(super_admin) or scoped to a single organization (org_admin).
"""

from dataclasses import dataclass
from datetime import datetime

from app.domain.enums import AdminRole
from app.domain.exceptions import ValidationException


@dataclass
class AdminRecord:
    """Domain entity for an admin grant keyed by principal uid.

    Invariant: organization_id is set if and only if role is ORG_ADMIN.
    Validation runs on construction.
    """

    uid: str
    email: str
    role: AdminRole
    organization_id: str | None = None
    disabled: bool = False
    created_at: datetime | None = None

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Validate admin record rules. Raises ValidationException if invalid."""
        if not self.uid:
            raise ValidationException("Admin uid is required", field="uid")
        if self.role == AdminRole.ORG_ADMIN and not self.organization_id:
            raise ValidationException(
                "org_admin records must reference an organization",
                field="organization_id",
            )
        if self.role == AdminRole.SUPER_ADMIN and self.organization_id:
            raise ValidationException(
                "super_admin records must not reference an organization",
                field="organization_id",
            )

    @property
    def is_super_admin(self) -> bool:
        return self.role == AdminRole.SUPER_ADMIN and not self.disabled

    def can_manage(self, organization_id: str) -> bool:
        """Return whether this admin may manage the given organization.

        Super admins manage every organization; org admins only their own.
        Disabled records manage nothing.
        """
        if self.disabled:
            return False
        if self.role == AdminRole.SUPER_ADMIN:
            return True
        return self.organization_id == organization_id
