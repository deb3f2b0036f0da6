"""Organization (tenant) domain entity."""

from dataclasses import dataclass, field
from typing import Any

from app.domain.exceptions import ValidationException
from app.domain.value_objects.core import TenantSlug


@dataclass
class Organization:
    """Domain entity for a tenant.

    id is the URL-stable slug assigned at provisioning time. At most one
    organization may carry a given arcgis_org_id. Fields the identity
    subsystem does not interpret (notification rules, map settings, ...)
    are kept in ``extra`` untouched.
    """

    id: str
    name: str
    arcgis_org_id: str | None = None
    notifications: list[dict[str, Any]] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Validate organization rules. Raises ValidationException if invalid."""
        try:
            TenantSlug(self.id)
        except ValueError as e:
            raise ValidationException(str(e), field="id") from e
        if not self.name or not self.name.strip():
            raise ValidationException("Organization name is required", field="name")
