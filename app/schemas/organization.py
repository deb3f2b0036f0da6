"""Organization API schemas."""

from typing import Any

from pydantic import BaseModel, Field


class OrganizationResponse(BaseModel):
    """Organization as returned to an admin who may manage it."""

    id: str = Field(..., description="Tenant slug")
    name: str
    arcgis_org_id: str | None = None
    notifications: list[dict[str, Any]] = Field(default_factory=list)
