"""Organizations API: read an organization the resolved admin may manage."""

from fastapi import APIRouter, HTTPException

from app.api.v1.dependencies import AdminDep, ContainerDep
from app.domain.exceptions import AuthorizationException
from app.schemas.organization import OrganizationResponse

router = APIRouter()


@router.get("/{org_id}", response_model=OrganizationResponse)
async def get_organization(
    org_id: str,
    admin: AdminDep,
    container: ContainerDep,
) -> OrganizationResponse:
    """Super admins may read any organization; org admins only their own."""
    if not admin.can_manage(org_id):
        raise AuthorizationException(resource="organization", action="read")
    organization = await container.organizations.get(org_id)
    if organization is None:
        raise HTTPException(status_code=404, detail="Organization not found")
    return OrganizationResponse(
        id=organization.id,
        name=organization.name,
        arcgis_org_id=organization.arcgis_org_id,
        notifications=organization.notifications,
    )
