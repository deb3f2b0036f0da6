"""Pydantic request/response schemas for the API."""

from app.schemas.auth import AuthErrorResponse, SessionResponse
from app.schemas.health import HealthResponse
from app.schemas.organization import OrganizationResponse

__all__ = [
    "AuthErrorResponse",
    "HealthResponse",
    "OrganizationResponse",
    "SessionResponse",
]
