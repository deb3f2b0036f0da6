"""Application DTOs (no infrastructure dependency)."""

from app.application.dtos.identity import (
    CallbackOutcome,
    CallbackParams,
    ProviderIdentity,
    ProvisioningResult,
    VerifiedCallback,
)
from app.application.dtos.session import SessionSnapshot

__all__ = [
    "CallbackOutcome",
    "CallbackParams",
    "ProviderIdentity",
    "ProvisioningResult",
    "SessionSnapshot",
    "VerifiedCallback",
]
