"""Domain entities and aggregates.

Pure domain models; no persistence concerns.
"""

from app.domain.entities.admin_record import AdminRecord
from app.domain.entities.organization import Organization
from app.domain.entities.principal import Principal

__all__ = [
    "AdminRecord",
    "Organization",
    "Principal",
]
