"""Domain value objects and shared value types."""

from app.domain.value_objects.core import EmailAddress, TenantSlug

__all__ = [
    "EmailAddress",
    "TenantSlug",
]
