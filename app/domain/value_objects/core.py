"""Domain value objects for the admin portal.

Value objects are immutable types that represent domain concepts with
self-validation. They have no identity, only value.
"""

import re
from dataclasses import dataclass
from typing import ClassVar

# Shared slug pattern: lowercase alphanumeric with optional hyphens (e.g. acme-county).
_SLUG_RE = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")


def _validate_slug(
    value: str,
    min_len: int,
    max_len: int,
    field_name: str,
    format_hint: str = "lowercase alphanumeric with optional hyphens",
) -> None:
    """Validate non-empty, length, and slug format. Raises ValueError on failure."""
    if not value:
        raise ValueError(f"{field_name} must be a non-empty string")
    if len(value) < min_len or len(value) > max_len:
        raise ValueError(f"{field_name} must be {min_len}-{max_len} characters")
    if not _SLUG_RE.match(value):
        raise ValueError(
            f"{field_name} must be {format_hint} (e.g., 'acme', 'acme-county')"
        )


@dataclass(frozen=True)
class TenantSlug:
    """URL-stable organization identifier assigned once at provisioning time.

    Slugs are 1-40 characters, lowercase alphanumeric with optional
    single hyphens between runs. Immutable after creation.
    """

    value: str

    MAX_LENGTH: ClassVar[int] = 40

    def __post_init__(self) -> None:
        _validate_slug(
            self.value,
            min_len=1,
            max_len=self.MAX_LENGTH,
            field_name="Tenant slug",
        )

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class EmailAddress:
    """Lower-cased email address used as the principal's login name."""

    value: str

    def __post_init__(self) -> None:
        normalized = self.value.strip().lower()
        object.__setattr__(self, "value", normalized)
        local, sep, domain = normalized.partition("@")
        if not sep or not local or "." not in domain:
            raise ValueError(f"Invalid email address: {self.value!r}")

    def __str__(self) -> str:
        return self.value
