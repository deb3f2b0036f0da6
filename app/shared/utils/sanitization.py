"""Input sanitization for provider-supplied values (tenant slugs, display names)."""

import re
from typing import ClassVar

import nh3

from app.domain.value_objects.core import TenantSlug


class InputSanitizer:
    """
    Sanitize values copied from the identity provider into the document store.

    Organization names and short codes come from a third party and end up in
    URLs (slug) and in dashboard markup (display name).
    """

    ALLOWED_TAGS: ClassVar[set[str]] = set()
    SLUG_INVALID_RUN: ClassVar[re.Pattern[str]] = re.compile(r"[^a-z0-9]+")
    FALLBACK_SLUG: ClassVar[str] = "org"

    @classmethod
    def sanitize_html(cls, value: str) -> str:
        """Strip all HTML with nh3; returns plain text safe for display."""
        if not value:
            return value
        return nh3.clean(value, tags=cls.ALLOWED_TAGS, attributes={})

    @classmethod
    def slugify(cls, value: str, max_length: int = TenantSlug.MAX_LENGTH) -> str:
        """Lowercase and reduce to ``[a-z0-9-]``, truncated to ``max_length``.

        Runs of other characters collapse to one hyphen; leading and trailing
        hyphens are removed (also after truncation). Empty input yields 'org'.

        Args:
            value: Raw organization name or short code.
            max_length: Upper bound on the result length.

        Returns:
            A string that is a valid TenantSlug.
        """
        slug = cls.SLUG_INVALID_RUN.sub("-", (value or "").lower()).strip("-")
        slug = slug[:max_length].rstrip("-")
        return slug or cls.FALLBACK_SLUG[:max_length]


def slugify(value: str, max_length: int = TenantSlug.MAX_LENGTH) -> str:
    """Return a tenant slug candidate for value. See InputSanitizer.slugify."""
    return InputSanitizer.slugify(value, max_length=max_length)


def sanitize_display_name(value: str, max_length: int = 255) -> str:
    """Return provider display text with markup removed and whitespace collapsed."""
    cleaned = InputSanitizer.sanitize_html(value or "")
    return " ".join(cleaned.split())[:max_length]
