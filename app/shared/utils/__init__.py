"""Shared utilities: datetime and sanitization."""

from app.shared.utils.datetime import ensure_utc, time_suffix, utc_now
from app.shared.utils.sanitization import (
    InputSanitizer,
    sanitize_display_name,
    slugify,
)

__all__ = [
    "utc_now",
    "ensure_utc",
    "time_suffix",
    "InputSanitizer",
    "sanitize_display_name",
    "slugify",
]
