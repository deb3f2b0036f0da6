"""
UTC datetime utilities for consistent timezone handling.

All datetime values in the system should be timezone-aware UTC.
Use these helpers instead of datetime.now() or datetime.utcnow().
"""

from datetime import UTC, datetime

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def utc_now() -> datetime:
    """
    Return the current UTC datetime with timezone info.

    Returns:
        Timezone-aware datetime in UTC
    """
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """
    Ensure a datetime is UTC-aware.

    Naive values are assumed to be UTC; aware values are converted.
    Use at document-store boundaries to normalize decoded timestamps.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def time_suffix(now: datetime | None = None, length: int = 6) -> str:
    """
    Return a short base36 suffix derived from the current time in milliseconds.

    Used to disambiguate colliding tenant slugs (e.g. 'acme-county-l2x9qa').

    Args:
        now: Reference time (defaults to utc_now()).
        length: Number of trailing base36 digits to keep.

    Returns:
        Lowercase base36 string of at most ``length`` characters.
    """
    ms = int((now or utc_now()).timestamp() * 1000)
    digits = []
    while ms:
        ms, rem = divmod(ms, 36)
        digits.append(_BASE36[rem])
    encoded = "".join(reversed(digits)) or "0"
    return encoded[-length:]
