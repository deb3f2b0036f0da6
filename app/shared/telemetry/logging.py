"""Logging setup.

Every record passes through RedactingFilter before it is written: OAuth
authorization codes, state values, API keys and tokens that end up in
URLs or exception messages are masked.
"""

import logging
import re
import sys

from app.core.config import get_settings

_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_SECRET_PARAMS = re.compile(
    r"(?P<key>\b(?:code|state|key|token|access_token|refresh_token|idToken|password|client_secret)=)"
    r"[^&\s\"']+"
)
_MASK = "***"


def redact(text: str) -> str:
    """Mask the values of secret-bearing query parameters in text."""
    return _SECRET_PARAMS.sub(lambda m: m.group("key") + _MASK, text)


class RedactingFilter(logging.Filter):
    """Rewrites the formatted message with secrets masked."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        masked = redact(message)
        if masked != message:
            record.msg = masked
            record.args = None
        return True


def setup_logging() -> None:
    """Configure root logging to stdout (DEBUG when settings.debug, else INFO).

    httpx request lines stay at WARNING; they carry full URLs.
    """
    settings = get_settings()
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RedactingFilter())
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format=_LOG_FORMAT,
        handlers=[handler],
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
