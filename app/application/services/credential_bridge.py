"""Credential bridge: provider identity -> password-backend credentials.

The authentication backend only understands email + password, and there is no
server-side federation table. The password is therefore derived, on every
visit, from stable provider attributes with a keyed one-way function. Rotating
the deployment key invalidates every bridged password.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import re

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from app.application.dtos.identity import ProviderIdentity
from app.domain.exceptions import ValidationException
from app.domain.value_objects import EmailAddress

_BRIDGE_KEY_INFO = b"arcgis-credential-bridge-v1"
_LOCAL_PART_RE = re.compile(r"[^a-z0-9._-]+")


def select_salt_material(identity: ProviderIdentity) -> str:
    """Provider email if present, else provider organization id, else the username.

    The email is normalized like the principal email, so a case-only change
    at the provider keeps the same secret.
    """
    email = (identity.email or "").strip().lower()
    return email or identity.org_id or identity.username


def _length_prefixed(*parts: str) -> bytes:
    out = bytearray()
    for part in parts:
        raw = part.encode("utf-8")
        out += len(raw).to_bytes(4, "big")
        out += raw
    return bytes(out)


class CredentialBridge:
    """Deterministic secret and email derivation for provider identities."""

    def __init__(self, master_key: str, email_domain: str) -> None:
        if not master_key:
            raise ValueError("Credential bridge key must not be empty")
        self._key = HKDF(
            algorithm=hashes.SHA256(),
            length=32,
            salt=None,
            info=_BRIDGE_KEY_INFO,
        ).derive(master_key.encode("utf-8"))
        self.email_domain = email_domain.strip().lower()

    def derive_secret(self, username: str, salt_material: str) -> str:
        """Return the bridged password for (username, salt_material).

        Pure function of its inputs and the deployment key. Inputs are
        length-prefixed so ("ab", "c") and ("a", "bc") never collide.
        """
        if not username.strip():
            raise ValidationException("Provider username is required", field="username")
        mac = hmac.new(
            self._key, _length_prefixed(username, salt_material), hashlib.sha256
        ).digest()
        return base64.urlsafe_b64encode(mac).rstrip(b"=").decode("ascii")

    def derive_email(self, identity: ProviderIdentity) -> str:
        """Principal email: the provider email, else <username>@<bridge domain>."""
        if identity.email:
            try:
                return str(EmailAddress(identity.email))
            except ValueError:
                # Malformed provider email: fall back to the bridge domain.
                pass
        local = _LOCAL_PART_RE.sub("_", identity.username.strip().lower())
        if not local:
            raise ValidationException("Provider username is required", field="username")
        try:
            return str(EmailAddress(f"{local}@{self.email_domain}"))
        except ValueError as e:
            raise ValidationException(str(e), field="email") from e

    def credentials_for(self, identity: ProviderIdentity) -> tuple[str, str]:
        """Return (email, secret) for signing the identity into the backend."""
        return (
            self.derive_email(identity),
            self.derive_secret(identity.username, select_salt_material(identity)),
        )
