"""Principal: an authenticated identity in the password-based backend."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Principal:
    """Identity created by the authentication backend.

    uid is immutable; email changes only through the backend. id_token is the
    backend session token and is never persisted to the document store.
    """

    uid: str
    email: str
    id_token: str | None = None

    def __repr__(self) -> str:
        return f"Principal(uid={self.uid!r}, email={self.email!r})"
