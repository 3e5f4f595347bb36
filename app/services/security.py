"""Password hashing and opaque token helpers."""

import hashlib
import secrets

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

TOKEN_BYTES = 32  # 256 bits


def generate_token() -> str:
    """Return a fresh URL- and cookie-safe random token."""
    return secrets.token_urlsafe(TOKEN_BYTES)


def hash_token(token: str) -> str:
    """Digest stored in place of a raw setup or reset token."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class PasswordHashing:
    """Argon2id hashing with a per-password random salt."""

    def __init__(self, time_cost: int = 3, memory_cost: int = 65536, parallelism: int = 4) -> None:
        self._hasher = PasswordHasher(time_cost=time_cost, memory_cost=memory_cost, parallelism=parallelism)
        # Verified against when no account matches, so unknown e-mails cost the same as wrong passwords.
        self._dummy_hash = self._hasher.hash(generate_token())

    def hash(self, password: str) -> str:
        return self._hasher.hash(password)

    def verify(self, password_hash: str | None, password: str) -> bool:
        """Check a password against a stored hash. A missing hash never matches."""
        if password_hash is None:
            self._verify_quietly(self._dummy_hash, password)
            return False
        return self._verify_quietly(password_hash, password)

    def _verify_quietly(self, password_hash: str, password: str) -> bool:
        try:
            return self._hasher.verify(password_hash, password)
        except (VerificationError, InvalidHashError):
            return False
