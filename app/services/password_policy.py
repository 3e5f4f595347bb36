"""Password strength rules shared by account setup, password change and reset."""

import math
import string

from app.errors import ValidationError

DEFAULT_MIN_LENGTH = 20
DEFAULT_MIN_ENTROPY_BITS = 80.0

_SYMBOLS = set(string.punctuation + " ")

# Lowercase fragments; a password containing any of them is rejected.
COMMON_PASSWORDS: tuple[str, ...] = (
    "password",
    "passwort",
    "passw0rd",
    "123456",
    "654321",
    "qwerty",
    "qwertz",
    "azerty",
    "asdfgh",
    "zxcvbn",
    "letmein",
    "welcome",
    "willkommen",
    "iloveyou",
    "admin",
    "login",
    "monkey",
    "dragon",
    "master",
    "sunshine",
    "princess",
    "football",
    "baseball",
    "shadow",
    "superman",
    "batman",
    "trustno1",
    "abc123",
    "111111",
    "000000",
    "secret",
    "changeme",
    "hallo",
    "default",
)


def estimate_entropy(password: str) -> float:
    """Character-class-weighted entropy estimate in bits: length * log2(pool size)."""
    pool = 0
    if any(c in string.ascii_lowercase for c in password):
        pool += 26
    if any(c in string.ascii_uppercase for c in password):
        pool += 26
    if any(c in string.digits for c in password):
        pool += 10
    if any(c in _SYMBOLS or not c.isascii() for c in password):
        pool += len(_SYMBOLS)
    if pool == 0:
        return 0.0
    return len(password) * math.log2(pool)


def validate_password(
    password: str,
    min_length: int = DEFAULT_MIN_LENGTH,
    min_entropy_bits: float = DEFAULT_MIN_ENTROPY_BITS,
) -> None:
    """Raise ValidationError for the first rule the password breaks."""
    if len(password) < min_length:
        raise ValidationError(f"password must be at least {min_length} characters long")

    if not any(c in string.ascii_lowercase for c in password):
        raise ValidationError("password must include at least one lowercase letter")

    if not any(c in string.ascii_uppercase for c in password):
        raise ValidationError("password must include at least one uppercase letter")

    if not any(c in string.digits for c in password):
        raise ValidationError("password must include at least one number")

    if all(c.isascii() and c.isalnum() for c in password):
        raise ValidationError("password must include at least one symbol")

    lowered = password.lower()
    if any(candidate in lowered for candidate in COMMON_PASSWORDS):
        raise ValidationError("password is too common or predictable")

    if estimate_entropy(password) < min_entropy_bits:
        raise ValidationError(f"password must provide at least {min_entropy_bits:.0f} bits of entropy")
