"""Password hashing: PBKDF2-SHA256 with a fresh random salt per hash."""
import hashlib
import secrets
from typing import Optional

from ..config import settings


SCHEME = "pbkdf2_sha256"
SALT_BYTES = 16


def hash_password(password: str, iterations: Optional[int] = None) -> str:
    """
    Derive the stored form of a password.

    Format: ``pbkdf2_sha256$<iterations>$<salt hex>$<digest hex>``. The iteration
    count travels with the hash so it can be raised later without invalidating
    existing rows.
    """
    rounds = iterations or settings.password_hash_iterations
    salt = secrets.token_bytes(SALT_BYTES)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, rounds)
    return f"{SCHEME}${rounds}${salt.hex()}${digest.hex()}"
