"""
mutamba_erp.auth.passwords

Password hashing for identities stored by the backend (Argon2id).
"""

from __future__ import annotations

from argon2 import PasswordHasher, low_level
from argon2.exceptions import InvalidHashError, VerificationError

# Salt is generated per hash and embedded in the encoded string.
_hasher = PasswordHasher(
    time_cost=3,
    memory_cost=65536,
    parallelism=4,
    hash_len=32,
    type=low_level.Type.ID,
)


def hash_password(password: str) -> str:
    return _hasher.hash(password)


def verify_password(password_hash: str, password: str) -> bool:
    try:
        return _hasher.verify(password_hash, password)
    except (VerificationError, InvalidHashError):
        return False
