"""
Password hashing.
"""

from typing import Optional

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    """Check a password against a stored hash.

    Accounts without a hash never match. Malformed hashes
    are treated as a mismatch.
    """
    if not password_hash:
        return False
    try:
        return pwd_context.verify(password, password_hash)
    except ValueError:
        return False
