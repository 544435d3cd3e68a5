"""
Password hashing and session token primitives.
"""

import secrets

import bcrypt

from storefront.core.config import settings


def _to_bytes(password: str) -> bytes:
    """Encode a password, truncated to bcrypt's 72 byte limit."""
    return password.encode("utf-8")[:72]


def get_password_hash(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(_to_bytes(password), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not hashed_password:
        return False
    try:
        return bcrypt.checkpw(_to_bytes(plain_password), hashed_password.encode("utf-8"))
    except ValueError:
        # Malformed hash in storage
        return False


def generate_session_token() -> str:
    """Opaque bearer token; carries no claims."""
    return secrets.token_urlsafe(32)
