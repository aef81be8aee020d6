"""
Password hashing and bearer token helpers.

Passwords are hashed with Argon2id. Access tokens are HS256 JWTs carrying the
user's id, role, tenant and restaurant.
"""
from __future__ import annotations

import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError
from argon2.low_level import Type

from franchisehub.utils.config import get_settings

_hasher = PasswordHasher(time_cost=2, memory_cost=19456, parallelism=1, hash_len=32, type=Type.ID)


def hash_password(password: str) -> str:
    return _hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Return True if ``password`` matches ``password_hash``."""
    try:
        return _hasher.verify(password_hash, password)
    except (VerificationError, InvalidHashError):
        return False


def generate_invite_token() -> str:
    """Return a 32-char hex token for invitations."""
    return secrets.token_hex(16)


def generate_reset_code() -> str:
    """Return a 6-digit numeric code for password resets."""
    return f"{secrets.randbelow(900000) + 100000}"


def _str_or_none(value: Optional[uuid.UUID]) -> Optional[str]:
    return str(value) if value is not None else None


def create_access_token(user, *, expires_in: Optional[timedelta] = None) -> str:
    settings = get_settings()
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user.id),
        "email": user.email,
        "role": user.role,
        "tenant_id": _str_or_none(user.tenant_id),
        "restaurant_id": _str_or_none(user.restaurant_id),
        "iat": now,
        "exp": now + (expires_in if expires_in is not None else timedelta(hours=settings.jwt_expiry_hours)),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Dict[str, Any]:
    """Decode a token; raises ``jwt.ExpiredSignatureError`` / ``jwt.InvalidTokenError``."""
    settings = get_settings()
    return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
