"""
API dependency helpers.

Resolves the bearer token into the current user and enforces per-route roles.
"""
import logging
import uuid
from typing import Any, Dict, Optional, Tuple

import jwt
from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from franchisehub.db.database import get_db
from franchisehub.db.repositories import tenants as tenant_repo
from franchisehub.utils.passwords import decode_access_token
from franchisehub.utils.roles import ROLE_ADMIN, validate_role

logger = logging.getLogger(__name__)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def build_user_context(user) -> Dict[str, Any]:
    return {
        "id": user.id,
        "email": user.email,
        "role": user.role,
        "tenant_id": user.tenant_id,
        "restaurant_id": user.restaurant_id,
        "is_admin": user.role == ROLE_ADMIN,
    }


# Contract:
# Returns (sqlalchemy User model, current_user_context_dict)
# Raises 401 if the bearer token cannot be resolved to an active user.

def get_current_user_context(
    db: Session = Depends(get_db),
    authorization: Optional[str] = Header(default=None),
) -> Tuple[Any, Dict[str, Any]]:
    if not authorization:
        raise _unauthorized("Authentication required")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise _unauthorized("Invalid authorization header")
    try:
        payload = decode_access_token(token.strip())
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token expired")
    except jwt.InvalidTokenError:
        raise _unauthorized("Invalid token")

    try:
        user_id = uuid.UUID(str(payload.get("sub")))
    except ValueError:
        raise _unauthorized("Invalid token")
    user = tenant_repo.get_user(db, user_id)
    if user is None:
        raise _unauthorized("User not found")
    if not user.is_active:
        raise _unauthorized("Account disabled")
    return user, build_user_context(user)


def require_roles(*roles: str):
    """Dependency factory: same tuple as ``get_current_user_context`` or 403."""
    for role in roles:
        validate_role(role)
    allowed = set(roles)

    def _dependency(user_context=Depends(get_current_user_context)):
        user, current_user = user_context
        if current_user["role"] not in allowed:
            logger.info("role_denied user=%s role=%s allowed=%s", user.id, current_user["role"], sorted(allowed))
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient role")
        return user_context

    return _dependency
