"""
Permission helpers for tenant-scoped resources.

Pure helpers over the ``current_user`` dict built in ``deps``; admins are the
franchisor and pass every tenant check.
"""
import uuid
from typing import Any, Dict, Optional

from fastapi import HTTPException, status

from franchisehub.utils.roles import ROLE_ADMIN, ROLE_VIEWER


def is_admin(current_user: Dict[str, Any]) -> bool:
    return bool(current_user.get("is_admin")) or current_user.get("role") == ROLE_ADMIN


def is_viewer(current_user: Dict[str, Any]) -> bool:
    return current_user.get("role") == ROLE_VIEWER


def can_access_tenant(current_user: Dict[str, Any], tenant_id: Optional[uuid.UUID]) -> bool:
    if is_admin(current_user):
        return True
    own = current_user.get("tenant_id")
    return own is not None and tenant_id is not None and str(own) == str(tenant_id)


def ensure_tenant_access(current_user: Dict[str, Any], tenant_id: Optional[uuid.UUID]) -> None:
    if not can_access_tenant(current_user, tenant_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access to this tenant is forbidden")


def resolve_tenant_id(current_user: Dict[str, Any], requested: Optional[uuid.UUID] = None) -> uuid.UUID:
    """Admins must name a tenant; everyone else is pinned to their own."""
    if is_admin(current_user):
        if requested is None:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="tenant_id is required for admin users")
        return requested
    tenant_id = current_user.get("tenant_id")
    if tenant_id is None:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User is not attached to a tenant")
    return tenant_id


def scope_tenant_filter(current_user: Dict[str, Any], requested: Optional[uuid.UUID] = None) -> Optional[uuid.UUID]:
    """Tenant filter for list endpoints: optional for admins, forced for others."""
    if is_admin(current_user):
        return requested
    return resolve_tenant_id(current_user)
