"""
Role constants and helpers.

Three roles exist: ``admin`` is the franchisor and sees every tenant,
``manager`` runs one tenant, ``viewer`` is a franchisee bound to a restaurant.
"""

from typing import FrozenSet
from enum import Enum


ROLE_ADMIN = "admin"
ROLE_MANAGER = "manager"
ROLE_VIEWER = "viewer"

ALL_ROLES: FrozenSet[str] = frozenset({ROLE_ADMIN, ROLE_MANAGER, ROLE_VIEWER})
MANAGE_ROLES: FrozenSet[str] = frozenset({ROLE_ADMIN, ROLE_MANAGER})


class RoleEnum(str, Enum):
    """Enum for user roles used in schemas and validation."""
    admin = ROLE_ADMIN
    manager = ROLE_MANAGER
    viewer = ROLE_VIEWER


def validate_role(role: str) -> bool:
    """
    Validate that a role is allowed.

    Raises:
        ValueError: If role is not recognized
    """
    if role not in ALL_ROLES:
        raise ValueError(f"Invalid role: {role}. Allowed roles: {sorted(ALL_ROLES)}")
    return True
