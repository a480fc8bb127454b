"""
Data layer for the authorization service.

Contains models and repositories for principals and sub-admin grants.
"""

from .models import (
    Module,
    Action,
    PermissionEntry,
    Grant,
    Role,
    RoleChange,
    Principal,
)
from .repos import GrantRepository, PrincipalRepository

__all__ = [
    "Module",
    "Action",
    "PermissionEntry",
    "Grant",
    "Role",
    "RoleChange",
    "Principal",
    "GrantRepository",
    "PrincipalRepository",
]
