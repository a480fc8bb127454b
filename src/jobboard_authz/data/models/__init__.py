"""Data models for principals and sub-admin grants."""

from .grant import (
    Module,
    Action,
    PermissionEntry,
    Grant,
    CreateGrantRequest,
    UpdateGrantRequest,
)
from .principal import (
    Role,
    RoleChange,
    Principal,
    GRANTABLE_ROLES,
)

__all__ = [
    "Module",
    "Action",
    "PermissionEntry",
    "Grant",
    "CreateGrantRequest",
    "UpdateGrantRequest",
    "Role",
    "RoleChange",
    "Principal",
    "GRANTABLE_ROLES",
]
