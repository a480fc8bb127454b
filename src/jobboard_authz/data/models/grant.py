"""
Grant Models

Capability vocabulary and the persisted sub-admin grant record.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, FrozenSet, List, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_serializer


class Module(str, Enum):
    """Functional areas of the platform subject to access control."""
    USERS = "users"
    JOBS = "jobs"
    COMPANIES = "companies"
    APPLICATIONS = "applications"
    ANALYTICS = "analytics"


class Action(str, Enum):
    """Operations within a module."""
    VIEW = "view"
    CREATE = "create"
    EDIT = "edit"
    DELETE = "delete"
    APPROVE = "approve"
    REJECT = "reject"


class PermissionEntry(BaseModel):
    """
    Actions granted on a single module.

    Immutable so template entries can be shared between grants.
    """
    model_config = ConfigDict(frozen=True)

    module: Module
    actions: FrozenSet[Action] = Field(min_length=1)

    @field_serializer("actions")
    def serialize_actions(self, actions: FrozenSet[Action]) -> list[str]:
        # Catalog order keeps serialized grants stable
        return [a.value for a in Action if a in actions]

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class Grant(BaseModel):
    """
    Sub-admin grant: binds one principal to a set of module/action permissions.

    ``principal_id`` is unique across the store; the repository enforces it.
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "550e8400-e29b-41d4-a716-446655440400",
                "principal_id": "550e8400-e29b-41d4-a716-446655440300",
                "entries": [
                    {"module": "jobs", "actions": ["view", "edit", "approve", "reject"]},
                    {"module": "companies", "actions": ["view"]},
                ],
                "granted_by": "550e8400-e29b-41d4-a716-446655440001",
                "is_active": True,
                "notes": "Created with template: moderator",
            }
        }
    )

    id: UUID = Field(default_factory=uuid4)
    principal_id: UUID
    entries: List[PermissionEntry]
    granted_by: UUID
    is_active: bool = True
    notes: str = ""

    # Timestamps
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        """Client-facing representation."""
        return {
            "id": str(self.id),
            "userId": str(self.principal_id),
            "permissions": [e.to_dict() for e in self.entries],
            "grantedBy": str(self.granted_by),
            "isActive": self.is_active,
            "notes": self.notes,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }


class CreateGrantRequest(BaseModel):
    """Request model for granting sub-admin access."""
    model_config = ConfigDict(populate_by_name=True)

    user_id: UUID = Field(alias="userId")
    # Left untyped so the catalog validator reports shape and vocabulary errors
    permissions: Optional[Any] = None
    template: Optional[str] = None
    notes: Optional[str] = None


class UpdateGrantRequest(BaseModel):
    """Request model for changing an existing grant."""
    model_config = ConfigDict(populate_by_name=True)

    permissions: Optional[Any] = None
    is_active: Optional[bool] = Field(default=None, alias="isActive")
    notes: Optional[str] = None
