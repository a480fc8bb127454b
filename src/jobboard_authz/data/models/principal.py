"""
Principal Models

The slice of the user aggregate this service reads and writes: identity,
the cached role, and the history of role changes made here.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, List, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class Role(str, Enum):
    """Cached principal role."""
    STUDENT = "student"
    RECRUITER = "recruiter"
    SUB_ADMIN = "sub-admin"
    ADMIN = "admin"


# Roles that may receive a sub-admin grant
GRANTABLE_ROLES = frozenset({Role.STUDENT, Role.RECRUITER})


class RoleChange(BaseModel):
    """One entry in a principal's role history."""
    previous_role: Role
    new_role: Role
    changed_by: Optional[UUID] = None  # None for system-driven changes
    changed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    reason: str = ""


class Principal(BaseModel):
    """
    Platform user as seen by the authorization service.

    ``role`` is owned by the user aggregate; this service only moves it
    between grantable roles and ``sub-admin``.
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "550e8400-e29b-41d4-a716-446655440300",
                "email": "moderator@example.com",
                "fullname": "Jane Smith",
                "phone_number": "+15551234567",
                "role": "sub-admin",
            }
        }
    )

    id: UUID = Field(default_factory=uuid4)
    email: EmailStr
    fullname: str = ""
    phone_number: Optional[str] = None
    role: Role = Role.STUDENT
    role_change_history: List[RoleChange] = Field(default_factory=list)

    # Timestamps
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def summary(self) -> dict[str, Any]:
        """Short client-facing representation."""
        return {
            "id": str(self.id),
            "fullname": self.fullname,
            "email": self.email,
            "role": self.role.value,
        }

    def profile(self) -> dict[str, Any]:
        """Client-facing representation attached to a sub-admin grant."""
        return {
            **self.summary(),
            "phoneNumber": self.phone_number,
            "createdAt": self.created_at.isoformat(),
        }
