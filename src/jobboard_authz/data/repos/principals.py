"""
Principal Repository

Reads principals and writes their cached role. Every role write appends a
RoleChange entry so the history survives revocation.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from ..models.principal import Principal, Role, RoleChange
from .base import Repository


class PrincipalRepository(Repository[Principal]):
    """Repository for Principal entities."""

    @property
    def table_name(self) -> str:
        return "users"

    @property
    def model_class(self) -> type[Principal]:
        return Principal

    async def list_by_role(self, role: Role, limit: int = 1000) -> list[Principal]:
        """List principals holding a role."""
        return await self.list({"role": role}, limit=limit)

    async def change_role(
        self,
        principal_id: UUID,
        new_role: Role,
        changed_by: Optional[UUID] = None,
        reason: str = "",
    ) -> Optional[Principal]:
        """
        Set a principal's role and record the change.

        Returns the updated principal, or None if it does not exist.
        """
        principal = await self.get(principal_id)
        if not principal:
            return None
        if principal.role == new_role:
            return principal

        change = RoleChange(
            previous_role=principal.role,
            new_role=new_role,
            changed_by=changed_by,
            reason=reason,
        )
        return await self.update(
            principal_id,
            role=new_role,
            role_change_history=[*principal.role_change_history, change],
            updated_at=datetime.now(timezone.utc),
        )
