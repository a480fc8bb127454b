"""
Grant Repository

Persistence for sub-admin grants. The store, not the caller, guarantees
that a principal holds at most one grant: the in-memory backend checks and
inserts without yielding to the event loop, and the database backend relies
on a unique index on ``principal_id``.
"""

from __future__ import annotations

import logging
from typing import Any, Optional
from uuid import UUID

from ...core.errors import DuplicateRecordError
from ..models.grant import Grant
from .base import Repository

logger = logging.getLogger(__name__)

# PostgreSQL unique_violation
UNIQUE_VIOLATION = "23505"


class GrantRepository(Repository[Grant]):
    """Repository for Grant entities."""

    @property
    def table_name(self) -> str:
        return "sub_admins"

    @property
    def model_class(self) -> type[Grant]:
        return Grant

    async def create(self, entity: Grant) -> Grant:
        """Insert a grant, rejecting a second grant for the same principal."""
        if self.client:
            return await super().create(entity)

        for existing in self._in_memory_store.values():
            if existing.principal_id == entity.principal_id:
                raise DuplicateRecordError(self.table_name, "principal_id", entity.principal_id)
        self._in_memory_store[entity.id] = entity
        return entity

    async def _db_create(self, entity: Grant) -> dict:
        try:
            return await super()._db_create(entity)
        except Exception as e:
            if getattr(e, "code", None) == UNIQUE_VIOLATION:
                raise DuplicateRecordError(self.table_name, "principal_id", entity.principal_id) from e
            raise

    async def get_by_principal(self, principal_id: UUID) -> Optional[Grant]:
        """Find the grant for a principal, active or not."""
        return await self.find_one(principal_id=principal_id)

    async def get_active_by_principal(self, principal_id: UUID) -> Optional[Grant]:
        """Find the principal's grant only if it is active."""
        return await self.find_one(principal_id=principal_id, is_active=True)

    async def list_grants(self, is_active: Optional[bool] = None, limit: int = 1000) -> list[Grant]:
        """List grants, newest first."""
        filters: dict[str, Any] = {}
        if is_active is not None:
            filters["is_active"] = is_active
        grants = await self.list(filters or None, limit=limit)
        return sorted(grants, key=lambda g: g.created_at, reverse=True)
