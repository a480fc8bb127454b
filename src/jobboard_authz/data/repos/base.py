"""
Base Repository

Abstract base class for all repositories.
Supports both Supabase and in-memory backends.
"""

from __future__ import annotations

import inspect
import logging
from abc import ABC, abstractmethod
from typing import Any, Generic, Optional, TypeVar
from uuid import UUID

from pydantic import BaseModel
from pydantic_core import to_jsonable_python

from ...core.errors import StoreError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


class Repository(ABC, Generic[T]):
    """
    Abstract repository base class.

    Provides a consistent interface for data access across
    different storage backends (Supabase, in-memory, etc.)

    Database failures surface as ``StoreError`` with a generic message;
    the client exception is chained and logged here.
    """

    def __init__(self, client: Any = None):
        """
        Initialize repository.

        Args:
            client: Database client (Supabase client or None for in-memory)
        """
        self.client = client
        self._in_memory_store: dict[UUID, T] = {}

    @property
    @abstractmethod
    def table_name(self) -> str:
        """Get the database table name for this repository."""
        pass

    @property
    @abstractmethod
    def model_class(self) -> type[T]:
        """Get the Pydantic model class for this repository."""
        pass

    async def get(self, id: UUID) -> Optional[T]:
        """Get entity by ID."""
        if self.client:
            result = await self._db_call("get", self._db_get, id)
            return self.model_class(**result) if result else None
        return self._in_memory_store.get(id)

    async def create(self, entity: T) -> T:
        """Create a new entity."""
        if self.client:
            result = await self._db_call("create", self._db_create, entity)
            return self.model_class(**result)
        self._in_memory_store[entity.id] = entity
        return entity

    async def update(self, id: UUID, **updates) -> Optional[T]:
        """Update an entity."""
        if self.client:
            result = await self._db_call("update", self._db_update, id, updates)
            return self.model_class(**result) if result else None
        if id in self._in_memory_store:
            entity = self._in_memory_store[id]
            # Re-validate so raw values (strings, dicts) become typed fields
            updated = self.model_class.model_validate({**dict(entity), **updates})
            self._in_memory_store[id] = updated
            return updated
        return None

    async def delete(self, id: UUID) -> bool:
        """Delete an entity."""
        if self.client:
            return await self._db_call("delete", self._db_delete, id)
        if id in self._in_memory_store:
            del self._in_memory_store[id]
            return True
        return False

    async def list(
        self,
        filters: Optional[dict[str, Any]] = None,
        limit: int = 100,
        offset: int = 0
    ) -> list[T]:
        """List entities with optional filters."""
        if self.client:
            results = await self._db_call("list", self._db_list, filters, limit, offset)
            return [self.model_class(**r) for r in results]

        # In-memory filtering
        entities = list(self._in_memory_store.values())
        if filters:
            entities = [
                e for e in entities
                if all(getattr(e, k, None) == v for k, v in filters.items())
            ]
        return entities[offset:offset + limit]

    async def find_one(self, **filters: Any) -> Optional[T]:
        """Return the first entity matching all filters."""
        if self.client:
            query = self.client.table(self.table_name).select("*")
            for key, value in filters.items():
                query = query.eq(key, to_jsonable_python(value))
            response = await self._db_call("find", lambda: query.limit(1).execute())
            return self.model_class(**response.data[0]) if response.data else None

        for entity in self._in_memory_store.values():
            if all(getattr(entity, k, None) == v for k, v in filters.items()):
                return entity
        return None

    async def _db_call(self, operation: str, fn, *args):
        """Run a database call, converting client failures into StoreError."""
        try:
            return await fn(*args) if inspect.iscoroutinefunction(fn) else fn(*args)
        except StoreError:
            raise
        except Exception as e:
            logger.exception(f"{self.table_name}: {operation} failed")
            raise StoreError(f"Failed to {operation} record") from e

    # Database-specific implementations (for Supabase)
    async def _db_get(self, id: UUID) -> Optional[dict]:
        """Get from database."""
        response = (
            self.client.table(self.table_name)
            .select("*")
            .eq("id", str(id))
            .maybe_single()
            .execute()
        )
        return response.data if response and response.data else None

    async def _db_create(self, entity: T) -> dict:
        """Create in database."""
        data = entity.model_dump(mode="json")
        response = self.client.table(self.table_name).insert(data).execute()
        return response.data[0]

    async def _db_update(self, id: UUID, updates: dict) -> Optional[dict]:
        """Update in database."""
        data = to_jsonable_python(updates)
        response = self.client.table(self.table_name).update(data).eq("id", str(id)).execute()
        return response.data[0] if response.data else None

    async def _db_delete(self, id: UUID) -> bool:
        """Delete from database."""
        response = self.client.table(self.table_name).delete().eq("id", str(id)).execute()
        return len(response.data) > 0

    async def _db_list(
        self,
        filters: Optional[dict[str, Any]],
        limit: int,
        offset: int
    ) -> list[dict]:
        """List from database."""
        query = self.client.table(self.table_name).select("*")
        if filters:
            for key, value in filters.items():
                query = query.eq(key, to_jsonable_python(value))
        query = query.range(offset, offset + limit - 1)
        response = query.execute()
        return response.data
