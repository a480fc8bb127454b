"""
Grant Lifecycle Manager

The only code path that creates, changes or removes sub-admin grants, and
the only one that moves a principal's cached role to or from ``sub-admin``.

Write ordering:
- create: insert grant, then promote role
- revoke: demote role, then delete grant

Neither pair is transactional. Revocation demotes first so that a failure
between the two writes leaves a principal without delegated access rather
than a stale role pointing at a live grant. Divergence left behind by a
partial failure is repaired by ``reconcile.reconcile_roles``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional
from uuid import UUID

from ...data.models.grant import Grant, PermissionEntry
from ...data.models.principal import GRANTABLE_ROLES, Principal, Role
from ...data.repos.grants import GrantRepository
from ...data.repos.principals import PrincipalRepository
from ..errors import ConflictError, DuplicateRecordError, NotFoundError, ValidationError
from .catalog import (
    list_templates,
    lookup_template,
    merge_entries,
    template_names,
    validate_permission_entries,
)
from .evaluator import accessible_modules, ordered_modules

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger("jobboard_authz.audit")

CUSTOM_TEMPLATE = "custom"


@dataclass
class GrantCreation:
    """Outcome of a successful create_grant call."""
    grant: Grant
    principal: Principal
    template: str  # template key, or "custom"


class GrantLifecycleManager:
    """
    Creates, updates and revokes sub-admin grants.

    Keeps ``principal.role == sub-admin`` in step with the existence of an
    active grant. Admin principals are never granted, promoted or demoted.
    """

    def __init__(self, grants: GrantRepository, principals: PrincipalRepository):
        self.grants = grants
        self.principals = principals

    # ==================== Mutations ====================

    async def create_grant(
        self,
        principal_id: UUID,
        actor_id: UUID,
        permissions: Optional[Iterable[Any]] = None,
        template: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> GrantCreation:
        """
        Grant sub-admin access to a student or recruiter.

        Either ``template`` or ``permissions`` must be given. When both are,
        the custom entries are merged into the template's.

        Raises:
            NotFoundError: principal does not exist
            ConflictError: principal is an admin, or already has a grant
            ValidationError: unknown template or invalid entries
        """
        principal = await self.principals.get(principal_id)
        if principal is None:
            raise NotFoundError("User not found", {"userId": str(principal_id)})

        if principal.is_admin:
            raise ConflictError("Cannot assign sub-admin permissions to an admin user")

        existing = await self.grants.get_by_principal(principal_id)
        if existing is not None:
            raise ConflictError(
                "User already has sub-admin permissions. Use update endpoint to modify.",
                {"subAdminId": str(existing.id)},
            )

        entries = self._resolve_entries(permissions, template)
        template_key = template if template else CUSTOM_TEMPLATE
        if notes is None:
            notes = f"Created with template: {template}" if template else ""

        grant = Grant(
            principal_id=principal_id,
            entries=entries,
            granted_by=actor_id,
            is_active=True,
            notes=notes,
        )
        try:
            grant = await self.grants.create(grant)
        except DuplicateRecordError as e:
            # Lost a race with a concurrent create for the same principal
            logger.warning(f"Concurrent grant creation rejected for principal {principal_id}")
            raise ConflictError(
                "User already has sub-admin permissions. Use update endpoint to modify."
            ) from e

        updated = await self.principals.change_role(
            principal_id,
            Role.SUB_ADMIN,
            changed_by=actor_id,
            reason=f"Sub-admin access granted ({template_key})",
        )

        audit_logger.info(
            f"Sub-admin created: principal={principal_id} email={principal.email} "
            f"grant={grant.id} template={template_key} by={actor_id}"
        )
        return GrantCreation(grant=grant, principal=updated or principal, template=template_key)

    async def update_grant(
        self,
        grant_id: UUID,
        actor_id: UUID,
        permissions: Optional[Iterable[Any]] = None,
        is_active: Optional[bool] = None,
        notes: Optional[str] = None,
    ) -> Grant:
        """
        Replace entries, flip the active flag, or change notes.

        Entries go through the same validator as creation. Toggling
        ``is_active`` moves the principal's role with it.
        """
        grant = await self.get_grant(grant_id)

        updates: dict[str, Any] = {}
        if permissions is not None:
            updates["entries"] = validate_permission_entries(permissions)
        if is_active is not None:
            updates["is_active"] = is_active
        if notes is not None:
            updates["notes"] = notes

        if not updates:
            return grant

        updates["updated_at"] = datetime.now(timezone.utc)
        updated = await self.grants.update(grant_id, **updates)
        if updated is None:
            raise NotFoundError("Sub-admin not found", {"id": str(grant_id)})

        if is_active is not None and is_active != grant.is_active:
            await self._sync_role(updated, actor_id)

        audit_logger.info(
            f"Sub-admin updated: principal={updated.principal_id} grant={grant_id} "
            f"fields={sorted(k for k in updates if k != 'updated_at')} by={actor_id}"
        )
        return updated

    async def revoke_grant(self, grant_id: UUID, actor_id: UUID) -> Grant:
        """
        Remove delegated access.

        A ``sub-admin`` principal is reset to ``student`` regardless of the
        role it held before the grant; the prior role is not restored.
        """
        grant = await self.get_grant(grant_id)

        principal = await self.principals.get(grant.principal_id)
        if principal is not None and principal.role == Role.SUB_ADMIN:
            await self.principals.change_role(
                principal.id,
                Role.STUDENT,
                changed_by=actor_id,
                reason="Sub-admin access revoked",
            )

        await self.grants.delete(grant_id)

        audit_logger.info(
            f"Sub-admin deleted: principal={grant.principal_id} grant={grant_id} by={actor_id}"
        )
        return grant

    # ==================== Reads ====================

    async def list_grants(self, is_active: Optional[bool] = None) -> List[Grant]:
        return await self.grants.list_grants(is_active=is_active)

    async def get_grant(self, grant_id: UUID) -> Grant:
        grant = await self.grants.get(grant_id)
        if grant is None:
            raise NotFoundError("Sub-admin not found", {"id": str(grant_id)})
        return grant

    async def list_grant_views(self, is_active: Optional[bool] = None) -> List[dict[str, Any]]:
        """Grants with their holder and granter resolved, newest first."""
        grants = await self.list_grants(is_active=is_active)
        cache: dict[UUID, Optional[Principal]] = {}
        return [await self._grant_view(grant, cache) for grant in grants]

    async def get_grant_view(self, grant_id: UUID) -> dict[str, Any]:
        return await self._grant_view(await self.get_grant(grant_id), {})

    async def get_my_grant(self, principal_id: UUID) -> Grant:
        """The caller's own active grant."""
        grant = await self.grants.get_active_by_principal(principal_id)
        if grant is None:
            raise NotFoundError("Sub-admin permissions not found")
        return grant

    async def get_my_permissions(self, principal_id: UUID) -> dict[str, Any]:
        grant = await self.get_my_grant(principal_id)
        return {
            "permissions": [e.to_dict() for e in grant.entries],
            "accessibleModules": ordered_modules(accessible_modules(grant)),
        }

    def get_available_templates(self) -> dict[str, Any]:
        return {
            "templates": {t.key: t.to_dict() for t in list_templates()},
            "available": template_names(),
        }

    # ==================== Internals ====================

    def _resolve_entries(
        self,
        permissions: Optional[Iterable[Any]],
        template: Optional[str],
    ) -> List[PermissionEntry]:
        if template:
            found = lookup_template(template)
            if found is None:
                raise ValidationError(
                    f"Invalid template. Available templates: {', '.join(template_names())}",
                    {"available": template_names()},
                )
            if permissions:
                return merge_entries(found.entries, validate_permission_entries(permissions))
            return list(found.entries)

        if permissions is None:
            raise ValidationError("Either template or custom permissions array is required")
        return validate_permission_entries(permissions)

    async def _grant_view(
        self,
        grant: Grant,
        cache: dict[UUID, Optional[Principal]],
    ) -> dict[str, Any]:
        """
        ``grant.to_dict()`` with ``user`` and ``grantedBy`` expanded.

        A principal that no longer exists renders as None.
        """
        for principal_id in (grant.principal_id, grant.granted_by):
            if principal_id not in cache:
                cache[principal_id] = await self.principals.get(principal_id)

        user = cache[grant.principal_id]
        granter = cache[grant.granted_by]
        return {
            **grant.to_dict(),
            "user": user.profile() if user else None,
            "grantedBy": granter.summary() if granter else None,
        }

    async def _sync_role(self, grant: Grant, actor_id: UUID) -> None:
        principal = await self.principals.get(grant.principal_id)
        if principal is None or principal.is_admin:
            return

        if grant.is_active and principal.role in GRANTABLE_ROLES:
            await self.principals.change_role(
                principal.id, Role.SUB_ADMIN, changed_by=actor_id,
                reason="Sub-admin access reactivated",
            )
        elif not grant.is_active and principal.role == Role.SUB_ADMIN:
            await self.principals.change_role(
                principal.id, Role.STUDENT, changed_by=actor_id,
                reason="Sub-admin access deactivated",
            )
