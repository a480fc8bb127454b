"""
Sub-Admin Router

FastAPI router for managing sub-admin grants and permission templates.
All management endpoints are admin-only; a sub-admin may read its own
permissions.
"""

from __future__ import annotations

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from ..core.auth.context import RequestPrincipal
from ..core.auth.guards import PermissionGuards
from ..core.auth.lifecycle import GrantLifecycleManager
from ..data.models.grant import CreateGrantRequest, UpdateGrantRequest
from ..data.models.principal import Role

logger = logging.getLogger(__name__)


def create_subadmin_router(
    lifecycle: GrantLifecycleManager,
    guards: PermissionGuards,
) -> APIRouter:
    """
    Create sub-admin management router with dependencies.

    Args:
        lifecycle: Grant lifecycle manager (the only writer of grants)
        guards: Guard factory used to protect the routes
    """

    router = APIRouter(prefix="/sub-admins", tags=["sub-admins"])

    admin_only = guards.require_role(Role.ADMIN, message="Access denied - Admin role required")
    any_admin = guards.require_any_admin_role()

    # ==================== Templates ====================

    @router.get("/templates")
    async def get_permission_templates(principal: RequestPrincipal = Depends(admin_only)):
        """List built-in permission templates."""
        return {"success": True, "data": lifecycle.get_available_templates()}

    # ==================== Grant Management ====================

    @router.post("", status_code=201)
    async def create_sub_admin(
        request: CreateGrantRequest,
        principal: RequestPrincipal = Depends(admin_only),
    ):
        """Grant sub-admin access to an existing user."""
        result = await lifecycle.create_grant(
            request.user_id,
            actor_id=principal.principal_id,
            permissions=request.permissions,
            template=request.template,
            notes=request.notes,
        )
        return JSONResponse(
            status_code=201,
            content={
                "success": True,
                "message": "Sub-admin created successfully",
                "data": {
                    "subAdmin": result.grant.to_dict(),
                    "user": result.principal.summary(),
                    "template": result.template,
                },
            },
        )

    @router.get("")
    async def list_sub_admins(
        is_active: Optional[bool] = Query(default=None, alias="isActive"),
        principal: RequestPrincipal = Depends(admin_only),
    ):
        """List grants, newest first, with holder and granter details."""
        grants = await lifecycle.list_grant_views(is_active=is_active)
        return {
            "success": True,
            "count": len(grants),
            "data": grants,
        }

    # Registered before /{grant_id} so "me" is not parsed as an id
    @router.get("/me/permissions")
    async def get_my_permissions(principal: RequestPrincipal = Depends(any_admin)):
        """The caller's own active grant."""
        data = await lifecycle.get_my_permissions(principal.principal_id)
        return {"success": True, "data": data}

    @router.get("/{grant_id}")
    async def get_sub_admin(grant_id: UUID, principal: RequestPrincipal = Depends(admin_only)):
        return {"success": True, "data": await lifecycle.get_grant_view(grant_id)}

    @router.put("/{grant_id}")
    async def update_sub_admin(
        grant_id: UUID,
        request: UpdateGrantRequest,
        principal: RequestPrincipal = Depends(admin_only),
    ):
        """Replace permissions, toggle the active flag, or change notes."""
        grant = await lifecycle.update_grant(
            grant_id,
            actor_id=principal.principal_id,
            permissions=request.permissions,
            is_active=request.is_active,
            notes=request.notes,
        )
        return {
            "success": True,
            "message": "Sub-admin updated successfully",
            "data": grant.to_dict(),
        }

    @router.delete("/{grant_id}")
    async def delete_sub_admin(grant_id: UUID, principal: RequestPrincipal = Depends(admin_only)):
        """Revoke sub-admin access and demote the user."""
        await lifecycle.revoke_grant(grant_id, actor_id=principal.principal_id)
        return {"success": True, "message": "Sub-admin removed successfully"}

    return router
