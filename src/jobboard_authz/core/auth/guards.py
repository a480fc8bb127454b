"""
Enforcement Layer

FastAPI dependencies that gate privileged routes:
- require_permission: one (module, action)
- require_any_permission / require_all_permissions: OR / AND over a list
- require_role / require_any_admin_role: role-only checks, no grant lookup
- attach_accessible_modules: non-blocking request enrichment

Admins bypass every capability check. Sub-admins are evaluated against
their active grant, loaded fresh from the store on each request. Everyone
else is denied. Denials and admin bypasses are written to the audit log.

Usage:
    guards = PermissionGuards(grant_repository)

    @router.post("/jobs/{job_id}/approve")
    async def approve_job(
        job_id: UUID,
        principal: RequestPrincipal = Depends(
            guards.require_permission(Module.JOBS, Action.APPROVE)
        ),
    ):
        ...
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Iterable, Optional, Sequence, Tuple, Union

from fastapi import Request

from ...data.models.grant import Action, Grant, Module
from ...data.models.principal import Role
from ...data.repos.grants import GrantRepository
from ..errors import AuthenticationError, AuthorizationError, AuthzError, StoreError
from .context import RequestPrincipal, get_request_principal
from .evaluator import (
    accessible_modules,
    has_all_permissions,
    has_any_permission,
    has_permission,
    ordered_modules,
)

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger("jobboard_authz.audit")

CapabilityLike = Tuple[Union[Module, str], Union[Action, str]]
Guard = Callable[[Request], Awaitable[RequestPrincipal]]

ADMIN_ROLE_REQUIRED = "Access denied - Admin or Sub-admin role required"
GRANT_MISSING = "Access denied - Sub-admin grant not found or inactive"


def _capabilities(pairs: Iterable[CapabilityLike]) -> list[tuple[Module, Action]]:
    """Normalize (module, action) pairs; unknown names fail at route definition."""
    return [(Module(module), Action(action)) for module, action in pairs]


def _describe(capabilities: Sequence[tuple[Module, Action]]) -> list[dict[str, str]]:
    return [{"module": m.value, "action": a.value} for m, a in capabilities]


def _label(capabilities: Sequence[tuple[Module, Action]]) -> str:
    return ",".join(f"{m.value}:{a.value}" for m, a in capabilities)


class PermissionGuards:
    """
    Factory for request guards backed by a grant repository.

    Each guard is an async dependency that returns the RequestPrincipal
    when access is allowed and raises an AuthzError otherwise.
    """

    def __init__(self, grants: GrantRepository):
        self.grants = grants

    # ==================== Capability Guards ====================

    def require_permission(self, module: Union[Module, str], action: Union[Action, str]) -> Guard:
        required = _capabilities([(module, action)])
        module, action = required[0]

        return self._capability_guard(
            required,
            lambda grant: has_permission(grant, module, action),
            message=f"Access denied - You don't have permission to {action.value} {module.value}",
            details={"required": {"module": module.value, "action": action.value}},
        )

    def require_any_permission(self, pairs: Iterable[CapabilityLike]) -> Guard:
        required = _capabilities(pairs)
        return self._capability_guard(
            required,
            lambda grant: has_any_permission(grant, required),
            message="Access denied - You don't have any of the required permissions",
            details={"requiredAny": _describe(required)},
        )

    def require_all_permissions(self, pairs: Iterable[CapabilityLike]) -> Guard:
        required = _capabilities(pairs)
        return self._capability_guard(
            required,
            lambda grant: has_all_permissions(grant, required),
            message="Access denied - You don't have all the required permissions",
            details={"requiredAll": _describe(required)},
        )

    # ==================== Role Guards ====================

    def require_role(self, *roles: Union[Role, str], message: Optional[str] = None) -> Guard:
        """Allow only principals whose cached role is one of ``roles``."""
        allowed = {Role(r).value for r in roles}
        label = " or ".join(sorted(allowed))
        message = message or f"Access denied - {label} role required"

        async def guard(request: Request) -> RequestPrincipal:
            principal = self._authenticate(request, f"role:{label}")
            if principal.role in allowed:
                return principal
            self._deny(principal, f"role:{label}", message)

        return guard

    def require_any_admin_role(self) -> Guard:
        return self.require_role(Role.ADMIN, Role.SUB_ADMIN, message=ADMIN_ROLE_REQUIRED)

    # ==================== Enrichment ====================

    def attach_accessible_modules(self) -> Callable[[Request], Awaitable[None]]:
        """
        Store the caller's accessible modules on ``request.state``.

        ``"all"`` for admins, the grant's modules for active sub-admins,
        ``[]`` for everyone else. Never rejects the request.
        """

        async def attach(request: Request) -> None:
            request.state.accessible_modules = []
            try:
                principal = get_request_principal(request)
            except AuthzError:
                return

            if principal.is_admin:
                request.state.accessible_modules = "all"
                return
            if not principal.is_sub_admin or principal.principal_id is None:
                return

            try:
                grant = await self.grants.get_active_by_principal(principal.principal_id)
            except Exception:
                logger.exception(
                    f"Could not load grant for principal {principal.principal_id}; "
                    f"continuing without accessible modules"
                )
                return

            request.state.grant = grant
            request.state.accessible_modules = ordered_modules(accessible_modules(grant))

        return attach

    # ==================== Internals ====================

    def _capability_guard(
        self,
        required: list[tuple[Module, Action]],
        predicate: Callable[[Optional[Grant]], bool],
        message: str,
        details: dict,
    ) -> Guard:
        label = _label(required)

        async def guard(request: Request) -> RequestPrincipal:
            principal = self._authenticate(request, label)

            if principal.is_admin:
                audit_logger.info(
                    f"Admin bypass: principal={principal.principal_id} required={label}"
                )
                return principal

            if not principal.is_sub_admin:
                self._deny(principal, label, ADMIN_ROLE_REQUIRED)

            grant = await self._load_active_grant(principal)
            if grant is None:
                self._deny(principal, label, GRANT_MISSING)

            if predicate(grant):
                logger.debug(f"Sub-admin allowed: principal={principal.principal_id} required={label}")
                request.state.grant = grant
                return principal

            self._deny(principal, label, message, details)

        return guard

    def _authenticate(self, request: Request, label: str) -> RequestPrincipal:
        principal = get_request_principal(request)
        if principal.principal_id is None:
            audit_logger.warning(f"Access denied: no principal id, required={label}")
            raise AuthenticationError("Unauthorized - No user ID found")
        return principal

    async def _load_active_grant(self, principal: RequestPrincipal) -> Optional[Grant]:
        try:
            return await self.grants.get_active_by_principal(principal.principal_id)
        except Exception as e:
            logger.exception(f"Grant lookup failed for principal {principal.principal_id}")
            raise StoreError("Failed to verify permissions") from e

    def _deny(
        self,
        principal: RequestPrincipal,
        label: str,
        message: str,
        details: Optional[dict] = None,
    ) -> None:
        audit_logger.warning(
            f"Access denied: principal={principal.principal_id} "
            f"role={principal.role} required={label} reason={message!r}"
        )
        raise AuthorizationError(message, details)
