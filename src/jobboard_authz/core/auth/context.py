"""
Request Principal

Seam between the external authentication layer and the guards. The
authentication layer stores ``principal_id`` and ``principal_role`` on
``request.state``; guards only ever read them through
``get_request_principal``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from fastapi import Request
from starlette.datastructures import Headers
from starlette.types import ASGIApp, Receive, Scope, Send

from ...data.models.principal import Role
from ..errors import AuthenticationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RequestPrincipal:
    """Authenticated identity and cached role for one request."""
    principal_id: Optional[UUID]
    role: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value

    @property
    def is_sub_admin(self) -> bool:
        return self.role == Role.SUB_ADMIN.value


def get_request_principal(request: Request) -> RequestPrincipal:
    """
    Read the authenticated principal from the request.

    A missing id yields ``RequestPrincipal(None)``; callers decide whether
    that is an error. A malformed id is always an authentication failure.
    """
    raw_id = getattr(request.state, "principal_id", None)
    raw_role = getattr(request.state, "principal_role", None)
    role = raw_role.value if isinstance(raw_role, Role) else raw_role

    if raw_id is None or raw_id == "":
        return RequestPrincipal(principal_id=None, role=role)
    if isinstance(raw_id, UUID):
        return RequestPrincipal(principal_id=raw_id, role=role)
    try:
        return RequestPrincipal(principal_id=UUID(str(raw_id)), role=role)
    except ValueError:
        logger.warning(f"Rejected malformed principal id: {raw_id!r}")
        raise AuthenticationError("Unauthorized - Invalid user ID")


class PrincipalHeaderMiddleware:
    """
    Development stand-in for the authentication layer.

    Copies the principal id and role from request headers onto
    ``request.state``. Only mounted when ``auth.trust_headers`` is enabled.
    """

    def __init__(
        self,
        app: ASGIApp,
        id_header: str = "X-Principal-Id",
        role_header: str = "X-Principal-Role",
    ):
        self.app = app
        self.id_header = id_header
        self.role_header = role_header

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http":
            headers = Headers(scope=scope)
            state = scope.setdefault("state", {})
            principal_id = headers.get(self.id_header)
            role = headers.get(self.role_header)
            if principal_id:
                state["principal_id"] = principal_id.strip()
            if role:
                state["principal_role"] = role.strip().lower()
        await self.app(scope, receive, send)
