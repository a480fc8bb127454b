"""
Shared fixtures for authorization service tests.

Repositories run on the in-memory backend. HTTP tests build the app with
header-based principals so each request can pick its caller.
"""

import asyncio
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient

from jobboard_authz.config import AppConfig
from jobboard_authz.config.schema import AuthConfig
from jobboard_authz.core.auth.guards import PermissionGuards
from jobboard_authz.core.auth.lifecycle import GrantLifecycleManager
from jobboard_authz.data.models import Principal, Role
from jobboard_authz.data.repos import GrantRepository, PrincipalRepository
from jobboard_authz.server import create_app


ADMIN_ID = UUID("550e8400-e29b-41d4-a716-446655440001")


def make_principal(role: Role = Role.STUDENT, name: str = "user") -> Principal:
    return Principal(
        id=uuid4(),
        email=f"{name}-{uuid4().hex[:8]}@example.com",
        fullname=name.title(),
        role=role,
    )


def seed(repo, *entities):
    """Insert entities into an in-memory repository from sync tests."""
    for entity in entities:
        asyncio.run(repo.create(entity))
    return entities[0] if len(entities) == 1 else entities


def headers_for(principal_id, role) -> dict:
    headers = {}
    if principal_id is not None:
        headers["X-Principal-Id"] = str(principal_id)
    if role is not None:
        headers["X-Principal-Role"] = role.value if isinstance(role, Role) else role
    return headers


ADMIN_HEADERS = headers_for(ADMIN_ID, Role.ADMIN)


@pytest.fixture
def grants():
    return GrantRepository()


@pytest.fixture
def principals():
    return PrincipalRepository()


@pytest.fixture
def lifecycle(grants, principals):
    return GrantLifecycleManager(grants, principals)


@pytest.fixture
def guards(grants):
    return PermissionGuards(grants)


@pytest.fixture
def app_config():
    return AppConfig(auth=AuthConfig(trust_headers=True))


@pytest.fixture
def app(app_config, grants, principals):
    return create_app(app_config, grants=grants, principals=principals)


@pytest.fixture
def client(app):
    return TestClient(app)
