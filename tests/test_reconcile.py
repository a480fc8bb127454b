"""
Test Role Reconciliation

Repair of roles left out of step with grants by a partial lifecycle write.
"""

from uuid import uuid4

import pytest

from jobboard_authz.core.auth.catalog import lookup_template
from jobboard_authz.core.auth.reconcile import reconcile_roles
from jobboard_authz.data.models import Grant, Role

from conftest import ADMIN_ID, make_principal


def grant_for(principal_id, is_active=True):
    return Grant(
        principal_id=principal_id,
        entries=list(lookup_template("moderator").entries),
        granted_by=ADMIN_ID,
        is_active=is_active,
    )


@pytest.mark.asyncio
async def test_consistent_store_is_untouched(grants, principals, lifecycle):
    student = await principals.create(make_principal())
    await lifecycle.create_grant(student.id, actor_id=ADMIN_ID, template="moderator")

    report = await reconcile_roles(grants, principals)

    assert report.changed == 0
    assert report.anomalies == []


@pytest.mark.asyncio
async def test_sub_admin_without_grant_is_demoted(grants, principals):
    orphan = await principals.create(make_principal(Role.SUB_ADMIN))
    inactive = await principals.create(make_principal(Role.SUB_ADMIN))
    await grants.create(grant_for(inactive.id, is_active=False))

    report = await reconcile_roles(grants, principals, actor_id=ADMIN_ID)

    assert set(report.demoted) == {orphan.id, inactive.id}
    reloaded = await principals.get(orphan.id)
    assert reloaded.role == Role.STUDENT
    assert reloaded.role_change_history[-1].changed_by == ADMIN_ID
    assert (await principals.get(inactive.id)).role == Role.STUDENT


@pytest.mark.asyncio
@pytest.mark.parametrize("role", [Role.STUDENT, Role.RECRUITER])
async def test_grant_holder_is_promoted(grants, principals, role):
    principal = await principals.create(make_principal(role))
    await grants.create(grant_for(principal.id))

    report = await reconcile_roles(grants, principals)

    assert report.promoted == [principal.id]
    assert (await principals.get(principal.id)).role == Role.SUB_ADMIN


@pytest.mark.asyncio
async def test_admin_is_only_reported(grants, principals):
    admin = await principals.create(make_principal(Role.ADMIN))
    await grants.create(grant_for(admin.id))
    missing = uuid4()
    await grants.create(grant_for(missing))

    report = await reconcile_roles(grants, principals)

    assert report.changed == 0
    assert len(report.anomalies) == 2
    assert any(str(admin.id) in a for a in report.anomalies)
    assert any(str(missing) in a for a in report.anomalies)
    assert (await principals.get(admin.id)).role == Role.ADMIN


@pytest.mark.asyncio
async def test_dry_run_writes_nothing(grants, principals):
    orphan = await principals.create(make_principal(Role.SUB_ADMIN))
    student = await principals.create(make_principal(Role.STUDENT))
    await grants.create(grant_for(student.id))

    report = await reconcile_roles(grants, principals, dry_run=True)

    assert report.demoted == [orphan.id]
    assert report.promoted == [student.id]
    assert report.to_dict()["dryRun"] is True
    assert (await principals.get(orphan.id)).role == Role.SUB_ADMIN
    assert (await principals.get(student.id)).role == Role.STUDENT
