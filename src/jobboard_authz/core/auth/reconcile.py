"""
Role Reconciliation

Out-of-band repair of divergence between cached roles and grants, left by
a partial failure of the non-transactional lifecycle writes:
- ``sub-admin`` principal without an active grant -> ``student``
- active grant whose principal is a student or recruiter -> ``sub-admin``

Admins are never changed; an admin holding a grant is only reported.
Not part of the request path.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional
from uuid import UUID

from ...data.models.principal import GRANTABLE_ROLES, Role
from ...data.repos.grants import GrantRepository
from ...data.repos.principals import PrincipalRepository

logger = logging.getLogger(__name__)


@dataclass
class ReconciliationReport:
    """What a reconciliation pass changed (or would change, on a dry run)."""
    demoted: List[UUID] = field(default_factory=list)
    promoted: List[UUID] = field(default_factory=list)
    anomalies: List[str] = field(default_factory=list)
    dry_run: bool = False

    @property
    def changed(self) -> int:
        return len(self.demoted) + len(self.promoted)

    def to_dict(self) -> dict:
        return {
            "demoted": [str(p) for p in self.demoted],
            "promoted": [str(p) for p in self.promoted],
            "anomalies": list(self.anomalies),
            "dryRun": self.dry_run,
        }


async def reconcile_roles(
    grants: GrantRepository,
    principals: PrincipalRepository,
    actor_id: Optional[UUID] = None,
    dry_run: bool = False,
) -> ReconciliationReport:
    """
    Bring cached roles back in line with active grants.

    Args:
        grants: Grant repository
        principals: Principal repository
        actor_id: Recorded as ``changed_by`` in role history (None = system)
        dry_run: Report divergence without writing
    """
    report = ReconciliationReport(dry_run=dry_run)
    active = await grants.list_grants(is_active=True)
    active_by_principal = {g.principal_id: g for g in active}

    for principal in await principals.list_by_role(Role.SUB_ADMIN):
        if principal.id in active_by_principal:
            continue
        logger.warning(f"Principal {principal.id} is sub-admin without an active grant")
        report.demoted.append(principal.id)
        if not dry_run:
            await principals.change_role(
                principal.id, Role.STUDENT, changed_by=actor_id,
                reason="Reconciliation: no active sub-admin grant",
            )

    for principal_id, grant in active_by_principal.items():
        principal = await principals.get(principal_id)
        if principal is None:
            report.anomalies.append(f"grant {grant.id} references missing principal {principal_id}")
            continue
        if principal.is_admin:
            report.anomalies.append(f"grant {grant.id} belongs to admin principal {principal_id}")
            continue
        if principal.role in GRANTABLE_ROLES:
            logger.warning(f"Principal {principal_id} has an active grant but role {principal.role.value}")
            report.promoted.append(principal_id)
            if not dry_run:
                await principals.change_role(
                    principal_id, Role.SUB_ADMIN, changed_by=actor_id,
                    reason="Reconciliation: active sub-admin grant",
                )

    for anomaly in report.anomalies:
        logger.warning(f"Reconciliation anomaly: {anomaly}")
    logger.info(
        f"Reconciliation {'dry run ' if dry_run else ''}complete: "
        f"{len(report.demoted)} demoted, {len(report.promoted)} promoted, "
        f"{len(report.anomalies)} anomalies"
    )
    return report
