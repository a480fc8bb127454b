"""
Delegated Administration Authorization

Lets the platform owner delegate a subset of administrative capability to
ordinary principals ("sub-admins").

Core concepts:
- Catalog: closed vocabulary of modules/actions and built-in templates
- Evaluator: pure permission checks over a grant
- Guards: FastAPI dependencies enforcing capabilities per route
- Lifecycle: grant creation/update/revocation, keeping roles in sync
- Reconciliation: out-of-band repair of role/grant divergence
"""

from .catalog import (
    PERMISSION_TEMPLATES,
    Template,
    list_templates,
    lookup_template,
    merge_entries,
    normalize_entries,
    template_names,
    valid_actions,
    valid_modules,
    validate_permission_entries,
)
from .context import PrincipalHeaderMiddleware, RequestPrincipal, get_request_principal
from .evaluator import (
    accessible_modules,
    has_all_permissions,
    has_any_permission,
    has_permission,
)
from .guards import PermissionGuards
from .lifecycle import GrantCreation, GrantLifecycleManager
from .reconcile import ReconciliationReport, reconcile_roles

__all__ = [
    "PERMISSION_TEMPLATES",
    "Template",
    "list_templates",
    "lookup_template",
    "merge_entries",
    "normalize_entries",
    "template_names",
    "valid_actions",
    "valid_modules",
    "validate_permission_entries",
    "PrincipalHeaderMiddleware",
    "RequestPrincipal",
    "get_request_principal",
    "accessible_modules",
    "has_all_permissions",
    "has_any_permission",
    "has_permission",
    "PermissionGuards",
    "GrantCreation",
    "GrantLifecycleManager",
    "ReconciliationReport",
    "reconcile_roles",
]
