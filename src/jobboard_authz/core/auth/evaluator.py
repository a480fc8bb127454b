"""
Authorization Evaluator

Pure predicates over a grant. A missing or inactive grant grants nothing.
"""

from __future__ import annotations

from typing import Iterable, Optional, Set, Tuple, Union

from ...data.models.grant import Action, Grant, Module

Capability = Tuple[Union[Module, str], Union[Action, str]]


def has_permission(
    grant: Optional[Grant],
    module: Union[Module, str],
    action: Union[Action, str],
) -> bool:
    """True iff the grant is active and allows ``action`` on ``module``."""
    if grant is None or not grant.is_active:
        return False
    try:
        module, action = Module(module), Action(action)
    except ValueError:
        return False
    return any(
        entry.module == module and action in entry.actions
        for entry in grant.entries
    )


def has_any_permission(grant: Optional[Grant], required: Iterable[Capability]) -> bool:
    return any(has_permission(grant, module, action) for module, action in required)


def has_all_permissions(grant: Optional[Grant], required: Iterable[Capability]) -> bool:
    if grant is None or not grant.is_active:
        return False
    return all(has_permission(grant, module, action) for module, action in required)


def accessible_modules(grant: Optional[Grant]) -> Set[Module]:
    """Modules on which the grant allows at least one action."""
    if grant is None or not grant.is_active:
        return set()
    return {entry.module for entry in grant.entries if entry.actions}


def ordered_modules(modules: Iterable[Module]) -> list[str]:
    """Module names in catalog order, for responses and logs."""
    modules = set(modules)
    return [m.value for m in Module if m in modules]
