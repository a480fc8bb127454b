"""
Capability Catalog

The closed vocabulary of delegable capabilities:
- Modules and actions that can appear in a grant
- Built-in permission templates (named bundles of entries)
- Validation of client-supplied permission entries
- Merging of entry sets
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, List, Optional, Tuple, Union

from ...data.models.grant import Action, Module, PermissionEntry
from ..errors import ValidationError

RawEntry = Union[PermissionEntry, Mapping[str, Any]]


def valid_modules() -> FrozenSet[Module]:
    return frozenset(Module)


def valid_actions() -> FrozenSet[Action]:
    return frozenset(Action)


def _vocabulary(enum_cls) -> str:
    return ", ".join(member.value for member in enum_cls)


@dataclass(frozen=True)
class Template:
    """Named, predefined bundle of permission entries."""
    key: str
    name: str
    description: str
    entries: Tuple[PermissionEntry, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "permissions": [e.to_dict() for e in self.entries],
        }


def _entry(module: Module, *actions: Action) -> PermissionEntry:
    return PermissionEntry(module=module, actions=frozenset(actions))


PERMISSION_TEMPLATES: Dict[str, Template] = {
    t.key: t
    for t in (
        Template(
            key="moderator",
            name="Moderator",
            description="Job moderation and report handling",
            entries=(
                _entry(Module.JOBS, Action.VIEW, Action.EDIT, Action.APPROVE, Action.REJECT),
                _entry(Module.COMPANIES, Action.VIEW),
            ),
        ),
        Template(
            key="support",
            name="Support",
            description="User management and application support",
            entries=(
                _entry(Module.USERS, Action.VIEW, Action.EDIT),
                _entry(Module.APPLICATIONS, Action.VIEW, Action.EDIT),
                _entry(Module.COMPANIES, Action.VIEW),
                _entry(Module.JOBS, Action.VIEW),
            ),
        ),
        Template(
            key="contentManager",
            name="Content Manager",
            description="Company verification and content oversight",
            entries=(
                _entry(Module.COMPANIES, Action.VIEW, Action.EDIT, Action.APPROVE, Action.REJECT),
                _entry(Module.JOBS, Action.VIEW, Action.EDIT),
                _entry(Module.USERS, Action.VIEW),
            ),
        ),
        Template(
            key="fullAccess",
            name="Full Access",
            description="All administrative permissions",
            entries=(
                _entry(Module.USERS, Action.VIEW, Action.CREATE, Action.EDIT, Action.DELETE),
                _entry(Module.JOBS, *Action),
                _entry(Module.COMPANIES, *Action),
                _entry(Module.APPLICATIONS, Action.VIEW, Action.EDIT, Action.DELETE),
                _entry(Module.ANALYTICS, Action.VIEW),
            ),
        ),
        Template(
            key="analyticsViewer",
            name="Analytics Viewer",
            description="View analytics and generate reports",
            entries=(
                _entry(Module.ANALYTICS, Action.VIEW),
                _entry(Module.USERS, Action.VIEW),
                _entry(Module.JOBS, Action.VIEW),
                _entry(Module.COMPANIES, Action.VIEW),
                _entry(Module.APPLICATIONS, Action.VIEW),
            ),
        ),
    )
}


def lookup_template(name: Optional[str]) -> Optional[Template]:
    """Get a built-in template by key, or None."""
    if not name:
        return None
    return PERMISSION_TEMPLATES.get(name)


def template_names() -> List[str]:
    return list(PERMISSION_TEMPLATES)


def list_templates() -> List[Template]:
    return list(PERMISSION_TEMPLATES.values())


def _coerce(enum_cls, value: Any):
    try:
        return enum_cls(value)
    except ValueError:
        return None


def validate_permission_entries(entries: Optional[Iterable[RawEntry]]) -> List[PermissionEntry]:
    """
    Validate client-supplied permission entries against the catalog.

    Accepts request-body dicts (``{"module": ..., "actions": [...]}``) or
    PermissionEntry objects. Returns normalized entries: one per module,
    in catalog order.

    Raises:
        ValidationError: if the list is empty, a module is unknown, or an
            entry's actions are empty or contain an unknown action. The
            message enumerates the valid vocabulary.
    """
    if entries is None or isinstance(entries, (str, bytes, Mapping)):
        raise ValidationError("Permissions must be a non-empty array")

    entries = list(entries)
    if not entries:
        raise ValidationError("Permissions must be a non-empty array")

    validated: List[PermissionEntry] = []
    for raw in entries:
        if isinstance(raw, PermissionEntry):
            validated.append(raw)
            continue
        if not isinstance(raw, Mapping):
            raise ValidationError(
                "Each permission must be an object with 'module' and 'actions'"
            )

        module_value = raw.get("module")
        module = _coerce(Module, module_value)
        if module is None:
            raise ValidationError(
                f"Invalid module: {module_value}. Valid modules are: {_vocabulary(Module)}",
                {"validModules": [m.value for m in Module]},
            )

        action_values = raw.get("actions")
        if not action_values or isinstance(action_values, (str, bytes, Mapping)) \
                or not isinstance(action_values, Iterable):
            raise ValidationError(f"Module {module.value} must have at least one action")

        actions = set()
        for action_value in action_values:
            action = _coerce(Action, action_value)
            if action is None:
                raise ValidationError(
                    f"Invalid action: {action_value}. Valid actions are: {_vocabulary(Action)}",
                    {"validActions": [a.value for a in Action]},
                )
            actions.add(action)

        validated.append(PermissionEntry(module=module, actions=frozenset(actions)))

    return normalize_entries(validated)


def merge_entries(*entry_sets: Iterable[PermissionEntry]) -> List[PermissionEntry]:
    """
    Union the action sets of every input per module.

    The result has exactly one entry per module touched by any input, in
    catalog order, so the merge is commutative, associative and idempotent.
    """
    merged: Dict[Module, set] = {}
    for entry_set in entry_sets:
        for entry in entry_set:
            merged.setdefault(entry.module, set()).update(entry.actions)

    return [
        PermissionEntry(module=module, actions=frozenset(merged[module]))
        for module in Module
        if merged.get(module)
    ]


def normalize_entries(entries: Iterable[PermissionEntry]) -> List[PermissionEntry]:
    """Collapse duplicate modules and order entries by catalog order."""
    return merge_entries(entries)
