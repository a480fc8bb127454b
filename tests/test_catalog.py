"""
Test Capability Catalog

Vocabulary, templates, validation of client-supplied entries and merging.
"""

import pytest

from jobboard_authz.core.auth.catalog import (
    PERMISSION_TEMPLATES,
    lookup_template,
    merge_entries,
    normalize_entries,
    template_names,
    valid_actions,
    valid_modules,
    validate_permission_entries,
)
from jobboard_authz.core.errors import ValidationError
from jobboard_authz.data.models import Action, Module, PermissionEntry


def entry(module, *actions):
    return PermissionEntry(module=Module(module), actions=frozenset(Action(a) for a in actions))


def as_map(entries):
    return {e.module.value: {a.value for a in e.actions} for e in entries}


class TestVocabulary:
    """The catalog is closed and fixed"""

    def test_valid_modules(self):
        assert {m.value for m in valid_modules()} == {
            "users", "jobs", "companies", "applications", "analytics"
        }

    def test_valid_actions(self):
        assert {a.value for a in valid_actions()} == {
            "view", "create", "edit", "delete", "approve", "reject"
        }


class TestTemplates:
    """Built-in permission templates"""

    def test_template_names(self):
        assert template_names() == [
            "moderator", "support", "contentManager", "fullAccess", "analyticsViewer"
        ]

    def test_moderator_contents(self):
        template = lookup_template("moderator")
        assert template.name == "Moderator"
        assert as_map(template.entries) == {
            "jobs": {"view", "edit", "approve", "reject"},
            "companies": {"view"},
        }

    def test_full_access_excludes_user_moderation(self):
        template = lookup_template("fullAccess")
        users = as_map(template.entries)["users"]
        assert "approve" not in users
        assert as_map(template.entries)["jobs"] == {a.value for a in Action}

    def test_unknown_template(self):
        assert lookup_template("superuser") is None
        assert lookup_template("") is None
        assert lookup_template(None) is None

    def test_template_names_are_case_sensitive(self):
        assert lookup_template("Moderator") is None

    def test_every_template_passes_validation(self):
        for template in PERMISSION_TEMPLATES.values():
            raw = [e.to_dict() for e in template.entries]
            assert as_map(validate_permission_entries(raw)) == as_map(template.entries)

    def test_to_dict_uses_catalog_action_order(self):
        data = lookup_template("moderator").to_dict()
        assert data["permissions"][0] == {
            "module": "jobs",
            "actions": ["view", "edit", "approve", "reject"],
        }


class TestValidatePermissionEntries:
    """Boundary validation of permission entries"""

    def test_valid_entries(self):
        result = validate_permission_entries([
            {"module": "jobs", "actions": ["view", "approve"]},
            {"module": "users", "actions": ["view"]},
        ])
        assert as_map(result) == {"jobs": {"view", "approve"}, "users": {"view"}}
        # Catalog order: users before jobs
        assert [e.module for e in result] == [Module.USERS, Module.JOBS]

    def test_empty_list_rejected(self):
        with pytest.raises(ValidationError, match="non-empty"):
            validate_permission_entries([])

    def test_none_rejected(self):
        with pytest.raises(ValidationError):
            validate_permission_entries(None)

    def test_non_list_rejected(self):
        with pytest.raises(ValidationError):
            validate_permission_entries({"module": "jobs", "actions": ["view"]})

    def test_unknown_module_lists_valid_modules(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_permission_entries([{"module": "billing", "actions": ["view"]}])
        message = exc_info.value.message
        assert "Invalid module: billing" in message
        for module in ("users", "jobs", "companies", "applications", "analytics"):
            assert module in message
        assert exc_info.value.status_code == 400

    def test_missing_module_rejected(self):
        with pytest.raises(ValidationError, match="Invalid module"):
            validate_permission_entries([{"actions": ["view"]}])

    def test_empty_actions_rejected(self):
        with pytest.raises(ValidationError, match="at least one action"):
            validate_permission_entries([{"module": "jobs", "actions": []}])

    def test_missing_actions_rejected(self):
        with pytest.raises(ValidationError, match="at least one action"):
            validate_permission_entries([{"module": "jobs"}])

    def test_string_actions_rejected(self):
        with pytest.raises(ValidationError, match="at least one action"):
            validate_permission_entries([{"module": "jobs", "actions": "view"}])

    def test_unknown_action_lists_valid_actions(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_permission_entries([{"module": "jobs", "actions": ["view", "publish"]}])
        message = exc_info.value.message
        assert "Invalid action: publish" in message
        for action in ("view", "create", "edit", "delete", "approve", "reject"):
            assert action in message

    def test_non_object_entry_rejected(self):
        with pytest.raises(ValidationError, match="module"):
            validate_permission_entries(["jobs:view"])

    def test_duplicate_actions_collapse(self):
        result = validate_permission_entries([{"module": "jobs", "actions": ["view", "view"]}])
        assert as_map(result) == {"jobs": {"view"}}

    def test_duplicate_modules_normalized_into_one_entry(self):
        result = validate_permission_entries([
            {"module": "jobs", "actions": ["view"]},
            {"module": "jobs", "actions": ["edit"]},
        ])
        assert len(result) == 1
        assert as_map(result) == {"jobs": {"view", "edit"}}

    def test_accepts_permission_entry_objects(self):
        result = validate_permission_entries([entry("analytics", "view")])
        assert result == [entry("analytics", "view")]


class TestMergeEntries:
    """Per-module union of entry sets"""

    A = [entry("jobs", "view", "edit"), entry("users", "view")]
    B = [entry("jobs", "approve"), entry("companies", "view")]
    C = [entry("users", "delete"), entry("analytics", "view")]

    def test_commutative(self):
        assert merge_entries(self.A, self.B) == merge_entries(self.B, self.A)

    def test_associative(self):
        left = merge_entries(merge_entries(self.A, self.B), self.C)
        right = merge_entries(self.A, merge_entries(self.B, self.C))
        assert left == right == merge_entries(self.A, self.B, self.C)

    def test_idempotent(self):
        assert merge_entries(self.A, self.A) == normalize_entries(self.A)

    def test_one_entry_per_module(self):
        merged = merge_entries(self.A, self.B, self.C)
        modules = [e.module for e in merged]
        assert len(modules) == len(set(modules))
        assert as_map(merged) == {
            "users": {"view", "delete"},
            "jobs": {"view", "edit", "approve"},
            "companies": {"view"},
            "analytics": {"view"},
        }

    def test_custom_entries_merged_with_support_template(self):
        """users:[view,edit] plus support keeps exactly one users entry"""
        custom = validate_permission_entries([{"module": "users", "actions": ["view", "edit"]}])
        merged = merge_entries(custom, lookup_template("support").entries)

        users_entries = [e for e in merged if e.module == Module.USERS]
        assert len(users_entries) == 1
        assert users_entries[0].actions == {Action.VIEW, Action.EDIT}
        assert as_map(merged) == {
            "users": {"view", "edit"},
            "applications": {"view", "edit"},
            "companies": {"view"},
            "jobs": {"view"},
        }

    def test_empty_inputs(self):
        assert merge_entries() == []
        assert merge_entries([], []) == []
