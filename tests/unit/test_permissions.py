"""
Unit tests for the permission table.
"""

from __future__ import annotations

import pytest

from portfolio.catalog.permissions import PERMISSIONS, check_permission, is_allowed, required_roles
from portfolio.common.errors import AuthenticationError, AuthorizationError


def test_delete_is_admin_only_everywhere() -> None:
    deletes = {entity: roles for (entity, action), roles in PERMISSIONS.items() if action == "delete"}
    assert deletes
    assert all(roles == frozenset({"Admin"}) for roles in deletes.values())


def test_public_actions_allow_anonymous() -> None:
    assert is_allowed("services", "read", None)
    check_permission("contact", "create", None)


def test_anonymous_and_wrong_role_errors() -> None:
    with pytest.raises(AuthenticationError):
        check_permission("contact", "read", None)
    with pytest.raises(AuthorizationError):
        check_permission("contact", "assign", "Editor")


def test_unknown_rule_is_a_programming_error() -> None:
    with pytest.raises(KeyError, match="No permission rule"):
        required_roles("services", "teleport")


def test_only_admins_assign_roles() -> None:
    assert is_allowed("auth", "assign_role", "Admin")
    assert not is_allowed("auth", "assign_role", "Manager")
    assert not is_allowed("auth", "assign_role", None)
