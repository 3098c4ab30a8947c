"""
Declarative permission table.
Maps (entity, action) to the set of roles allowed to perform it; `None` marks a public
action. Every route consults `check_permission` instead of restating role lists, and
delete is Admin-only for every entity.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from portfolio.common.errors import AuthenticationError, AuthorizationError

ROLES = ("Admin", "Manager", "Editor", "Viewer")

Roles = frozenset[str] | None

PUBLIC: Roles = None
ADMIN = frozenset({"Admin"})
ADMIN_EDITOR = frozenset({"Admin", "Editor"})
ADMIN_MANAGER = frozenset({"Admin", "Manager"})
ADMIN_MANAGER_EDITOR = frozenset({"Admin", "Manager", "Editor"})
AUTHENTICATED = frozenset(ROLES)


def _rules(entity: str, **actions: Roles) -> dict[tuple[str, str], Roles]:
    table = {(entity, action): roles for action, roles in actions.items()}
    table[(entity, "delete")] = ADMIN
    return table


PERMISSIONS: Mapping[tuple[str, str], Roles] = MappingProxyType(
    {
        **_rules(
            "services",
            read=PUBLIC,
            featured=PUBLIC,
            analytics=PUBLIC,
            create=ADMIN_EDITOR,
            update=ADMIN_EDITOR,
        ),
        **_rules(
            "projects",
            read=PUBLIC,
            featured=PUBLIC,
            analytics=PUBLIC,
            create=ADMIN_MANAGER_EDITOR,
            update=ADMIN_MANAGER_EDITOR,
        ),
        **_rules(
            "clients",
            read=ADMIN_MANAGER_EDITOR,
            featured=PUBLIC,
            analytics=ADMIN_MANAGER,
            create=ADMIN_MANAGER,
            update=ADMIN_MANAGER,
        ),
        **_rules(
            "team-members",
            read=PUBLIC,
            featured=PUBLIC,
            analytics=PUBLIC,
            create=ADMIN_EDITOR,
            update=ADMIN_EDITOR,
        ),
        **_rules(
            "teams",
            read=PUBLIC,
            analytics=PUBLIC,
            create=ADMIN_MANAGER,
            update=ADMIN_MANAGER,
        ),
        **_rules(
            "blog",
            read=PUBLIC,
            featured=PUBLIC,
            analytics=PUBLIC,
            engage=PUBLIC,
            create=ADMIN_EDITOR,
            update=ADMIN_EDITOR,
            view_all=ADMIN_EDITOR,
        ),
        **_rules(
            "testimonials",
            read=PUBLIC,
            featured=PUBLIC,
            analytics=PUBLIC,
            create=PUBLIC,
            update=ADMIN_EDITOR,
            moderate=ADMIN_EDITOR,
            view_all=ADMIN_EDITOR,
        ),
        **_rules(
            "contact",
            create=PUBLIC,
            read=ADMIN_MANAGER_EDITOR,
            analytics=ADMIN_MANAGER,
            status=ADMIN_MANAGER_EDITOR,
            notes=ADMIN_MANAGER_EDITOR,
            assign=ADMIN_MANAGER,
            bulk_update=ADMIN_MANAGER,
            update=ADMIN_MANAGER,
        ),
        **_rules("search", read=PUBLIC),
        **_rules("ai", use=PUBLIC),
        **_rules("upload", create=ADMIN_MANAGER_EDITOR),
        **_rules("auth", me=AUTHENTICATED, assign_role=ADMIN),
    }
)


def required_roles(entity: str, action: str) -> Roles:
    try:
        return PERMISSIONS[(entity, action)]
    except KeyError as exc:
        raise KeyError(f"No permission rule for {entity}.{action}") from exc


def is_allowed(entity: str, action: str, role: str | None) -> bool:
    roles = required_roles(entity, action)
    return roles is None or (role is not None and role in roles)


def check_permission(entity: str, action: str, role: str | None) -> None:
    """Raise AuthenticationError for anonymous callers and AuthorizationError for wrong roles."""

    roles = required_roles(entity, action)
    if roles is None:
        return
    if role is None:
        raise AuthenticationError()
    if role not in roles:
        raise AuthorizationError()
