"""
Effective-permission resolution across a user's roles.

A permission map is ``{resource: {action: bool}}``. The effective map of a
user is the boolean OR of every held role's map, key by key, so the result
does not depend on the order roles are listed in.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from justping.models.role import PermissionMap


def resolve_permissions(permission_maps: Iterable[Mapping[str, Any] | None]) -> PermissionMap:
    """
    OR-merge permission maps into one effective map.

    A key present in any role appears in the result; its value is ``True``
    only if at least one role grants it with a literal ``True``. Non-mapping
    resource entries are ignored.

    :param permission_maps: One permission map per held role.
    :returns: Freshly allocated effective permission map.
    """
    result: PermissionMap = {}
    for permissions in permission_maps:
        if not permissions:
            continue
        for resource, actions in permissions.items():
            if not isinstance(actions, Mapping):
                continue
            merged = result.setdefault(str(resource), {})
            for action, allowed in actions.items():
                merged[str(action)] = merged.get(str(action), False) or allowed is True
    return result


def has_permission(permissions: Mapping[str, Any] | None, required: str) -> bool:
    """
    Return whether ``required`` (``"resource.action"``) is granted.

    Malformed strings and absent keys deny.
    """
    if not permissions or "." not in required:
        return False
    resource, _, action = required.partition(".")
    actions = permissions.get(resource)
    if not isinstance(actions, Mapping):
        return False
    return actions.get(action) is True


def has_role(roles: Iterable[Mapping[str, Any]], name: str) -> bool:
    """Return whether any role snapshot in ``roles`` is called ``name``."""
    return any(role.get("name") == name for role in roles)
