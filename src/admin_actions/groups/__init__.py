"""Group-based authorization: groups, the permission store and the catalog."""
from __future__ import annotations

from admin_actions.groups.catalog import gen_resource_list, resource_permissions_for
from admin_actions.groups.group import (
    Group,
    ResourceActionPermission,
    ResourceGrant,
    ResourcePermission,
)
from admin_actions.groups.store import GroupPermissionStore

__all__ = [
    "Group",
    "GroupPermissionStore",
    "ResourceActionPermission",
    "ResourceGrant",
    "ResourcePermission",
    "gen_resource_list",
    "resource_permissions_for",
]
