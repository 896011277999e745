"""Role and permission primitives.

Example
-------
::

    from admin_actions.roles import PermissionMode, allow

    permission = allow(PermissionMode.UPDATE, "manager")
    assert permission.has_permission(PermissionMode.UPDATE, "manager")
"""
from __future__ import annotations

from admin_actions.roles.permission import (
    ANYONE,
    Permission,
    PermissionMode,
    allow,
    deny,
)
from admin_actions.roles.registry import RoleChecker, RoleRegistry

__all__ = [
    "ANYONE",
    "Permission",
    "PermissionMode",
    "RoleChecker",
    "RoleRegistry",
    "allow",
    "deny",
]
