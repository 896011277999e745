"""Role-based permission rules.

A :class:`Permission` maps operation modes to the roles allowed or denied
for them.  Deny entries are checked first; a permission with no allow
entries at all admits everyone who is not explicitly denied.

Example
-------
::

    permission = allow(PermissionMode.CRUD, "admin").deny(PermissionMode.DELETE, "intern")
    permission.has_permission(PermissionMode.UPDATE, "admin")    # True
    permission.has_permission(PermissionMode.DELETE, "intern")   # False
    permission.has_permission(PermissionMode.READ, "visitor")    # False
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

logger = logging.getLogger(__name__)

ANYONE: str = "*"
"""Wildcard role matching every actor."""


class PermissionMode(str, Enum):
    """Operation categories a permission can be checked for."""

    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    CRUD = "crud"

    def expand(self) -> tuple[PermissionMode, ...]:
        """Return the concrete modes this mode stands for."""
        if self is PermissionMode.CRUD:
            return (
                PermissionMode.CREATE,
                PermissionMode.READ,
                PermissionMode.UPDATE,
                PermissionMode.DELETE,
            )
        return (self,)


def _include_roles(rule_roles: list[str], actor_roles: tuple[str, ...]) -> bool:
    for role in rule_roles:
        if role == ANYONE or role in actor_roles:
            return True
    return False


@dataclass
class Permission:
    """Allow/deny role lists keyed by :class:`PermissionMode`.

    Attributes
    ----------
    allowed_roles:
        Roles allowed per concrete mode.
    denied_roles:
        Roles denied per concrete mode.  Denial wins over allowance.
    """

    allowed_roles: dict[PermissionMode, list[str]] = field(default_factory=dict)
    denied_roles: dict[PermissionMode, list[str]] = field(default_factory=dict)

    def allow(self, mode: PermissionMode | str, *roles: str) -> Permission:
        """Allow ``roles`` for ``mode`` and return ``self`` for chaining."""
        for concrete in PermissionMode(mode).expand():
            existing = self.allowed_roles.setdefault(concrete, [])
            existing.extend(r for r in roles if r not in existing)
        return self

    def deny(self, mode: PermissionMode | str, *roles: str) -> Permission:
        """Deny ``roles`` for ``mode`` and return ``self`` for chaining."""
        for concrete in PermissionMode(mode).expand():
            existing = self.denied_roles.setdefault(concrete, [])
            existing.extend(r for r in roles if r not in existing)
        return self

    def concat(self, other: Permission) -> Permission:
        """Return a new permission combining the entries of both."""
        combined = Permission()
        for source in (self, other):
            for mode, roles in source.allowed_roles.items():
                combined.allow(mode, *roles)
            for mode, roles in source.denied_roles.items():
                combined.deny(mode, *roles)
        return combined

    def has_permission(self, mode: PermissionMode | str, *roles: str) -> bool:
        """Return True when any of ``roles`` may perform ``mode``.

        ``PermissionMode.CRUD`` requires every concrete mode to pass.
        """
        actor_roles = tuple(str(r) for r in roles)
        return all(
            self._has_concrete_permission(concrete, actor_roles)
            for concrete in PermissionMode(mode).expand()
        )

    def _has_concrete_permission(
        self, mode: PermissionMode, actor_roles: tuple[str, ...]
    ) -> bool:
        denied = self.denied_roles.get(mode)
        if denied and _include_roles(denied, actor_roles):
            logger.debug("Permission DENY: mode=%s roles=%s", mode.value, actor_roles)
            return False

        # No allow entries at all: everything not denied passes.
        if not self.allowed_roles:
            return True

        allowed = self.allowed_roles.get(mode)
        return bool(allowed) and _include_roles(allowed, actor_roles)

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> Permission:
        """Build a Permission from ``{"allow": {mode: [roles]}, "deny": {...}}``.

        Raises
        ------
        ValueError
            If a mode name is unknown or a role list is not a list.
        """
        permission = cls()
        for key, method in (("allow", permission.allow), ("deny", permission.deny)):
            raw = data.get(key) or {}
            if not isinstance(raw, dict):
                raise ValueError(f"Permission '{key}' must be a mapping; got {raw!r}.")
            for mode_name, roles in raw.items():
                if isinstance(roles, str):
                    roles = [roles]
                if not isinstance(roles, list):
                    raise ValueError(
                        f"Roles for mode {mode_name!r} must be a list; got {roles!r}."
                    )
                method(PermissionMode(str(mode_name).lower()), *[str(r) for r in roles])
        return permission


def allow(mode: PermissionMode | str, *roles: str) -> Permission:
    """Shorthand for ``Permission().allow(mode, *roles)``."""
    return Permission().allow(mode, *roles)


def deny(mode: PermissionMode | str, *roles: str) -> Permission:
    """Shorthand for ``Permission().deny(mode, *roles)``."""
    return Permission().deny(mode, *roles)
