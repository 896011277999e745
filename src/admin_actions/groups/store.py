"""Group permission store.

Answers whether any group containing the current actor grants a resource,
an action, or a menu.  Group membership is the union of all groups that
list the actor's id.

The store is safe for concurrent reads and writes.

Example
-------
>>> store = GroupPermissionStore()
>>> group = Group(name="Shipping", users=["7"])
>>> group.grant_action("Order", "Ship")
>>> store.save(group)
>>> store.has_resource_action_permission(RequestContext(user_id="7"), "Order", "Ship")
True
"""
from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Iterable

from admin_actions.groups.group import Group
from admin_actions.roles.permission import PermissionMode

if TYPE_CHECKING:
    from admin_actions.context import RequestContext
    from admin_actions.resources.menu import Menu

logger = logging.getLogger(__name__)


class GroupPermissionStore:
    """In-memory collection of :class:`Group` objects keyed by name.

    Parameters
    ----------
    groups:
        Groups to seed the store with.  Each is validated as on :meth:`save`.
    """

    def __init__(self, groups: Iterable[Group] | None = None) -> None:
        self._groups: dict[str, Group] = {}
        self._lock = threading.Lock()
        for group in groups or []:
            self.save(group)

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def save(self, group: Group) -> None:
        """Validate and store ``group``, replacing one with the same name.

        Raises
        ------
        GroupValidationError
            If the group name is blank.
        """
        group.validate_for_save()
        with self._lock:
            self._groups[group.name] = group
        logger.info("Saved group %r (%d users)", group.name, len(group.users))

    def get(self, name: str) -> Group | None:
        with self._lock:
            return self._groups.get(name)

    def remove(self, name: str) -> bool:
        with self._lock:
            return self._groups.pop(name, None) is not None

    def all(self) -> list[Group]:
        with self._lock:
            return list(self._groups.values())

    def groups_for(self, user_id: str | None) -> list[Group]:
        """Return every group that lists ``user_id``."""
        if user_id is None:
            return []
        with self._lock:
            groups = list(self._groups.values())
        return [g for g in groups if g.contains_user(user_id)]

    # ------------------------------------------------------------------
    # Authorization
    # ------------------------------------------------------------------

    def has_resource_permission(self, context: RequestContext, resource_name: str) -> bool:
        """True if any of the actor's groups grants ``resource_name``."""
        allowed = any(
            g.has_resource_permission(resource_name) for g in self.groups_for(context.user_id)
        )
        logger.debug(
            "Group resource check: user=%s resource=%s allowed=%s",
            context.user_id,
            resource_name,
            allowed,
        )
        return allowed

    def has_resource_action_permission(
        self, context: RequestContext, resource_name: str, action_name: str
    ) -> bool:
        """True if any of the actor's groups grants ``action_name`` on ``resource_name``."""
        allowed = any(
            g.has_resource_action_permission(resource_name, action_name)
            for g in self.groups_for(context.user_id)
        )
        logger.debug(
            "Group action check: user=%s resource=%s action=%s allowed=%s",
            context.user_id,
            resource_name,
            action_name,
            allowed,
        )
        return allowed

    def action_allowed_by_group(
        self, context: RequestContext, resource_name: str, action_name: str
    ) -> bool:
        """Group-tier entry point used by :meth:`Action.has_group_permission`."""
        return self.has_resource_action_permission(context, resource_name, action_name)

    def has_menu_permission(self, context: RequestContext, menu: Menu) -> bool:
        """True if the actor's groups reach ``menu``.

        A menu whose own role permission denies READ to the actor is never
        reachable.  Past that, a menu opening a resource is authorized
        through that resource.  Otherwise the menu's own grant, or a grant
        on any descendant, allows it.
        """
        if menu.permission is not None and not menu.permission.has_permission(
            PermissionMode.READ, *context.roles
        ):
            logger.debug("Menu %r denied by its role permission", menu.name)
            return False

        resource = menu.associated_resource
        if resource is not None:
            if resource.config.skip_group_control:
                return True
            return self.has_resource_permission(context, resource.name)

        if self.has_resource_permission(context, menu.name):
            return True
        return any(self.has_menu_permission(context, child) for child in menu.sub_menus)

    def __len__(self) -> int:
        return len(self._groups)
