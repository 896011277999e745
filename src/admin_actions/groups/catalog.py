"""Catalog of everything a group can be granted.

:func:`gen_resource_list` enumerates resources with their actions, then
resource-less menus.  Resources and actions flagged ``skip_group_control``
or ``invisible`` are left out; they bypass group authorization entirely.

Example
-------
::

    gen_resource_list(admin)
    # [["Order", "Ship"], ["Customer"], ["Reports"], ["Daily"]]
"""
from __future__ import annotations

from typing import TYPE_CHECKING

from admin_actions.groups.group import (
    Group,
    ResourceActionPermission,
    ResourcePermission,
)
from admin_actions.resources.menu import self_menu_tree

if TYPE_CHECKING:
    from admin_actions.admin import Admin


def gen_resource_list(admin: Admin) -> list[list[str]]:
    """Return ``[[resource_name, action_name, ...], ..., [menu_name], ...]``.

    Resources come first in registration order, each followed by its
    group-controlled action names in registration order.  Then every
    visible menu node without an associated resource gets its own entry;
    menus tied to a resource are covered by that resource's entry.
    """
    available: list[list[str]] = []

    for resource in admin.get_resources():
        if resource.config.skip_group_control or resource.config.invisible:
            continue
        action_names = [a.name for a in resource.get_actions() if not a.skip_group_control]
        available.append([resource.name, *action_names])

    for menu in admin.get_menus():
        for node in self_menu_tree(menu):
            if node.associated_resource is None:
                available.append([node.name])

    return available


def resource_permissions_for(
    group: Group, resource_list: list[list[str]]
) -> list[ResourcePermission]:
    """Snapshot ``group``'s grants against a catalog from :func:`gen_resource_list`."""
    results: list[ResourcePermission] = []
    for entry in resource_list:
        # the first element is the resource name, the rest are actions
        resource_name, action_names = entry[0], entry[1:]
        actions = [
            ResourceActionPermission(
                name=action_name,
                allowed=group.has_resource_action_permission(resource_name, action_name),
            )
            for action_name in action_names
        ]
        results.append(
            ResourcePermission(
                name=resource_name,
                allowed=group.has_resource_permission(resource_name),
                actions=actions,
            )
        )
    return results
