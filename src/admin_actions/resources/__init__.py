"""Resources, their actions and the menu tree."""
from __future__ import annotations

from admin_actions.resources.action import ActionArgument, Action
from admin_actions.resources.menu import Menu, self_menu_tree
from admin_actions.resources.resource import Resource, ResourceConfig

__all__ = [
    "Action",
    "ActionArgument",
    "Menu",
    "Resource",
    "ResourceConfig",
    "self_menu_tree",
]
