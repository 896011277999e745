"""Admin menu tree."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from admin_actions.resources.resource import Resource
    from admin_actions.roles.permission import Permission


@dataclass(eq=False)
class Menu:
    """A menu node.

    Attributes
    ----------
    name:
        Menu name; also the key groups grant against for menus without a
        resource.
    link:
        Target URL, if any.
    invisible:
        Hidden menus and their descendants are not listed in the catalog.
    associated_resource:
        Resource this menu opens; such menus are authorized through the
        resource rather than by name.
    permission:
        Optional role permission on the menu itself.
    sub_menus:
        Child menus.
    """

    name: str
    link: str = ""
    invisible: bool = False
    associated_resource: Resource | None = None
    permission: Permission | None = None
    sub_menus: list[Menu] = field(default_factory=list)

    def add_sub_menu(self, menu: Menu) -> Menu:
        self.sub_menus.append(menu)
        return menu

    def find(self, name: str) -> Menu | None:
        """Depth-first search for ``name`` in this menu's tree."""
        if self.name == name:
            return self
        for child in self.sub_menus:
            found = child.find(name)
            if found is not None:
                return found
        return None


def self_menu_tree(menu: Menu) -> list[Menu]:
    """Return ``menu`` followed by its visible descendants, depth first.

    Invisible nodes are dropped together with their subtrees.
    """
    if menu.invisible:
        return []
    tree = [menu]
    for child in menu.sub_menus:
        tree.extend(self_menu_tree(child))
    return tree
