"""Admin registry.

The :class:`Admin` holds every registered resource, the menu tree, the
router and the group permission store.  It has two phases:

- ``OPEN``: startup; resources, menus and actions may be registered.
- ``SEALED``: request serving; the registry is read-only and safe to read
  from many threads without locking.

Example
-------
::

    admin = Admin()
    orders = admin.add_resource("Order", source=MemoryRecordSource(rows))
    orders.action(Action(name="Ship", handler=ship))
    register_group(admin)
    admin.seal()
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Iterable, Protocol

from admin_actions.context import RequestContext
from admin_actions.errors import RegistryClosedError, UnknownResourceError
from admin_actions.groups.group import Group
from admin_actions.groups.store import GroupPermissionStore
from admin_actions.query import MemoryRecordSource
from admin_actions.resources.menu import Menu
from admin_actions.resources.resource import Resource, ResourceConfig
from admin_actions.roles.permission import ANYONE, PermissionMode, deny
from admin_actions.routing import RouteTable

if TYPE_CHECKING:
    from admin_actions.context import Searcher
    from admin_actions.query import RecordSource
    from admin_actions.routing import Router

logger = logging.getLogger(__name__)


class RegistryPhase(str, Enum):
    """Lifecycle phase of an :class:`Admin`."""

    OPEN = "open"
    SEALED = "sealed"


class UserLookup(Protocol):
    """Resolves group member ids to user objects."""

    def get_users_by_ids(self, ids: list[str]) -> list[object]:
        ...


class Admin:
    """Registry of resources, menus and routes.

    Parameters
    ----------
    router:
        Router collaborator receiving action routes.  Defaults to an
        in-memory :class:`RouteTable`.
    group_store:
        Store consulted when group authorization is enabled.
    """

    def __init__(
        self,
        router: Router | None = None,
        group_store: GroupPermissionStore | None = None,
    ) -> None:
        self.router: Router = router if router is not None else RouteTable()
        self.group_store = group_store if group_store is not None else GroupPermissionStore()
        self.user_lookup: UserLookup | None = None
        self._resources: list[Resource] = []
        self._menus: list[Menu] = []
        self._group_enabled = False
        self._phase = RegistryPhase.OPEN

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def phase(self) -> RegistryPhase:
        return self._phase

    def ensure_open(self, what: str) -> None:
        """Raise :class:`RegistryClosedError` once the registry is sealed."""
        if self._phase is RegistryPhase.SEALED:
            raise RegistryClosedError(what)

    def seal(self) -> None:
        """Finish registration; the registry becomes read-only."""
        if self._phase is RegistryPhase.SEALED:
            return
        self._phase = RegistryPhase.SEALED
        logger.info(
            "Admin sealed: %d resources, %d menus, group_enabled=%s",
            len(self._resources),
            len(self._menus),
            self._group_enabled,
        )

    # ------------------------------------------------------------------
    # Group authorization
    # ------------------------------------------------------------------

    def is_group_enabled(self) -> bool:
        return self._group_enabled

    def set_group_enabled(self, enabled: bool) -> None:
        self.ensure_open("group setting")
        self._group_enabled = enabled

    def group_members(self, group: Group) -> list[object]:
        """Return the users of ``group``, resolved through :attr:`user_lookup`."""
        if self.user_lookup is None:
            return list(group.users)
        return self.user_lookup.get_users_by_ids(list(group.users))

    # ------------------------------------------------------------------
    # Resources
    # ------------------------------------------------------------------

    def add_resource(
        self,
        config: ResourceConfig | str,
        source: RecordSource | None = None,
    ) -> Resource:
        """Register a resource and, unless invisible, its menu entry.

        Raises
        ------
        ValueError
            If a resource with the same name already exists.
        """
        if isinstance(config, str):
            config = ResourceConfig(name=config)
        self.ensure_open(f"resource {config.name!r}")
        if self.find_resource(config.name) is not None:
            raise ValueError(f"Resource {config.name!r} is already registered.")

        resource = Resource(self, config, source)
        self._resources.append(resource)

        if not config.invisible:
            self.add_menu(
                Menu(name=resource.name, link=resource.route_prefix(), associated_resource=resource),
                ancestors=config.menu,
            )

        logger.info("Registered resource %r", resource.name)
        return resource

    def get_resources(self) -> list[Resource]:
        return list(self._resources)

    def find_resource(self, name: str) -> Resource | None:
        for resource in self._resources:
            if resource.name == name or resource.to_param() == name:
                return resource
        return None

    def get_resource(self, name: str) -> Resource:
        """Return the resource called ``name`` (or with that URL param).

        Raises
        ------
        UnknownResourceError
            If nothing matches.
        """
        resource = self.find_resource(name)
        if resource is None:
            raise UnknownResourceError(name)
        return resource

    # ------------------------------------------------------------------
    # Menus
    # ------------------------------------------------------------------

    def add_menu(self, menu: Menu, ancestors: Iterable[str] = ()) -> Menu:
        """Add ``menu`` below the named ancestor chain, creating missing parents."""
        self.ensure_open(f"menu {menu.name!r}")
        siblings = self._menus
        for ancestor_name in ancestors:
            parent = next((m for m in siblings if m.name == ancestor_name), None)
            if parent is None:
                parent = Menu(name=ancestor_name)
                siblings.append(parent)
            siblings = parent.sub_menus
        siblings.append(menu)
        return menu

    def get_menus(self) -> list[Menu]:
        return list(self._menus)

    def get_menu(self, name: str) -> Menu | None:
        for menu in self._menus:
            found = menu.find(name)
            if found is not None:
                return found
        return None

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def new_context(
        self,
        resource: Resource | str | None = None,
        roles: Iterable[str] = (),
        user_id: str | int | None = None,
        **kwargs: object,
    ) -> RequestContext:
        """Build a :class:`RequestContext` bound to this admin."""
        if isinstance(resource, str):
            resource = self.get_resource(resource)
        return RequestContext(
            roles=list(roles),
            user_id=str(user_id) if user_id is not None else None,
            resource=resource,
            admin=self,
            **kwargs,  # type: ignore[arg-type]
        )


class _GroupRecordSource:
    """Serves the group store's groups as records keyed by name."""

    def __init__(self, store: GroupPermissionStore) -> None:
        self._store = store

    def to_primary_query_params(self, key: str, context: RequestContext | None):
        return "name = ?", [key]

    def find_many(self, searcher: Searcher) -> list[object]:
        return MemoryRecordSource(self._store.all(), primary_field="name").find_many(searcher)


def register_group(
    admin: Admin,
    user_lookup: UserLookup | None = None,
    name: str = "Groups",
) -> Resource:
    """Enable group authorization on ``admin``.

    Adds the group management resource and the hidden-from-everyone
    ``GroupSelector`` resource used by user pickers.  Both are exempt from
    group control so group editing never locks itself out.

    Returns
    -------
    Resource
        The group management resource.
    """
    admin.set_group_enabled(True)
    admin.user_lookup = user_lookup
    source = _GroupRecordSource(admin.group_store)

    groups = admin.add_resource(
        ResourceConfig(name=name or "Groups", skip_group_control=True), source=source
    )
    admin.add_resource(
        ResourceConfig(name="GroupSelector", skip_group_control=True), source=source
    )
    selector_menu = admin.get_menu("GroupSelector")
    if selector_menu is not None:
        selector_menu.permission = deny(PermissionMode.CRUD, ANYONE)

    logger.info("Group authorization enabled with resource %r", groups.name)
    return groups
