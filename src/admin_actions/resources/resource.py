"""Resources: CRUD-managed entity types registered with an admin.

A resource owns its action list and its routes, and delegates all record
loading to a :class:`~admin_actions.query.RecordSource`.
"""
from __future__ import annotations

import logging
import posixpath
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from admin_actions.errors import QueryError, UnknownActionError
from admin_actions.resources.action import Action
from admin_actions.roles.permission import Permission, PermissionMode
from admin_actions.routing import RouteConfig
from admin_actions.utils import humanize_string, to_param_string

if TYPE_CHECKING:
    from admin_actions.admin import Admin
    from admin_actions.context import RequestContext
    from admin_actions.query import RecordSource

logger = logging.getLogger(__name__)


@dataclass
class ResourceConfig:
    """Registration options for a resource.

    Attributes
    ----------
    name:
        Resource name; required.
    invisible:
        Hidden from menus and from the group permission catalog.
    skip_group_control:
        Exempt from group authorization and from the catalog.
    permission:
        Role permission guarding the resource itself.
    menu:
        Parent menu names, outermost first.
    """

    name: str = ""
    invisible: bool = False
    skip_group_control: bool = False
    permission: Permission | None = None
    menu: tuple[str, ...] = ()


class Resource:
    """A registered resource.

    Parameters
    ----------
    admin:
        The owning admin.
    config:
        Registration options.
    source:
        Query collaborator used to load records.
    """

    def __init__(
        self,
        admin: Admin,
        config: ResourceConfig,
        source: RecordSource | None = None,
    ) -> None:
        if not config.name:
            raise ValueError("Resource name must not be empty.")
        self._admin = admin
        self.config = config
        self.source = source
        self._actions: list[Action] = []

    def __repr__(self) -> str:
        return f"Resource(name={self.name!r}, actions={len(self._actions)})"

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def permission(self) -> Permission | None:
        return self.config.permission

    def get_admin(self) -> Admin:
        return self._admin

    def to_param(self) -> str:
        return to_param_string(self.name)

    def param_id_name(self) -> str:
        """Return the route parameter segment for a record id."""
        return ":" + self.to_param().replace("-", "_") + "_id"

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def action(self, action: Action) -> Action:
        """Register ``action`` on this resource.

        Registering a name that already exists merges the supplied fields
        of ``action`` into the existing definition and copies the merged
        result back into ``action``; no routes are added in that case.
        A new action gets its defaults filled in and its routes registered.

        Returns
        -------
        Action
            The registered (possibly merged) action.
        """
        self._admin.ensure_open(f"action {action.name!r} on {self.name!r}")

        existing = self.get_action(action.name)
        if existing is not None:
            supplied = action.supplied_fields()
            existing.merge_from(action)
            existing.belonged_resource = self
            existing.copy_into(action)
            logger.debug(
                "Merged action %s.%s (fields=%s)", self.name, action.name, supplied
            )
            return existing

        if not action.label:
            action.label = humanize_string(action.name)

        if not action.method:
            action.method = "GET" if action.url is not None else "PUT"
        action.method = action.method.upper()

        if not action.url_open_type:
            if action.resource is not None:
                action.url_open_type = "bottomsheet"
            elif action.method == "GET":
                action.url_open_type = "_blank"
            else:
                action.url_open_type = ""

        action.belonged_resource = self
        self._actions.append(action)
        self._register_action_routes(action)
        logger.info("Registered action %s.%s (%s)", self.name, action.name, action.method)
        return action

    def _register_action_routes(self, action: Action) -> None:
        from admin_actions.dispatcher import ActionController

        controller = ActionController(admin=self._admin, action=action)
        bulk_path = posixpath.join("!action", action.to_param())
        single_path = posixpath.join(self.param_id_name(), action.to_param())

        methods: list[str] = []
        if action.resource is not None:
            methods.append("GET")
        if action.handler is not None:
            methods.append("PUT")

        for method in methods:
            for path in (bulk_path, single_path):
                self.register_route(
                    method,
                    path,
                    controller,
                    RouteConfig(permissioner=action, permission_mode=PermissionMode.UPDATE),
                )

    def get_actions(self) -> list[Action]:
        return list(self._actions)

    def get_action(self, name: str) -> Action | None:
        for action in self._actions:
            if action.name == name:
                return action
        return None

    def get_action_by_param(self, param: str) -> Action:
        """Return the action whose :meth:`Action.to_param` equals ``param``.

        Raises
        ------
        UnknownActionError
            If no action matches.
        """
        for action in self._actions:
            if action.to_param() == param or action.name == param:
                return action
        raise UnknownActionError(self.name, param)

    def allowed_actions(
        self, mode: str, context: RequestContext, *records: object
    ) -> list[Action]:
        """Return actions shown in ``mode`` that the actor may invoke."""
        return [
            action
            for action in self._actions
            if action.has_mode(mode)
            and action.is_allowed(PermissionMode.UPDATE, context, *records)
        ]

    # ------------------------------------------------------------------
    # Permission
    # ------------------------------------------------------------------

    def has_permission(self, mode: PermissionMode, context: RequestContext) -> bool:
        """Return True if the actor may perform ``mode`` on this resource.

        With group authorization enabled, a group-controlled resource also
        needs a resource grant from one of the actor's groups.
        """
        if (
            self._admin.is_group_enabled()
            and not self.config.skip_group_control
            and not self._admin.group_store.has_resource_permission(context, self.name)
        ):
            return False

        if self.config.permission is None:
            return True
        return self.config.permission.has_permission(mode, *context.roles)

    # ------------------------------------------------------------------
    # Routing and querying
    # ------------------------------------------------------------------

    def route_prefix(self) -> str:
        return "/" + self.to_param()

    def register_route(
        self,
        method: str,
        path: str,
        handler: Callable[..., object],
        config: RouteConfig | None = None,
    ) -> None:
        """Register ``path`` (relative to this resource) with the admin router."""
        full_path = posixpath.join(self.route_prefix(), path)
        self._admin.router.register_route(method, full_path, handler, config)

    def to_primary_query_params(
        self, key: str, context: RequestContext | None
    ) -> tuple[str, list[object]]:
        if self.source is None:
            raise QueryError(f"Resource {self.name!r} has no record source.")
        return self.source.to_primary_query_params(key, context)

    def find_many(self, context: RequestContext) -> list[object]:
        if self.source is None:
            raise QueryError(f"Resource {self.name!r} has no record source.")
        return self.source.find_many(context.searcher)
