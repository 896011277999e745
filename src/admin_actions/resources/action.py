"""Actions: named bulk or single-record operations on a resource.

Permission for an action is resolved in three tiers:

1. **Group tier.**  When group authorization is enabled on the admin, an
   action passes only if one of the actor's groups grants
   ``(belonged resource, action)``, unless the action sets
   ``skip_group_control``.  When groups are disabled this tier passes.
2. **Explicit tier.**  An action ``permission`` overrides the group tier
   entirely, in both directions.
3. **Resource tier.**  Without an explicit permission and with groups
   disabled, the owning resource's own permission decides.  With groups
   enabled the resource is not consulted again: a group grant on the
   action already implies the resource is reachable.

:meth:`Action.is_allowed` runs the ``visible`` predicate before any of
this; a hidden action is never allowed.

Example
-------
::

    ship = orders.action(Action(name="Ship", handler=ship_orders))
    ship.is_allowed(PermissionMode.UPDATE, context, order)
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from typing import TYPE_CHECKING, Callable

from admin_actions.roles.permission import Permission, PermissionMode
from admin_actions.utils import to_param_string

if TYPE_CHECKING:
    from admin_actions.admin import Admin
    from admin_actions.context import RequestContext
    from admin_actions.resources.resource import Resource

logger = logging.getLogger(__name__)

# Fields copied onto an existing action when the same name is registered again.
MERGEABLE_FIELDS: tuple[str, ...] = (
    "label",
    "method",
    "url",
    "url_open_type",
    "visible",
    "handler",
    "modes",
    "resource",
    "permission",
)


@dataclass
class ActionArgument:
    """Arguments handed to an action handler for one invocation.

    Attributes
    ----------
    primary_values:
        Primary keys of the records the action targets.
    context:
        The request context.
    argument:
        Handler-specific payload (typically decoded form data).
    skip_default_response:
        Set by the handler to suppress the dispatcher's default response.
    """

    primary_values: list[str] = field(default_factory=list)
    context: RequestContext | None = None
    argument: object = None
    skip_default_response: bool = False

    def find_selected_records(self) -> list[object]:
        """Load the records identified by ``primary_values``.

        Builds one primary-key predicate per value, ORs them together and
        fetches every match without pagination.  Returns an empty list,
        without querying, when no primary values were given.  Any error
        raised while querying is logged and yields an empty list.
        """
        if not self.primary_values:
            return []

        context = self.context
        resource = context.resource if context is not None else None
        if resource is None:
            logger.warning(
                "Cannot resolve %d selected records: context has no resource",
                len(self.primary_values),
            )
            return []

        predicates: list[str] = []
        params: list[object] = []
        clone = context.clone()
        try:
            for primary_value in self.primary_values:
                predicate, predicate_params = resource.to_primary_query_params(
                    primary_value, context
                )
                predicates.append(predicate)
                params.extend(predicate_params)

            clone.searcher.where(" OR ".join(predicates), params)
            clone.searcher.pagination.current_page = -1
            results = clone.find_many()
        except Exception as exc:
            logger.warning(
                "Selected record lookup failed for resource=%s keys=%s: %s",
                resource.name,
                self.primary_values,
                exc,
            )
            return []
        return list(results)


@dataclass(eq=False)
class Action:
    """Definition of an action.

    Fields left as ``None`` (or empty) count as not supplied: they receive
    defaults on first registration and are left untouched when the action
    is registered again under the same name.

    Attributes
    ----------
    name:
        Unique within the resource the action is registered on.
    label:
        Display label; defaults to a humanized ``name``.
    method:
        ``"GET"`` or ``"PUT"``; defaults to ``"GET"`` when ``url`` is set.
    url:
        ``(record, context) -> str`` for link-style actions.
    url_open_type:
        Display hint for the link target.
    visible:
        ``(record, context) -> bool``; ``record`` is ``None`` in bulk context.
    handler:
        ``(ActionArgument) -> None``; raises to report failure.
    modes:
        Contexts the action appears in (``"index"``, ``"show"``, ``"edit"``...).
    resource:
        Set when the action operates on a different resource.
    permission:
        Explicit permission; overrides group authorization when present.
    skip_group_control:
        Exempts the action from group authorization.
    belonged_resource:
        Resource the action is registered under.
    """

    name: str
    label: str | None = None
    method: str | None = None
    url: Callable[[object, RequestContext], str] | None = None
    url_open_type: str | None = None
    visible: Callable[[object, RequestContext], bool] | None = None
    handler: Callable[[ActionArgument], None] | None = None
    modes: list[str] | None = None
    resource: Resource | None = None
    permission: Permission | None = None
    skip_group_control: bool = False
    belonged_resource: Resource | None = field(default=None, repr=False)

    # ------------------------------------------------------------------
    # Registration helpers
    # ------------------------------------------------------------------

    def supplied_fields(self) -> list[str]:
        """Return the mergeable fields this definition actually sets."""
        supplied: list[str] = []
        for name in MERGEABLE_FIELDS:
            value = getattr(self, name)
            if value is None or value == "" or (name == "modes" and not value):
                continue
            supplied.append(name)
        return supplied

    def merge_from(self, other: Action) -> None:
        """Copy every supplied field of ``other`` onto this action."""
        for name in other.supplied_fields():
            setattr(self, name, getattr(other, name))
        if self.method:
            self.method = self.method.upper()

    def copy_into(self, target: Action) -> None:
        """Overwrite every field of ``target`` with this action's values."""
        for f in fields(self):
            setattr(target, f.name, getattr(self, f.name))

    def to_param(self) -> str:
        """Return the URL parameter form of the action name."""
        return to_param_string(self.name)

    def has_mode(self, mode: str) -> bool:
        """Return True if the action appears in ``mode``; no modes means all."""
        return not self.modes or mode in self.modes

    @property
    def is_bulk(self) -> bool:
        """True when the action operates on another resource's records."""
        return self.resource is not None

    # ------------------------------------------------------------------
    # Authorization
    # ------------------------------------------------------------------

    def _owning_admin(self, context: RequestContext | None = None) -> Admin | None:
        # the admin the action is registered on; the context's only as fallback
        if self.belonged_resource is not None:
            return self.belonged_resource.get_admin()
        return context.admin if context is not None else None

    def _group_enabled(self, context: RequestContext | None = None) -> bool:
        admin = self._owning_admin(context)
        return admin is not None and admin.is_group_enabled()

    def has_group_permission(self, context: RequestContext) -> bool:
        """Return the group-tier decision for the current actor.

        The group switch and the group store are both read from the admin
        owning :attr:`belonged_resource`.
        """
        admin = self._owning_admin(context)
        if admin is None or not admin.is_group_enabled():
            return True
        if self.skip_group_control:
            return True

        resource = self.belonged_resource
        if resource is None:
            logger.debug("Action %r is not registered; group tier denies", self.name)
            return False
        return admin.group_store.action_allowed_by_group(context, resource.name, self.name)

    def has_permission(self, mode: PermissionMode, context: RequestContext) -> bool:
        """Route-level check: group tier, then explicit permission override.

        Pure with respect to ``(context, action)``; calling it more than
        once per request always yields the same answer.
        """
        result = self.has_group_permission(context)

        if self.permission is not None:
            result = self.permission.has_permission(mode, *context.roles)

        logger.debug(
            "Action permission: action=%s mode=%s roles=%s result=%s",
            self.name,
            mode.value,
            context.roles,
            result,
        )
        return result

    def is_visible(self, context: RequestContext, *records: object) -> bool:
        """Evaluate ``visible`` once without a record, or once per record."""
        if self.visible is None:
            return True
        if not records:
            return bool(self.visible(None, context))
        return all(self.visible(record, context) for record in records)

    def is_allowed(
        self, mode: PermissionMode, context: RequestContext, *records: object
    ) -> bool:
        """Return True if the actor may see and invoke this action."""
        if not self.is_visible(context, *records):
            return False

        result = self.has_group_permission(context)

        if self.permission is not None:
            return self.has_permission(mode, context)

        if context.resource is not None and not self._group_enabled(context):
            return context.resource.has_permission(mode, context)

        return result

    def url_for(self, record: object, context: RequestContext) -> str | None:
        """Return the action's link for ``record``, if it has one."""
        if self.url is None:
            return None
        return self.url(record, context)
