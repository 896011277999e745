"""Action dispatch.

:class:`ActionDispatcher` runs one action invocation end to end:

1. resolve the resource and action (404 when unknown);
2. route-level guard :meth:`Action.has_permission` (403);
3. load the selected records;
4. :meth:`Action.is_allowed` on those records (403);
5. render the action form / link for GET, run the handler for PUT.

Handler exceptions become 422 responses and are logged; they are never
retried.

Example
-------
::

    dispatcher = ActionDispatcher(admin)
    response = dispatcher.dispatch(
        ActionRequest(method="PUT", resource="Order", action="ship",
                      primary_values=["1", "2"], context=admin.new_context("Order", roles=["manager"]))
    )
    response.status  # 200
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

from admin_actions.context import RequestContext
from admin_actions.errors import UnknownActionError, UnknownResourceError
from admin_actions.resources.action import Action, ActionArgument
from admin_actions.roles.permission import PermissionMode
from admin_actions.routing import RouteTable

if TYPE_CHECKING:
    from admin_actions.admin import Admin

logger = logging.getLogger(__name__)


@dataclass
class ActionRequest:
    """An incoming action invocation.

    Attributes
    ----------
    method:
        ``"GET"`` (render form or link) or ``"PUT"`` (run handler).
    resource:
        Name (or URL param) of the resource the action is registered on.
    action:
        Name (or URL param) of the action.
    primary_values:
        Selected record keys for a bulk invocation.
    record_id:
        Record key for a single-record invocation.
    context:
        Request context; a bare context is created when omitted.
    argument:
        Handler payload.
    """

    method: str
    resource: str
    action: str
    primary_values: list[str] = field(default_factory=list)
    record_id: str | None = None
    context: RequestContext | None = None
    argument: object = None


@dataclass
class ActionResponse:
    """Outcome of a dispatch, expressed as an HTTP-like status."""

    status: int
    message: str = ""
    url: str | None = None
    records: list[object] = field(default_factory=list)
    data: dict[str, object] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class ActionDispatcher:
    """Authorizes and invokes actions registered on an admin."""

    def __init__(self, admin: Admin) -> None:
        self._admin = admin

    def dispatch(self, request: ActionRequest) -> ActionResponse:
        """Look up the requested action and invoke it."""
        try:
            resource = self._admin.get_resource(request.resource)
            action = resource.get_action_by_param(request.action)
        except (UnknownResourceError, UnknownActionError) as exc:
            logger.info("Dispatch miss: %s", exc)
            return ActionResponse(status=404, message=str(exc))
        return self.invoke(action, request)

    def dispatch_path(
        self,
        method: str,
        path: str,
        context: RequestContext | None = None,
        primary_values: list[str] | None = None,
        argument: object = None,
    ) -> ActionResponse:
        """Match ``method``/``path`` against the admin's route table and invoke."""
        router = self._admin.router
        if not isinstance(router, RouteTable):
            raise TypeError("dispatch_path requires the admin to use a RouteTable router.")

        matched = router.match(method, path)
        if matched is None:
            return ActionResponse(status=404, message=f"No route for {method} {path}")
        route, params = matched
        controller = route.handler
        if not isinstance(controller, ActionController):
            return ActionResponse(status=404, message=f"{method} {path} is not an action route")

        action = controller.action
        record_id = next(iter(params.values()), None)
        request = ActionRequest(
            method=method,
            resource=action.belonged_resource.name if action.belonged_resource else "",
            action=action.name,
            primary_values=list(primary_values or []),
            record_id=record_id,
            context=context,
            argument=argument,
        )
        return controller(request)

    def invoke(self, action: Action, request: ActionRequest) -> ActionResponse:
        """Authorize and run ``action`` for ``request``."""
        context = self._bind_context(action, request.context)
        method = request.method.upper()

        if not action.has_permission(PermissionMode.UPDATE, context):
            logger.info("Action %s denied at route guard for roles=%s", action.name, context.roles)
            return ActionResponse(status=403, message="Permission denied")

        primary_values = list(request.primary_values)
        if not primary_values and request.record_id is not None:
            primary_values = [request.record_id]

        argument = ActionArgument(
            primary_values=primary_values,
            context=context,
            argument=request.argument,
        )
        records = argument.find_selected_records()

        if not action.is_allowed(PermissionMode.UPDATE, context, *records):
            logger.info("Action %s not allowed for roles=%s", action.name, context.roles)
            return ActionResponse(status=403, message="Permission denied")

        if method == "GET":
            return self._render(action, context, request, records)
        if method == "PUT":
            return self._run(action, argument, records)
        return ActionResponse(status=405, message=f"Method {method} not allowed")

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _bind_context(self, action: Action, context: RequestContext | None) -> RequestContext:
        resource = action.belonged_resource
        if context is None:
            return RequestContext(resource=resource, admin=self._admin)
        if context.resource is None or context.admin is None:
            return replace(
                context,
                resource=context.resource or resource,
                admin=context.admin or self._admin,
            )
        return context

    def _render(
        self,
        action: Action,
        context: RequestContext,
        request: ActionRequest,
        records: list[object],
    ) -> ActionResponse:
        if action.url is not None and records and request.record_id is not None:
            return ActionResponse(
                status=200, url=action.url_for(records[0], context), records=records
            )
        if action.resource is not None:
            return ActionResponse(
                status=200,
                message=action.label or action.name,
                records=records,
                data={"form_resource": action.resource.name, "open_type": action.url_open_type},
            )
        return ActionResponse(status=405, message=f"Action {action.name} has no GET view")

    def _run(
        self, action: Action, argument: ActionArgument, records: list[object]
    ) -> ActionResponse:
        if action.handler is None:
            return ActionResponse(status=405, message=f"Action {action.name} has no handler")

        try:
            action.handler(argument)
        except Exception as exc:
            logger.warning("Action %s failed: %s", action.name, exc)
            return ActionResponse(status=422, message=str(exc), records=records)

        if argument.skip_default_response:
            return ActionResponse(status=204, records=records)
        return ActionResponse(
            status=200,
            message=f"{action.label or action.name} succeeded",
            records=records,
        )


@dataclass
class ActionController:
    """Route handler bound to one action."""

    admin: Admin
    action: Action

    def __call__(self, request: ActionRequest) -> ActionResponse:
        return ActionDispatcher(self.admin).invoke(self.action, request)
