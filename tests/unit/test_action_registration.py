"""Unit tests for Resource.action — defaults, merging and route registration."""
from __future__ import annotations

import pytest

from admin_actions.admin import Admin
from admin_actions.dispatcher import ActionController
from admin_actions.query import MemoryRecordSource
from admin_actions.resources.action import Action
from admin_actions.resources.resource import Resource
from admin_actions.roles.permission import PermissionMode, allow
from admin_actions.routing import RouteTable


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


def _noop_handler(argument: object) -> None:
    return None


def _order_url(record: object, context: object) -> str:
    return f"/orders/{record['id']}/print"


@pytest.fixture()
def admin() -> Admin:
    return Admin()


@pytest.fixture()
def orders(admin: Admin) -> Resource:
    return admin.add_resource("Order", source=MemoryRecordSource([{"id": 1}, {"id": 2}]))


@pytest.fixture()
def invoices(admin: Admin) -> Resource:
    return admin.add_resource("Invoice", source=MemoryRecordSource())


def _route_keys(admin: Admin) -> list[tuple[str, str]]:
    router = admin.router
    assert isinstance(router, RouteTable)
    return [(r.method, r.path) for r in router.routes()]


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------


class TestRegistrationDefaults:
    def test_label_is_humanized_name(self, orders: Resource) -> None:
        action = orders.action(Action(name="MarkAsPaid"))
        assert action.label == "Mark As Paid"

    def test_explicit_label_kept(self, orders: Resource) -> None:
        action = orders.action(Action(name="Ship", label="Ship now"))
        assert action.label == "Ship now"

    def test_method_get_when_url_given(self, orders: Resource) -> None:
        action = orders.action(Action(name="Print", url=_order_url))
        assert action.method == "GET"

    def test_method_put_without_url(self, orders: Resource) -> None:
        action = orders.action(Action(name="Ship", handler=_noop_handler))
        assert action.method == "PUT"

    def test_open_type_bottomsheet_for_cross_resource(
        self, orders: Resource, invoices: Resource
    ) -> None:
        action = orders.action(Action(name="Invoice", resource=invoices, url=_order_url))
        assert action.url_open_type == "bottomsheet"

    def test_open_type_blank_for_get(self, orders: Resource) -> None:
        action = orders.action(Action(name="Print", url=_order_url))
        assert action.url_open_type == "_blank"

    def test_open_type_empty_for_put(self, orders: Resource) -> None:
        action = orders.action(Action(name="Ship", handler=_noop_handler))
        assert action.url_open_type == ""

    def test_belonged_resource_set(self, orders: Resource) -> None:
        action = orders.action(Action(name="Ship"))
        assert action.belonged_resource is orders

    def test_registration_order_kept(self, orders: Resource) -> None:
        orders.action(Action(name="Ship"))
        orders.action(Action(name="Cancel"))
        assert [a.name for a in orders.get_actions()] == ["Ship", "Cancel"]

    def test_to_param(self) -> None:
        assert Action(name="MarkAsPaid").to_param() == "mark-as-paid"


# ---------------------------------------------------------------------------
# Merging
# ---------------------------------------------------------------------------


class TestRegistrationMerge:
    def test_merge_keeps_unsupplied_fields(self, orders: Resource) -> None:
        permission = allow(PermissionMode.UPDATE, "manager")
        orders.action(
            Action(name="Ship", label="Ship it", handler=_noop_handler, permission=permission)
        )
        orders.action(Action(name="Ship", modes=["index"]))

        merged = orders.get_action("Ship")
        assert merged is not None
        assert merged.label == "Ship it"
        assert merged.handler is _noop_handler
        assert merged.permission is permission
        assert merged.modes == ["index"]

    def test_merge_overwrites_supplied_fields(self, orders: Resource) -> None:
        orders.action(Action(name="Ship", label="Old"))
        orders.action(Action(name="Ship", label="New", method="GET"))
        merged = orders.get_action("Ship")
        assert merged is not None
        assert merged.label == "New"
        assert merged.method == "GET"

    def test_merge_returns_existing_and_updates_caller(self, orders: Resource) -> None:
        first = orders.action(Action(name="Ship", label="Ship it", handler=_noop_handler))
        incoming = Action(name="Ship", modes=["show"])
        returned = orders.action(incoming)

        assert returned is first
        assert incoming.label == "Ship it"
        assert incoming.handler is _noop_handler
        assert incoming.modes == ["show"]
        assert incoming.belonged_resource is orders

    def test_merge_does_not_duplicate(self, orders: Resource) -> None:
        orders.action(Action(name="Ship"))
        orders.action(Action(name="Ship", label="Again"))
        assert len(orders.get_actions()) == 1

    def test_merged_method_uppercased(self, orders: Resource) -> None:
        orders.action(Action(name="Ship", handler=_noop_handler))
        incoming = Action(name="Ship", method="get")
        merged = orders.action(incoming)
        assert merged.method == "GET"
        assert incoming.method == "GET"

    def test_empty_modes_not_supplied(self, orders: Resource) -> None:
        orders.action(Action(name="Ship", modes=["index"]))
        orders.action(Action(name="Ship", modes=[]))
        merged = orders.get_action("Ship")
        assert merged is not None
        assert merged.modes == ["index"]

    def test_supplied_fields(self) -> None:
        action = Action(name="Ship", label="", handler=_noop_handler, modes=[])
        assert action.supplied_fields() == ["handler"]


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


class TestRegistrationRoutes:
    def test_handler_registers_put_routes(self, admin: Admin, orders: Resource) -> None:
        orders.action(Action(name="Ship", handler=_noop_handler))
        assert _route_keys(admin) == [
            ("PUT", "/order/!action/ship"),
            ("PUT", "/order/:order_id/ship"),
        ]

    def test_cross_resource_registers_get_routes(
        self, admin: Admin, orders: Resource, invoices: Resource
    ) -> None:
        orders.action(Action(name="Invoice", resource=invoices))
        assert _route_keys(admin) == [
            ("GET", "/order/!action/invoice"),
            ("GET", "/order/:order_id/invoice"),
        ]

    def test_cross_resource_with_handler_registers_both(
        self, admin: Admin, orders: Resource, invoices: Resource
    ) -> None:
        orders.action(Action(name="Invoice", resource=invoices, handler=_noop_handler))
        assert len(_route_keys(admin)) == 4

    def test_plain_url_action_registers_nothing(self, admin: Admin, orders: Resource) -> None:
        orders.action(Action(name="Print", url=_order_url))
        assert _route_keys(admin) == []

    def test_route_guard_is_action_with_update_mode(
        self, admin: Admin, orders: Resource
    ) -> None:
        action = orders.action(Action(name="Ship", handler=_noop_handler))
        router = admin.router
        assert isinstance(router, RouteTable)
        for route in router.routes():
            assert route.config.permissioner is action
            assert route.config.permission_mode is PermissionMode.UPDATE
            assert isinstance(route.handler, ActionController)

    def test_reregistration_adds_no_routes(self, admin: Admin, orders: Resource) -> None:
        orders.action(Action(name="Ship", handler=_noop_handler))
        orders.action(Action(name="Ship", handler=_noop_handler))
        assert len(_route_keys(admin)) == 2
