"""Unit tests for action permission resolution and the visibility gate."""
from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from admin_actions.admin import Admin
from admin_actions.groups.group import Group
from admin_actions.query import MemoryRecordSource
from admin_actions.resources.action import Action
from admin_actions.resources.resource import Resource, ResourceConfig
from admin_actions.roles.permission import PermissionMode, allow, deny

UPDATE = PermissionMode.UPDATE


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


def _build(group_enabled: bool, resource_permission=None) -> tuple[Admin, Resource]:
    admin = Admin()
    admin.set_group_enabled(group_enabled)
    orders = admin.add_resource(
        ResourceConfig(name="Order", permission=resource_permission),
        source=MemoryRecordSource([{"id": 1}, {"id": 2}]),
    )
    return admin, orders


@pytest.fixture()
def grouped() -> tuple[Admin, Resource]:
    return _build(group_enabled=True)


@pytest.fixture()
def ungrouped() -> tuple[Admin, Resource]:
    return _build(group_enabled=False, resource_permission=allow(PermissionMode.CRUD, "admin"))


def _shipping_group(users: list[str], grant_ship: bool = True) -> Group:
    group = Group(name="Shipping", users=users)
    if grant_ship:
        group.grant_action("Order", "Ship")
    return group


# ---------------------------------------------------------------------------
# Group tier
# ---------------------------------------------------------------------------


class TestGroupTier:
    def test_disabled_groups_always_pass(self, ungrouped: tuple[Admin, Resource]) -> None:
        admin, orders = ungrouped
        ship = orders.action(Action(name="Ship"))
        assert ship.has_group_permission(admin.new_context(orders, user_id="nobody"))

    def test_member_of_granting_group_passes(self, grouped: tuple[Admin, Resource]) -> None:
        admin, orders = grouped
        admin.group_store.save(_shipping_group(["7"]))
        ship = orders.action(Action(name="Ship"))
        assert ship.has_group_permission(admin.new_context(orders, user_id="7"))

    def test_non_member_fails(self, grouped: tuple[Admin, Resource]) -> None:
        admin, orders = grouped
        admin.group_store.save(_shipping_group(["7"]))
        ship = orders.action(Action(name="Ship"))
        assert not ship.has_group_permission(admin.new_context(orders, user_id="8"))

    def test_no_grant_fails(self, grouped: tuple[Admin, Resource]) -> None:
        admin, orders = grouped
        admin.group_store.save(_shipping_group(["7"], grant_ship=False))
        ship = orders.action(Action(name="Ship"))
        assert not ship.has_group_permission(admin.new_context(orders, user_id="7"))

    def test_skip_group_control_always_passes(self, grouped: tuple[Admin, Resource]) -> None:
        admin, orders = grouped
        cancel = orders.action(Action(name="Cancel", skip_group_control=True))
        assert cancel.has_group_permission(admin.new_context(orders, user_id="nobody"))
        assert cancel.has_group_permission(admin.new_context(orders))

    def test_skip_group_control_ignores_store(self, grouped: tuple[Admin, Resource]) -> None:
        admin, orders = grouped
        admin.group_store = MagicMock()
        cancel = orders.action(Action(name="Cancel", skip_group_control=True))
        assert cancel.has_group_permission(admin.new_context(orders))
        admin.group_store.action_allowed_by_group.assert_not_called()

    def test_lookup_uses_belonged_resource_name(self, grouped: tuple[Admin, Resource]) -> None:
        admin, orders = grouped
        invoices = admin.add_resource("Invoice", source=MemoryRecordSource())
        group = Group(name="Billing", users=["7"])
        group.grant_action("Order", "Invoice")
        admin.group_store.save(group)
        action = orders.action(Action(name="Invoice", resource=invoices))
        assert action.has_group_permission(admin.new_context(orders, user_id="7"))

    def test_group_state_read_from_owning_admin(self, grouped: tuple[Admin, Resource]) -> None:
        admin, orders = grouped
        admin.group_store.save(_shipping_group(["7"]))
        ship = orders.action(Action(name="Ship"))
        other = Admin()

        context = other.new_context(user_id="8")
        assert not ship.has_group_permission(context)
        context = other.new_context(user_id="7")
        assert ship.has_group_permission(context)

    def test_foreign_admin_with_groups_does_not_apply(
        self, ungrouped: tuple[Admin, Resource]
    ) -> None:
        _, orders = ungrouped
        ship = orders.action(Action(name="Ship"))
        other = Admin()
        other.set_group_enabled(True)
        assert ship.has_group_permission(other.new_context(user_id="nobody"))


# ---------------------------------------------------------------------------
# Explicit tier
# ---------------------------------------------------------------------------


class TestExplicitTier:
    def test_explicit_allow_overrides_group_deny(self, grouped: tuple[Admin, Resource]) -> None:
        admin, orders = grouped
        ship = orders.action(Action(name="Ship", permission=allow(UPDATE, "manager")))
        context = admin.new_context(orders, roles=["manager"], user_id="nobody")
        assert not ship.has_group_permission(context)
        assert ship.has_permission(UPDATE, context)
        assert ship.is_allowed(UPDATE, context)

    def test_explicit_deny_overrides_group_allow(self, grouped: tuple[Admin, Resource]) -> None:
        admin, orders = grouped
        admin.group_store.save(_shipping_group(["7"]))
        ship = orders.action(Action(name="Ship", permission=deny(UPDATE, "clerk")))
        context = admin.new_context(orders, roles=["clerk"], user_id="7")
        assert ship.has_group_permission(context)
        assert not ship.has_permission(UPDATE, context)
        assert not ship.is_allowed(UPDATE, context)

    def test_explicit_ignores_resource_permission(
        self, ungrouped: tuple[Admin, Resource]
    ) -> None:
        admin, orders = ungrouped
        ship = orders.action(Action(name="Ship", permission=allow(UPDATE, "clerk")))
        context = admin.new_context(orders, roles=["clerk"])
        assert not orders.has_permission(UPDATE, context)
        assert ship.is_allowed(UPDATE, context)

    def test_has_permission_without_explicit_is_group_tier(
        self, grouped: tuple[Admin, Resource]
    ) -> None:
        admin, orders = grouped
        admin.group_store.save(_shipping_group(["7"]))
        ship = orders.action(Action(name="Ship"))
        assert ship.has_permission(UPDATE, admin.new_context(orders, user_id="7"))
        assert not ship.has_permission(UPDATE, admin.new_context(orders, user_id="8"))

    def test_has_permission_is_repeatable(self, grouped: tuple[Admin, Resource]) -> None:
        admin, orders = grouped
        admin.group_store.save(_shipping_group(["7"]))
        ship = orders.action(Action(name="Ship"))
        context = admin.new_context(orders, user_id="7")
        assert ship.has_permission(UPDATE, context) == ship.has_permission(UPDATE, context)


# ---------------------------------------------------------------------------
# Resource tier
# ---------------------------------------------------------------------------


class TestResourceTier:
    def test_groups_disabled_reduces_to_resource_check(
        self, ungrouped: tuple[Admin, Resource]
    ) -> None:
        admin, orders = ungrouped
        ship = orders.action(Action(name="Ship"))
        for roles in (["admin"], ["clerk"], []):
            context = admin.new_context(orders, roles=roles)
            assert ship.is_allowed(UPDATE, context) == orders.has_permission(UPDATE, context)

    def test_resource_denial_applies(self, ungrouped: tuple[Admin, Resource]) -> None:
        admin, orders = ungrouped
        ship = orders.action(Action(name="Ship"))
        assert not ship.is_allowed(UPDATE, admin.new_context(orders, roles=["clerk"]))
        assert ship.is_allowed(UPDATE, admin.new_context(orders, roles=["admin"]))

    def test_groups_enabled_skips_resource_check(self) -> None:
        admin, orders = _build(group_enabled=True, resource_permission=deny(UPDATE, "clerk"))
        admin.group_store.save(_shipping_group(["7"]))
        ship = orders.action(Action(name="Ship"))
        context = admin.new_context(orders, roles=["clerk"], user_id="7")
        assert not orders.has_permission(UPDATE, context)
        assert ship.is_allowed(UPDATE, context)

    def test_no_context_resource_uses_group_result(
        self, ungrouped: tuple[Admin, Resource]
    ) -> None:
        admin, orders = ungrouped
        ship = orders.action(Action(name="Ship"))
        assert ship.is_allowed(UPDATE, admin.new_context(roles=["clerk"]))


# ---------------------------------------------------------------------------
# Visibility gate
# ---------------------------------------------------------------------------


class TestVisibility:
    def test_bulk_context_calls_visible_with_none(
        self, ungrouped: tuple[Admin, Resource]
    ) -> None:
        admin, orders = ungrouped
        visible = MagicMock(return_value=True)
        ship = orders.action(Action(name="Ship", visible=visible))
        context = admin.new_context(orders, roles=["admin"])
        assert ship.is_allowed(UPDATE, context)
        visible.assert_called_once_with(None, context)

    def test_called_once_per_record(self, ungrouped: tuple[Admin, Resource]) -> None:
        admin, orders = ungrouped
        visible = MagicMock(return_value=True)
        ship = orders.action(Action(name="Ship", visible=visible))
        context = admin.new_context(orders, roles=["admin"])
        assert ship.is_allowed(UPDATE, context, {"id": 1}, {"id": 2})
        assert visible.call_count == 2

    def test_any_hidden_record_denies(self, ungrouped: tuple[Admin, Resource]) -> None:
        admin, orders = ungrouped
        ship = orders.action(
            Action(name="Ship", visible=lambda record, ctx: record["id"] != 2)
        )
        context = admin.new_context(orders, roles=["admin"])
        assert ship.is_allowed(UPDATE, context, {"id": 1})
        assert not ship.is_allowed(UPDATE, context, {"id": 1}, {"id": 2})

    def test_hidden_skips_permission_checks(self, ungrouped: tuple[Admin, Resource]) -> None:
        admin, orders = ungrouped
        permission = MagicMock()
        permission.has_permission.return_value = True
        ship = orders.action(
            Action(name="Ship", visible=lambda record, ctx: False, permission=permission)
        )
        assert not ship.is_allowed(UPDATE, admin.new_context(orders, roles=["admin"]))
        permission.has_permission.assert_not_called()

    def test_hidden_beats_explicit_allow(self, grouped: tuple[Admin, Resource]) -> None:
        admin, orders = grouped
        ship = orders.action(
            Action(
                name="Ship",
                visible=lambda record, ctx: False,
                permission=allow(UPDATE, "manager"),
            )
        )
        assert not ship.is_allowed(UPDATE, admin.new_context(orders, roles=["manager"]))


# ---------------------------------------------------------------------------
# Resource.allowed_actions
# ---------------------------------------------------------------------------


class TestAllowedActions:
    def test_filters_by_mode_and_permission(self, ungrouped: tuple[Admin, Resource]) -> None:
        admin, orders = ungrouped
        orders.action(Action(name="Ship", modes=["index"]))
        orders.action(Action(name="Print", modes=["show"]))
        orders.action(Action(name="Audit", permission=allow(UPDATE, "auditor")))
        context = admin.new_context(orders, roles=["admin"])
        assert [a.name for a in orders.allowed_actions("index", context)] == ["Ship"]
