#!/usr/bin/env python3
"""Example: Quickstart — admin-actions

Register a resource with actions, enable group authorization and
dispatch a bulk action for two different users.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install admin-actions
"""
from __future__ import annotations

import admin_actions as aa


def ship_orders(argument: aa.ActionArgument) -> None:
    for order in argument.find_selected_records():
        order["state"] = "shipped"


def main() -> None:
    print(f"admin-actions version: {aa.__version__}")

    # Step 1: Register a resource and its actions
    rows = [{"id": 1, "state": "new"}, {"id": 2, "state": "new"}, {"id": 3, "state": "paid"}]
    admin = aa.Admin()
    orders = admin.add_resource("Order", source=aa.MemoryRecordSource(rows))
    orders.action(
        aa.Action(
            name="Ship",
            handler=ship_orders,
            visible=lambda record, ctx: record is None or record["state"] == "new",
        )
    )
    orders.action(
        aa.Action(
            name="Refund",
            handler=lambda argument: None,
            permission=aa.allow(aa.PermissionMode.UPDATE, "manager"),
        )
    )

    # Step 2: Turn on group authorization and grant Ship to one group
    aa.register_group(admin)
    shipping = aa.Group(name="Shipping", users=["7"])
    shipping.grant_action("Order", "Ship")
    admin.group_store.save(shipping)
    admin.seal()

    print("\nGroup permission catalog:")
    for entry in aa.gen_resource_list(admin):
        print(f"  {entry}")

    # Step 3: Dispatch for a member and a non-member
    dispatcher = aa.ActionDispatcher(admin)
    for user_id in ("7", "8"):
        response = dispatcher.dispatch(
            aa.ActionRequest(
                method="PUT",
                resource="Order",
                action="ship",
                primary_values=["1", "2"],
                context=admin.new_context(orders, user_id=user_id),
            )
        )
        print(f"\nuser {user_id}: {response.status} {response.message}")

    print(f"Order states: {[row['state'] for row in rows]}")

    # Step 4: Explicit permission overrides the group tier
    manager = admin.new_context(orders, roles=["manager"], user_id="8")
    refund = orders.get_action("Refund")
    print(f"\nmanager may refund: {refund.is_allowed(aa.PermissionMode.UPDATE, manager)}")


if __name__ == "__main__":
    main()
