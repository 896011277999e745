"""admin-actions — action authorization and dispatch for CRUD admin resources.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
>>> import admin_actions as aa
>>> admin = aa.Admin()
>>> orders = admin.add_resource("Order", source=aa.MemoryRecordSource([{"id": 1}]))
>>> ship = orders.action(aa.Action(name="Ship", handler=lambda arg: None))
>>> ship.is_allowed(aa.PermissionMode.UPDATE, admin.new_context(orders))
True
"""
from __future__ import annotations

__version__: str = "0.1.0"

# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------
from admin_actions.admin import Admin, RegistryPhase, UserLookup, register_group
from admin_actions.context import Pagination, RequestContext, Searcher

# ---------------------------------------------------------------------------
# Resources and actions
# ---------------------------------------------------------------------------
from admin_actions.resources.action import Action, ActionArgument
from admin_actions.resources.menu import Menu, self_menu_tree
from admin_actions.resources.resource import Resource, ResourceConfig

# ---------------------------------------------------------------------------
# Roles
# ---------------------------------------------------------------------------
from admin_actions.roles.permission import ANYONE, Permission, PermissionMode, allow, deny
from admin_actions.roles.registry import RoleRegistry

# ---------------------------------------------------------------------------
# Groups
# ---------------------------------------------------------------------------
from admin_actions.groups.catalog import gen_resource_list, resource_permissions_for
from admin_actions.groups.group import (
    Group,
    ResourceActionPermission,
    ResourceGrant,
    ResourcePermission,
)
from admin_actions.groups.store import GroupPermissionStore

# ---------------------------------------------------------------------------
# Collaborators
# ---------------------------------------------------------------------------
from admin_actions.query import MemoryRecordSource, Record, RecordSource
from admin_actions.routing import Route, RouteConfig, Router, RouteTable

# ---------------------------------------------------------------------------
# Dispatch and config
# ---------------------------------------------------------------------------
from admin_actions.dispatcher import (
    ActionController,
    ActionDispatcher,
    ActionRequest,
    ActionResponse,
)
from admin_actions.config import AdminConfig, ConfigLoader, build_admin
from admin_actions.errors import (
    AdminError,
    ConfigError,
    GroupValidationError,
    QueryError,
    RegistryClosedError,
    UnknownActionError,
    UnknownResourceError,
)

__all__ = [
    "__version__",
    # Registry
    "Admin",
    "Pagination",
    "RegistryPhase",
    "RequestContext",
    "Searcher",
    "UserLookup",
    "register_group",
    # Resources and actions
    "Action",
    "ActionArgument",
    "Menu",
    "Resource",
    "ResourceConfig",
    "self_menu_tree",
    # Roles
    "ANYONE",
    "Permission",
    "PermissionMode",
    "RoleRegistry",
    "allow",
    "deny",
    # Groups
    "Group",
    "GroupPermissionStore",
    "ResourceActionPermission",
    "ResourceGrant",
    "ResourcePermission",
    "gen_resource_list",
    "resource_permissions_for",
    # Collaborators
    "MemoryRecordSource",
    "Record",
    "RecordSource",
    "Route",
    "RouteConfig",
    "RouteTable",
    "Router",
    # Dispatch and config
    "ActionController",
    "ActionDispatcher",
    "ActionRequest",
    "ActionResponse",
    "AdminConfig",
    "ConfigLoader",
    "build_admin",
    # Errors
    "AdminError",
    "ConfigError",
    "GroupValidationError",
    "QueryError",
    "RegistryClosedError",
    "UnknownActionError",
    "UnknownResourceError",
]
