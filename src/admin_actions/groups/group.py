"""Group model — Pydantic v2 models for group-based authorization.

A group names a set of users (by id) and the resources and actions those
users may reach.  Resource grants and action grants are independent flags:
granting an action does not grant its resource, and the reverse.

Example
-------
>>> group = Group(name="Shipping", users="1,2")
>>> group.grant_action("Order", "Ship")
>>> group.has_resource_action_permission("Order", "Ship")
True
>>> group.has_resource_permission("Order")
False
"""
from __future__ import annotations

from dataclasses import dataclass, field

from pydantic import BaseModel, Field, field_validator

from admin_actions.errors import GroupValidationError
from admin_actions.utils import to_array


class ResourceGrant(BaseModel):
    """One group's grants on a single resource (or resource-less menu)."""

    allowed: bool = False
    actions: dict[str, bool] = Field(default_factory=dict)


class Group(BaseModel):
    """A named set of users sharing a resource/action allow-list.

    Attributes
    ----------
    name:
        Display name; must not be blank when saved.
    users:
        Ids of member users.  Accepts a list or a comma-separated string.
    resource_permissions:
        Grants keyed by resource or menu name.  Missing entries deny.
    """

    name: str
    users: list[str] = Field(default_factory=list)
    resource_permissions: dict[str, ResourceGrant] = Field(default_factory=dict)

    @field_validator("users", mode="before")
    @classmethod
    def split_users(cls, value: object) -> list[str]:
        return to_array(value)

    # ------------------------------------------------------------------
    # Membership
    # ------------------------------------------------------------------

    def set_users(self, value: object) -> None:
        """Replace members from a form value (list or comma string)."""
        self.users = to_array(value)

    def users_string(self) -> str:
        """Return members in their stored, comma-joined form."""
        return ",".join(self.users)

    def contains_user(self, user_id: str | None) -> bool:
        return user_id is not None and str(user_id) in self.users

    # ------------------------------------------------------------------
    # Grants
    # ------------------------------------------------------------------

    def has_resource_permission(self, resource_name: str) -> bool:
        grant = self.resource_permissions.get(resource_name)
        return grant is not None and grant.allowed

    def has_resource_action_permission(self, resource_name: str, action_name: str) -> bool:
        grant = self.resource_permissions.get(resource_name)
        return grant is not None and grant.actions.get(action_name, False)

    def grant_resource(self, resource_name: str, allowed: bool = True) -> None:
        grant = self.resource_permissions.setdefault(resource_name, ResourceGrant())
        grant.allowed = allowed

    def grant_action(self, resource_name: str, action_name: str, allowed: bool = True) -> None:
        grant = self.resource_permissions.setdefault(resource_name, ResourceGrant())
        grant.actions[action_name] = allowed

    def apply_resource_permissions(self, permissions: list[ResourcePermission]) -> None:
        """Replace all grants with the edited view-model snapshot."""
        self.resource_permissions = {
            rp.name: ResourceGrant(
                allowed=rp.allowed,
                actions={a.name: a.allowed for a in rp.actions},
            )
            for rp in permissions
        }

    def validate_for_save(self) -> None:
        """Raise :class:`GroupValidationError` if the group cannot be stored."""
        if not self.name.strip():
            raise GroupValidationError("name", "Group Name can't be blank")


@dataclass
class ResourceActionPermission:
    """Whether a group grants one action."""

    name: str
    allowed: bool


@dataclass
class ResourcePermission:
    """Whether a group grants one resource, plus its per-action grants."""

    name: str
    allowed: bool
    actions: list[ResourceActionPermission] = field(default_factory=list)
