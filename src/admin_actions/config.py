"""Admin configuration loader with Pydantic v2 validation.

Loads an ``admin.yaml`` file describing resources, their actions, menus
and groups, and builds an :class:`~admin_actions.admin.Admin` from it.
Unknown keys are allowed to support future schema additions.

Schema
------
::

    version: "1"
    group_enabled: true
    resources:
      - name: Order
        permission: {allow: {crud: [admin]}}
        records: [{id: 1}, {id: 2}]
        actions:
          - name: Ship
            permission: {allow: {update: [manager]}}
          - {name: Cancel, skip_group_control: true}
    menus:
      - {name: Reports, children: [{name: Daily}]}
    groups:
      - name: Shipping
        users: "1,2"
        resource_permissions:
          Order: {allowed: false, actions: {Ship: true}}

Example
-------
>>> config = ConfigLoader().load(Path("admin.yaml"))
>>> admin = build_admin(config)
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Mapping

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from admin_actions.admin import Admin, register_group
from admin_actions.errors import ConfigError
from admin_actions.groups.group import Group, ResourceGrant
from admin_actions.query import MemoryRecordSource, RecordSource
from admin_actions.resources.action import Action, ActionArgument
from admin_actions.resources.menu import Menu
from admin_actions.resources.resource import ResourceConfig
from admin_actions.roles.permission import Permission, PermissionMode
from admin_actions.utils import to_array

logger = logging.getLogger(__name__)

_SUPPORTED_VERSIONS: frozenset[str] = frozenset(["1", "1.0"])

ActionHandler = Callable[[ActionArgument], None]


class PermissionSpec(BaseModel):
    """Role lists per mode, e.g. ``{"allow": {"update": ["manager"]}}``."""

    model_config = {"extra": "forbid"}

    allow: dict[str, list[str]] = Field(default_factory=dict)
    deny: dict[str, list[str]] = Field(default_factory=dict)

    @field_validator("allow", "deny")
    @classmethod
    def validate_modes(cls, value: dict[str, list[str]]) -> dict[str, list[str]]:
        valid = {m.value for m in PermissionMode}
        for mode in value:
            if mode.lower() not in valid:
                raise ValueError(f"Unknown permission mode '{mode}'. Valid: {sorted(valid)}")
        return value

    def to_permission(self) -> Permission:
        return Permission.from_dict({"allow": self.allow, "deny": self.deny})


class ActionSpec(BaseModel):
    """An action declared in config."""

    model_config = {"extra": "allow"}

    name: str
    label: str | None = None
    method: str | None = None
    modes: list[str] = Field(default_factory=list)
    target_resource: str | None = None
    skip_group_control: bool = False
    permission: PermissionSpec | None = None

    @field_validator("method")
    @classmethod
    def validate_method(cls, value: str | None) -> str | None:
        if value is not None and value.upper() not in {"GET", "PUT"}:
            raise ValueError(f"Action method must be GET or PUT, got {value!r}")
        return value.upper() if value else value


class ResourceSpec(BaseModel):
    """A resource declared in config."""

    model_config = {"extra": "allow"}

    name: str
    invisible: bool = False
    skip_group_control: bool = False
    permission: PermissionSpec | None = None
    menu: list[str] = Field(default_factory=list)
    primary_field: str = "id"
    records: list[dict[str, object]] = Field(default_factory=list)
    actions: list[ActionSpec] = Field(default_factory=list)


class MenuSpec(BaseModel):
    """A resource-less menu node."""

    model_config = {"extra": "allow"}

    name: str
    link: str = ""
    invisible: bool = False
    children: list[MenuSpec] = Field(default_factory=list)

    def to_menu(self) -> Menu:
        return Menu(
            name=self.name,
            link=self.link,
            invisible=self.invisible,
            sub_menus=[child.to_menu() for child in self.children],
        )


class GroupSpec(BaseModel):
    """A group declared in config."""

    model_config = {"extra": "allow"}

    name: str
    users: list[str] = Field(default_factory=list)
    resource_permissions: dict[str, ResourceGrant] = Field(default_factory=dict)

    @field_validator("users", mode="before")
    @classmethod
    def split_users(cls, value: object) -> list[str]:
        return to_array(value)


class AdminConfig(BaseModel):
    """Top-level admin configuration schema.

    All sections are optional and fall back to empty defaults.
    """

    model_config = {"extra": "allow"}

    version: str = Field(default="1")
    group_enabled: bool = Field(default=False)
    resources: list[ResourceSpec] = Field(default_factory=list)
    menus: list[MenuSpec] = Field(default_factory=list)
    groups: list[GroupSpec] = Field(default_factory=list)

    @field_validator("version", mode="before")
    @classmethod
    def validate_version(cls, value: object) -> str:
        version = str(value)
        if version not in _SUPPORTED_VERSIONS:
            raise ValueError(
                f"Unsupported config version {version!r}. Supported: {sorted(_SUPPORTED_VERSIONS)}."
            )
        return version


class ConfigLoader:
    """Loads and validates admin YAML configuration.

    Example
    -------
    >>> loader = ConfigLoader()
    >>> config = loader.load(Path("admin.yaml"))
    """

    def load(self, config_path: str | Path) -> AdminConfig:
        """Load and validate an admin YAML file.

        Raises
        ------
        FileNotFoundError:
            When the config file does not exist.
        ConfigError:
            When the YAML cannot be parsed or fails validation.
        """
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Admin config not found: {config_path}")

        with config_path.open("r", encoding="utf-8") as fh:
            text = fh.read()
        return self.load_string(text, config_path=str(config_path))

    def load_string(self, yaml_content: str, config_path: str | None = None) -> AdminConfig:
        """Load and validate a YAML string directly."""
        try:
            raw = yaml.safe_load(yaml_content) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse YAML: {exc}", config_path) from exc
        return self.load_from_dict(raw, config_path=config_path)

    def load_from_dict(
        self, raw: object, config_path: str | None = None
    ) -> AdminConfig:
        """Validate an already-parsed config mapping."""
        if not isinstance(raw, dict):
            raise ConfigError("Admin config must be a YAML mapping (dict).", config_path)
        try:
            config = AdminConfig.model_validate(raw)
        except ValidationError as exc:
            raise ConfigError(str(exc), config_path) from exc

        logger.info(
            "Loaded admin config from %s: %d resources, %d groups",
            config_path or "<dict>",
            len(config.resources),
            len(config.groups),
        )
        return config

    def defaults(self) -> AdminConfig:
        """Return a default configuration with all defaults applied."""
        return AdminConfig()


def build_admin(
    config: AdminConfig,
    sources: Mapping[str, RecordSource] | None = None,
    handlers: Mapping[tuple[str, str], ActionHandler] | None = None,
    admin: Admin | None = None,
) -> Admin:
    """Register everything described by ``config`` on a (new) admin.

    Parameters
    ----------
    config:
        Validated configuration.
    sources:
        Record sources by resource name.  Resources without one get a
        :class:`MemoryRecordSource` seeded from their ``records``.
    handlers:
        Action handlers keyed by ``(resource_name, action_name)``.
    admin:
        Admin to register on; a new one is created when omitted.

    Returns
    -------
    Admin
        The admin, still open for further registration.

    Raises
    ------
    ConfigError
        If an action targets an unknown resource.
    """
    admin = admin if admin is not None else Admin()
    sources = sources or {}
    handlers = handlers or {}

    for spec in config.resources:
        source = sources.get(spec.name) or MemoryRecordSource(
            spec.records, primary_field=spec.primary_field
        )
        admin.add_resource(
            ResourceConfig(
                name=spec.name,
                invisible=spec.invisible,
                skip_group_control=spec.skip_group_control,
                permission=spec.permission.to_permission() if spec.permission else None,
                menu=tuple(spec.menu),
            ),
            source=source,
        )

    # Actions go second so cross-resource targets can be declared in any order.
    for spec in config.resources:
        resource = admin.get_resource(spec.name)
        for action_spec in spec.actions:
            target = None
            if action_spec.target_resource:
                target = admin.find_resource(action_spec.target_resource)
                if target is None:
                    raise ConfigError(
                        f"Action {spec.name}.{action_spec.name} targets unknown "
                        f"resource {action_spec.target_resource!r}."
                    )
            resource.action(
                Action(
                    name=action_spec.name,
                    label=action_spec.label,
                    method=action_spec.method,
                    modes=list(action_spec.modes) or None,
                    resource=target,
                    permission=(
                        action_spec.permission.to_permission() if action_spec.permission else None
                    ),
                    skip_group_control=action_spec.skip_group_control,
                    handler=handlers.get((spec.name, action_spec.name)),
                )
            )

    for menu_spec in config.menus:
        admin.add_menu(menu_spec.to_menu())

    if config.group_enabled:
        register_group(admin)

    for group_spec in config.groups:
        admin.group_store.save(
            Group(
                name=group_spec.name,
                users=group_spec.users,
                resource_permissions=group_spec.resource_permissions,
            )
        )

    return admin
