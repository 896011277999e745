"""Exception types raised by admin-actions.

Permission denial is never signalled with an exception; checks return
booleans and the dispatcher turns ``False`` into a 403 response.  The types
below cover registry misuse, lookups, validation and configuration.
"""
from __future__ import annotations


class AdminError(Exception):
    """Base class for all admin-actions errors."""


class RegistryClosedError(AdminError):
    """Raised when registering resources, menus or actions on a sealed admin."""

    def __init__(self, what: str) -> None:
        self.what = what
        super().__init__(f"Admin registry is sealed; cannot register {what}.")


class UnknownResourceError(AdminError, LookupError):
    """Raised when a resource name is not registered."""

    def __init__(self, resource_name: str) -> None:
        self.resource_name = resource_name
        super().__init__(f"Unknown resource {resource_name!r}.")


class UnknownActionError(AdminError, LookupError):
    """Raised when an action name is not registered on a resource."""

    def __init__(self, resource_name: str, action_name: str) -> None:
        self.resource_name = resource_name
        self.action_name = action_name
        super().__init__(
            f"Unknown action {action_name!r} on resource {resource_name!r}."
        )


class QueryError(AdminError):
    """Raised by a record source when a query cannot be executed."""


class GroupValidationError(AdminError, ValueError):
    """Raised when a group fails validation.

    Attributes
    ----------
    field:
        Name of the offending field.
    """

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(message)


class ConfigError(AdminError, ValueError):
    """Raised when an admin YAML config is malformed or invalid.

    Attributes
    ----------
    config_path:
        The path to the config file that caused the error, if known.
    """

    def __init__(self, message: str, config_path: str | None = None) -> None:
        self.config_path = config_path
        prefix = f"[{config_path}] " if config_path else ""
        super().__init__(f"{prefix}{message}")
