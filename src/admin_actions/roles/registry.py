"""Named role checkers.

A role is granted to an actor when its checker returns True for the
current request and user.  Checkers are registered once at startup.

Example
-------
::

    registry = RoleRegistry()
    registry.register("admin", lambda request, user: getattr(user, "is_admin", False))
    registry.matched_roles(request, current_user)  # ["admin"]
"""
from __future__ import annotations

import logging
import threading
from typing import Callable

logger = logging.getLogger(__name__)

RoleChecker = Callable[[object, object], bool]


class RoleRegistry:
    """Thread-safe mapping of role names to checker callables."""

    def __init__(self) -> None:
        self._checkers: dict[str, RoleChecker] = {}
        self._lock = threading.Lock()

    def register(self, name: str, checker: RoleChecker) -> None:
        """Register (or replace) the checker for role ``name``."""
        if not name:
            raise ValueError("Role name must not be empty.")
        with self._lock:
            if name in self._checkers:
                logger.info("Role %r re-registered; replacing checker", name)
            self._checkers[name] = checker

    def remove(self, name: str) -> None:
        with self._lock:
            self._checkers.pop(name, None)

    def get(self, name: str) -> RoleChecker | None:
        return self._checkers.get(name)

    def matched_roles(self, request: object, user: object) -> list[str]:
        """Return names of all roles whose checker accepts ``(request, user)``.

        Roles are returned in registration order.
        """
        with self._lock:
            checkers = list(self._checkers.items())
        return [name for name, checker in checkers if checker(request, user)]

    def __len__(self) -> int:
        return len(self._checkers)
