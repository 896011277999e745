"""Router collaborator contract and an in-memory route table.

Resources register their routes through a :class:`Router`.  The bundled
:class:`RouteTable` keeps routes in registration order, replaces a route
registered twice under the same method and path, and can match an incoming
``(method, path)`` pair back to its route.

Route paths use ``:name`` segments for parameters::

    /orders/!action/ship
    /orders/:order_id/ship
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Protocol

from admin_actions.roles.permission import PermissionMode

if TYPE_CHECKING:
    from admin_actions.context import RequestContext

logger = logging.getLogger(__name__)


class Permissioner(Protocol):
    """Anything that can answer a route-level permission check."""

    def has_permission(self, mode: PermissionMode, context: RequestContext) -> bool:
        ...


@dataclass
class RouteConfig:
    """Guard attached to a route."""

    permissioner: Permissioner | None = None
    permission_mode: PermissionMode = PermissionMode.READ


@dataclass
class Route:
    """A registered route."""

    method: str
    path: str
    handler: Callable[..., object]
    config: RouteConfig = field(default_factory=RouteConfig)

    @property
    def segments(self) -> list[str]:
        return [s for s in self.path.split("/") if s]

    def match(self, method: str, path: str) -> dict[str, str] | None:
        """Return captured parameters if ``method``/``path`` hit this route."""
        if method.upper() != self.method:
            return None
        parts = [s for s in path.split("?")[0].split("/") if s]
        if len(parts) != len(self.segments):
            return None

        params: dict[str, str] = {}
        for pattern, part in zip(self.segments, parts):
            if pattern.startswith(":"):
                params[pattern[1:]] = part
            elif pattern != part:
                return None
        return params

    def is_authorized(self, context: RequestContext) -> bool:
        """Evaluate the route's permissioner; routes without one are open."""
        if self.config.permissioner is None:
            return True
        return self.config.permissioner.has_permission(
            self.config.permission_mode, context
        )


class Router(Protocol):
    """Router collaborator used during registration."""

    def register_route(
        self,
        method: str,
        path: str,
        handler: Callable[..., object],
        config: RouteConfig | None = None,
    ) -> None:
        ...


class RouteTable:
    """Thread-safe in-memory :class:`Router`."""

    def __init__(self) -> None:
        self._routes: list[Route] = []
        self._lock = threading.Lock()

    def register_route(
        self,
        method: str,
        path: str,
        handler: Callable[..., object],
        config: RouteConfig | None = None,
    ) -> None:
        route = Route(
            method=method.upper(),
            path="/" + path.strip("/"),
            handler=handler,
            config=config or RouteConfig(),
        )
        with self._lock:
            for index, existing in enumerate(self._routes):
                if existing.method == route.method and existing.path == route.path:
                    logger.debug("Replacing route %s %s", route.method, route.path)
                    self._routes[index] = route
                    return
            self._routes.append(route)
        logger.debug("Registered route %s %s", route.method, route.path)

    def routes(self) -> list[Route]:
        with self._lock:
            return list(self._routes)

    def match(self, method: str, path: str) -> tuple[Route, dict[str, str]] | None:
        """Return the first route matching the request, with its parameters.

        Literal segments win over parameter segments, so ``!action/ship``
        is never captured by ``:id/ship``.
        """
        with self._lock:
            routes = list(self._routes)
        candidates: list[tuple[int, Route, dict[str, str]]] = []
        for route in routes:
            params = route.match(method, path)
            if params is not None:
                candidates.append((len(params), route, params))
        if not candidates:
            return None
        candidates.sort(key=lambda c: c[0])
        _, route, params = candidates[0]
        return route, params

    def __len__(self) -> int:
        return len(self._routes)
