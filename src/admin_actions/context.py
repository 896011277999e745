"""Per-request ambient state.

A :class:`RequestContext` is built by the web layer for each request and
handed to permission checks, visibility predicates and action handlers.
It is never shared between requests.
"""
from __future__ import annotations

import copy
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

from admin_actions.errors import QueryError

if TYPE_CHECKING:
    from admin_actions.admin import Admin
    from admin_actions.resources.resource import Resource


@dataclass
class Pagination:
    """Paging state; ``current_page == -1`` disables paging."""

    current_page: int = 1
    per_page: int = 20


@dataclass
class Searcher:
    """Accumulated query conditions for one lookup."""

    conditions: list[tuple[str, list[object]]] = field(default_factory=list)
    pagination: Pagination = field(default_factory=Pagination)

    def where(self, predicate: str, params: list[object] | None = None) -> Searcher:
        """Append a condition and return ``self``."""
        self.conditions.append((predicate, list(params or [])))
        return self


@dataclass
class RequestContext:
    """Ambient request and actor state.

    Attributes
    ----------
    roles:
        Roles the current actor holds for this request.
    user_id:
        Identifier of the current actor, used for group membership.
    current_user:
        The actor object itself, if the web layer has one.
    resource:
        Resource the request targets.
    admin:
        Admin registry serving the request.
    searcher:
        Query conditions accumulated for this request.
    request:
        The raw framework request, opaque to this package.
    """

    roles: list[str] = field(default_factory=list)
    user_id: str | None = None
    current_user: object = None
    resource: Resource | None = None
    admin: Admin | None = None
    searcher: Searcher = field(default_factory=Searcher)
    request: object = None

    def clone(self) -> RequestContext:
        """Return a copy whose searcher can be changed independently."""
        return replace(self, roles=list(self.roles), searcher=copy.deepcopy(self.searcher))

    def find_many(self) -> list[object]:
        """Run this context's searcher against the resource's record source."""
        if self.resource is None:
            raise QueryError("Context has no resource to query.")
        return self.resource.find_many(self)
