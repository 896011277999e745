"""Query collaborator contract and an in-memory reference source.

Resources never load data themselves; they delegate to a
:class:`RecordSource`, which knows how to build a primary-key predicate and
how to run a :class:`~admin_actions.context.Searcher` against its storage.

Predicates are opaque strings with ``?`` placeholders, paired with a
positional parameter list, so SQL-backed sources can pass them straight
to their driver.

Example
-------
>>> source = MemoryRecordSource([{"id": 1, "state": "new"}, {"id": 2, "state": "paid"}])
>>> source.to_primary_query_params("2", None)
('id = ?', ['2'])
"""
from __future__ import annotations

import logging
import re
import threading
from typing import TYPE_CHECKING, Iterable, Protocol, runtime_checkable

from admin_actions.errors import QueryError

if TYPE_CHECKING:
    from admin_actions.context import RequestContext, Searcher

logger = logging.getLogger(__name__)

_EQUALS_PREDICATE = re.compile(r"^\s*\(?\s*(\w+)\s*=\s*\?\s*\)?\s*$")


@runtime_checkable
class Record(Protocol):
    """Capability every admin-managed record can expose."""

    def primary_key(self) -> str:
        """Return the record's primary key in string form."""
        ...

    @property
    def record_type(self) -> str:
        """Return the name of the record's type."""
        ...


class RecordSource(Protocol):
    """Query collaborator used by resources."""

    def to_primary_query_params(
        self, key: str, context: RequestContext | None
    ) -> tuple[str, list[object]]:
        """Return ``(predicate, params)`` selecting the record with ``key``."""
        ...

    def find_many(self, searcher: Searcher) -> list[object]:
        """Run ``searcher`` and return matching records.

        Raises
        ------
        QueryError
            When the query cannot be executed.
        """
        ...


def primary_value(record: object, primary_field: str = "id") -> str:
    """Extract a record's primary key as a string.

    Uses :meth:`Record.primary_key` when available, then mapping access,
    then attribute access.
    """
    if isinstance(record, Record):
        return str(record.primary_key())
    if isinstance(record, dict):
        return str(record.get(primary_field))
    return str(getattr(record, primary_field, None))


class MemoryRecordSource:
    """List-backed :class:`RecordSource`.

    Understands predicates of the form ``field = ?`` joined with ``OR``.
    Each searcher condition must match (AND semantics across conditions).

    Parameters
    ----------
    records:
        Initial records (dicts, dataclasses, or :class:`Record` objects).
    primary_field:
        Field holding the primary key.
    """

    def __init__(
        self,
        records: Iterable[object] | None = None,
        primary_field: str = "id",
    ) -> None:
        self._records: list[object] = list(records or [])
        self._primary_field = primary_field
        self._lock = threading.Lock()

    def add(self, record: object) -> None:
        with self._lock:
            self._records.append(record)

    def all(self) -> list[object]:
        with self._lock:
            return list(self._records)

    def to_primary_query_params(
        self, key: str, context: RequestContext | None
    ) -> tuple[str, list[object]]:
        return f"{self._primary_field} = ?", [key]

    def find_many(self, searcher: Searcher) -> list[object]:
        matchers = [
            self._compile(predicate, params) for predicate, params in searcher.conditions
        ]
        with self._lock:
            records = [
                r for r in self._records if all(m(r) for m in matchers)
            ]

        page = searcher.pagination.current_page
        if page == -1:
            return records
        per_page = searcher.pagination.per_page
        start = (max(page, 1) - 1) * per_page
        return records[start : start + per_page]

    def _compile(self, predicate: str, params: list[object]):
        clauses = re.split(r"\s+OR\s+", predicate.strip(), flags=re.IGNORECASE)
        if len(clauses) != len(params):
            raise QueryError(
                f"Predicate {predicate!r} expects {len(clauses)} params; got {len(params)}."
            )

        wanted: list[tuple[str, str]] = []
        for clause, param in zip(clauses, params):
            match = _EQUALS_PREDICATE.match(clause)
            if match is None:
                raise QueryError(f"Unsupported predicate clause: {clause!r}")
            wanted.append((match.group(1), str(param)))

        def matcher(record: object) -> bool:
            return any(
                primary_value(record, field) == value for field, value in wanted
            )

        return matcher
