"""Record store capability consumed by the tool handlers.

The gateway only reads. Queries are limited to conjunctive filters drawn from
a closed operator set, a single ordering column and a row limit.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Literal, Protocol, runtime_checkable

from fareway.foundation.errors import RecordNotFound, StoreError

Row = dict[str, Any]
FilterOp = Literal["eq", "ilike", "gte", "lte"]


@dataclass(frozen=True, slots=True)
class Filter:
    """One predicate on a column. ``ilike`` is a case-insensitive substring match."""

    field: str
    op: FilterOp
    value: Any

    @classmethod
    def eq(cls, field: str, value: Any) -> Filter:
        return cls(field, "eq", value)

    @classmethod
    def ilike(cls, field: str, value: str) -> Filter:
        return cls(field, "ilike", value)

    @classmethod
    def gte(cls, field: str, value: Any) -> Filter:
        return cls(field, "gte", value)

    @classmethod
    def lte(cls, field: str, value: Any) -> Filter:
        return cls(field, "lte", value)

    def matches(self, row: Mapping[str, Any]) -> bool:
        """Evaluate against an in-memory row (missing/null columns never match)."""
        actual = row.get(self.field)
        if actual is None:
            return False
        match self.op:
            case "eq":
                return actual == self.value
            case "ilike":
                return str(self.value).lower() in str(actual).lower()
            case "gte":
                return actual >= self.value
            case "lte":
                return actual <= self.value
        raise StoreError(f"unsupported filter operator: {self.op}")


@runtime_checkable
class RecordStore(Protocol):
    """Narrow read-only query capability."""

    async def select(
        self,
        table: str,
        *,
        columns: Sequence[str] = ("*",),
        filters: Iterable[Filter] = (),
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
        timeout: float | None = None,
    ) -> list[Row]: ...

    async def select_one(
        self,
        table: str,
        record_id: str,
        *,
        columns: Sequence[str] = ("*",),
        timeout: float | None = None,
    ) -> Row: ...

    async def ping(self, *, timeout: float | None = None) -> bool: ...

    async def aclose(self) -> None: ...


def project(row: Mapping[str, Any], columns: Sequence[str]) -> Row:
    if "*" in columns:
        return dict(row)
    return {c: row.get(c) for c in columns}


@dataclass
class MemoryRecordStore:
    """In-process store over lists of dict rows.

    Used for tests and local development; applies the same filter, ordering
    and limit semantics as the PostgREST store. Records every query so tests
    can assert on what reached the store.

    Example:
        >>> store = MemoryRecordStore({"golf_courses": [{"id": "c1", "rating": 4.5}]})
        >>> await store.select("golf_courses", order_by="rating", descending=True)
        [{'id': 'c1', 'rating': 4.5}]
    """

    tables: dict[str, list[Row]] = field(default_factory=dict)
    fail_with: Exception | None = None
    queries: list[tuple[str, str]] = field(default_factory=list, repr=False)
    closed: bool = False

    @property
    def call_count(self) -> int:
        return len(self.queries)

    def _rows(self, table: str) -> list[Row]:
        if self.fail_with is not None:
            raise self.fail_with
        if table not in self.tables:
            raise StoreError(f"Database error: relation \"{table}\" does not exist")
        return self.tables[table]

    async def select(
        self,
        table: str,
        *,
        columns: Sequence[str] = ("*",),
        filters: Iterable[Filter] = (),
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
        timeout: float | None = None,
    ) -> list[Row]:
        self.queries.append(("select", table))
        preds = tuple(filters)
        rows = [r for r in self._rows(table) if all(p.matches(r) for p in preds)]
        if order_by is not None:
            # Stable sort keeps store order on ties; nulls last either way
            present = [r for r in rows if r.get(order_by) is not None]
            missing = [r for r in rows if r.get(order_by) is None]
            rows = sorted(present, key=lambda r: r[order_by], reverse=descending) + missing
        if limit is not None:
            rows = rows[:limit]
        return [project(r, columns) for r in rows]

    async def select_one(
        self,
        table: str,
        record_id: str,
        *,
        columns: Sequence[str] = ("*",),
        timeout: float | None = None,
    ) -> Row:
        self.queries.append(("select_one", table))
        for row in self._rows(table):
            if str(row.get("id")) == str(record_id):
                return project(row, columns)
        raise RecordNotFound(f"{table} record {record_id} not found")

    async def ping(self, *, timeout: float | None = None) -> bool:
        return self.fail_with is None and not self.closed

    async def aclose(self) -> None:
        self.closed = True
