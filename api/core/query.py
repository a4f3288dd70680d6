"""
Small SQL query builder.

Feature repositories write most of their SQL by hand; this builder exists
for the generic CRUD and search code, where clauses are assembled at
runtime from a resource declaration.

Conventions:
- clauses are rendered with `?` placeholders; `statement()` converts them
  to the driver's style through the dialect
- bindings are stored per clause slot and flattened in the order the
  slots appear in the rendered SQL, so a value added to `having` always
  lands after every `where` value no matter when it was added
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from .dialect import Dialect

BINDING_SLOTS = ("select", "from", "join", "where", "having", "order")

_DIRECTIONS = {"asc", "desc"}


@dataclass(frozen=True)
class Raw:
    """SQL fragment that is inserted verbatim (never quoted)."""

    sql: str

    def __str__(self) -> str:
        return self.sql


class Query:
    def __init__(self, table: str, dialect: Dialect):
        self.table = table
        self.dialect = dialect
        self.columns: list[str] = []
        self.from_expr: str | None = None
        self.joins: list[str] = []
        self.wheres: list[str] = []
        self.groups: list[str] = []
        self.havings: list[str] = []
        self.orders: list[str] = []
        self.limit_value: int | None = None
        self.offset_value: int | None = None
        self.bindings: dict[str, list[Any]] = {slot: [] for slot in BINDING_SLOTS}

    # ── helpers ───────────────────────────────────────────────

    def wrap(self, value: str | Raw) -> str:
        if isinstance(value, Raw):
            return value.sql
        return self.dialect.quote_identifier(value)

    def clone(self) -> "Query":
        other = Query(self.table, self.dialect)
        other.columns = list(self.columns)
        other.from_expr = self.from_expr
        other.joins = list(self.joins)
        other.wheres = list(self.wheres)
        other.groups = list(self.groups)
        other.havings = list(self.havings)
        other.orders = list(self.orders)
        other.limit_value = self.limit_value
        other.offset_value = self.offset_value
        other.bindings = {slot: list(values) for slot, values in self.bindings.items()}
        return other

    # ── clauses ───────────────────────────────────────────────

    def select(self, *columns: str | Raw) -> "Query":
        self.columns = [self.wrap(c) for c in columns]
        return self

    def add_select(self, column: str | Raw) -> "Query":
        self.columns.append(self.wrap(column))
        return self

    def left_join(
        self,
        table: str,
        first: str,
        operator: str,
        second: str,
        *,
        where: tuple[str, Any] | None = None,
    ) -> "Query":
        clause = f"left join {self.wrap(table)} on {self.wrap(first)} {operator} {self.wrap(second)}"
        if where is not None:
            column, value = where
            clause += f" and {self.wrap(column)} = ?"
            self.add_binding(value, "join")
        self.joins.append(clause)
        return self

    def where(self, column: str, operator: str, value: Any) -> "Query":
        self.wheres.append(f"{self.wrap(column)} {operator} ?")
        self.add_binding(value, "where")
        return self

    def group_by(self, *columns: str) -> "Query":
        for column in columns:
            wrapped = self.wrap(column)
            if wrapped not in self.groups:
                self.groups.append(wrapped)
        return self

    def having_raw(self, sql: str, bindings: Iterable[Any] = ()) -> "Query":
        self.havings.append(sql)
        for value in bindings:
            self.add_binding(value, "having")
        return self

    def order_by(self, column: str, direction: str = "asc") -> "Query":
        direction = direction.lower()
        if direction not in _DIRECTIONS:
            raise ValueError(f"Order direction must be 'asc' or 'desc', got {direction!r}.")
        self.orders.append(f"{self.wrap(column)} {direction}")
        return self

    def limit(self, value: int | None) -> "Query":
        self.limit_value = None if value is None else max(0, int(value))
        return self

    def offset(self, value: int | None) -> "Query":
        self.offset_value = None if value is None else max(0, int(value))
        return self

    def from_raw(self, expression: str, bindings: Iterable[Any] = ()) -> "Query":
        """Replace the FROM source with a raw (derived-table) expression."""
        self.from_expr = expression
        self.bindings["from"] = list(bindings)
        return self

    def reset_order(self) -> "Query":
        self.orders = []
        self.bindings["order"] = []
        self.limit_value = None
        self.offset_value = None
        return self

    # ── bindings ──────────────────────────────────────────────

    def add_binding(self, value: Any, clause: str = "where") -> "Query":
        if clause not in self.bindings:
            raise ValueError(f"Invalid binding slot {clause!r}. Expected one of {BINDING_SLOTS}.")
        if isinstance(value, (list, tuple)):
            self.bindings[clause].extend(value)
        else:
            self.bindings[clause].append(value)
        return self

    def get_bindings(self) -> list[Any]:
        return [value for slot in BINDING_SLOTS for value in self.bindings[slot]]

    # ── rendering ─────────────────────────────────────────────

    def to_sql(self) -> str:
        columns = ", ".join(self.columns) if self.columns else "*"
        source = self.from_expr if self.from_expr is not None else self.wrap(self.table)

        sql = f"select {columns} from {source}"
        if self.joins:
            sql += " " + " ".join(self.joins)
        if self.wheres:
            sql += " where " + " and ".join(self.wheres)
        if self.groups:
            sql += " group by " + ", ".join(self.groups)
        if self.havings:
            sql += " having " + " and ".join(self.havings)
        if self.orders:
            sql += " order by " + ", ".join(self.orders)
        if self.limit_value is not None:
            sql += f" limit {self.limit_value}"
        if self.offset_value is not None:
            sql += f" offset {self.offset_value}"
        return sql

    def count_query(self) -> "Query":
        """A `count(*)` over this query, ignoring its ordering and paging."""
        inner = self.clone().reset_order()
        outer = Query(self.table, self.dialect)
        outer.select(Raw("count(*) as aggregate"))
        outer.from_raw(f"({inner.to_sql()}) as aggregate_table", inner.get_bindings())
        return outer

    def statement(self) -> tuple[str, list[Any]]:
        """SQL in the driver's placeholder style plus its flat binding list."""
        return self.dialect.format_placeholders(self.to_sql()), self.get_bindings()
