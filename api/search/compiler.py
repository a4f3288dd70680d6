"""
Relevance search compiler.

Builds a weighted, tiered LIKE score over several columns and folds it into
an existing query:

    select * from (
        select posts.*, max(<case terms summed>) as relevance
        from posts [left join ...] [base wheres]
        group by posts.id
        having <relevance or restated sum> > <threshold>
        order by relevance desc
    ) as posts [base wheres] order by [base orders,] relevance desc

Tiers per column and token (pattern, multiplier):
    token       x15
    token%      x5
    %token%     x1
and, when the whole search string is requested, `<search>%` x30 once per
column.
"""

from __future__ import annotations

import logging

from core.dialect import Dialect
from core.query import Query, Raw

from .schemas import CompiledSearch, SearchSpec

logger = logging.getLogger(__name__)

# (multiplier, prefix, suffix)
TIERS: tuple[tuple[int, str, str], ...] = (
    (15, "", ""),
    (5, "", "%"),
    (1, "%", "%"),
)

ENTIRE_TEXT_MULTIPLIER = 30


def _number(value: float) -> str:
    """Render a weight as a SQL literal: 30.0 -> 30, 7.5 -> 7.5."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


class RelevanceSearchCompiler:
    def __init__(self, dialect: Dialect):
        self.dialect = dialect

    def case_compare(self, column: str, weight: float) -> str:
        field = f"LOWER({self.dialect.quote_identifier(column)}) {self.dialect.like_operator} ?"
        return f"(case when {field} then {_number(weight)} else 0 end)"

    def _tier(
        self,
        column: str,
        weight: float,
        words: tuple[str, ...],
        multiplier: int,
        bindings: list[str],
        prefix: str = "",
        suffix: str = "",
    ) -> str:
        cases = []
        for word in words:
            cases.append(self.case_compare(column, weight * multiplier))
            bindings.append(prefix + word + suffix)
        return " + ".join(cases)

    def compile(self, spec: SearchSpec) -> CompiledSearch:
        bindings: list[str] = []
        selects: list[str] = []

        for column, weight in spec.columns.items():
            for multiplier, prefix, suffix in TIERS:
                selects.append(
                    self._tier(column, weight, spec.words, multiplier, bindings, prefix, suffix)
                )
            if spec.entire_text:
                selects.append(
                    self._tier(column, weight, (spec.search,), ENTIRE_TEXT_MULTIPLIER, bindings, "", "%")
                )

        relevance_sql = " + ".join(selects)
        threshold = spec.effective_threshold
        comparator = "relevance" if self.dialect.supports_having_alias else relevance_sql

        return CompiledSearch(
            select_sql=f"max({relevance_sql}) as relevance",
            relevance_sql=relevance_sql,
            having_sql=f"{comparator} > {threshold:.2f}",
            threshold=threshold,
            bindings=tuple(bindings),
            term_count=len(bindings),
        )

    # ── query assembly ────────────────────────────────────────

    def _make_joins(self, query: Query, joins: dict[str, list[str]]) -> None:
        for table, keys in joins.items():
            where = (keys[2], keys[3]) if len(keys) == 4 else None
            query.left_join(table, keys[0], "=", keys[1], where=where)

    def _make_group_by(
        self,
        query: Query,
        spec: SearchSpec,
        *,
        primary_key: str,
        joins: dict[str, list[str]],
        group_by: list[str] | None,
    ) -> None:
        if group_by:
            query.group_by(*group_by)
        else:
            query.group_by(f"{query.table}.{primary_key}")

        # Joined columns are not functionally dependent on the grouping key.
        for column in spec.columns:
            for table in joins:
                if table in column:
                    query.group_by(column)

    def _add_bindings(self, query: Query, bindings: tuple[str, ...]) -> None:
        for copy in range(self.dialect.binding_duplication_factor):
            query.add_binding(list(bindings), "select" if copy == 0 else "having")

    def _merge(self, search_query: Query, original: Query) -> Query:
        alias = self.dialect.quote_identifier(original.table)
        original.from_raw(f"({search_query.to_sql()}) as {alias}", search_query.get_bindings())
        original.order_by("relevance", "desc")
        return original

    def apply(
        self,
        query: Query,
        spec: SearchSpec,
        *,
        primary_key: str = "id",
        joins: dict[str, list[str]] | None = None,
        group_by: list[str] | None = None,
    ) -> Query:
        """
        Restrict `query` to rows scoring above the threshold, best first.

        `query` is modified in place and returned: its FROM becomes the scored
        subquery while its own wheres, orders and bindings are kept.
        """
        joins = joins or {}
        search_query = query.clone().reset_order()
        search_query.select(f"{query.table}.*")
        self._make_joins(search_query, joins)

        compiled = self.compile(spec)
        search_query.add_select(Raw(compiled.select_sql))
        search_query.having_raw(compiled.having_sql)
        search_query.order_by("relevance", "desc")
        self._make_group_by(
            search_query,
            spec,
            primary_key=primary_key,
            joins=joins,
            group_by=group_by,
        )
        self._add_bindings(search_query, compiled.bindings)

        logger.debug(
            "search_compiled table=%s dialect=%s terms=%s threshold=%.2f",
            query.table,
            self.dialect.name,
            compiled.term_count,
            compiled.threshold,
        )
        return self._merge(search_query, query)
