"""
Search orchestration.

Resolves the column weights (explicit config, or every table column at
weight 1 from the schema) and hands off to the compiler.
"""

from __future__ import annotations

from core import db
from core.query import Query

from .compiler import RelevanceSearchCompiler
from .schemas import Searchable, SearchSpec


async def resolve_columns(table: str, searchable: Searchable) -> dict[str, float]:
    if searchable.columns is not None:
        return dict(searchable.columns)
    return {column: 1.0 for column in await db.list_columns(table)}


async def search(
    query: Query,
    searchable: Searchable,
    search_text: str,
    *,
    primary_key: str = "id",
    threshold: float | None = None,
    entire_text: bool = False,
) -> Query:
    columns = await resolve_columns(query.table, searchable)
    spec = SearchSpec.build(
        search_text,
        columns,
        threshold=threshold,
        entire_text=entire_text,
    )
    compiler = RelevanceSearchCompiler(query.dialect)
    return compiler.apply(
        query,
        spec,
        primary_key=primary_key,
        joins=searchable.joins,
        group_by=searchable.group_by,
    )
