"""
Generic CRUD persistence.

SQL here is assembled from the resource declaration through
`core.query.Query` and the active dialect, then run with the asyncpg
helpers in `core.db`. Missing rows come back as None; database errors
propagate.
"""

from __future__ import annotations

from typing import Any

from core import db
from core.query import Query

from .resource import Resource


def base_query(resource: Resource) -> Query:
    return Query(resource.qualified_table, db.dialect())


def _key_column(resource: Resource) -> str:
    return f"{resource.qualified_table}.{resource.primary_key}"


async def paginate(query: Query, *, per_page: int, page: int) -> tuple[list[dict[str, Any]], int]:
    """
    Return (rows for `page`, total row count) for `query`.
    """
    count_sql, count_args = query.count_query().statement()
    total = int(await db.fetch_value(count_sql, *count_args) or 0)

    page_query = query.clone().limit(per_page).offset((page - 1) * per_page)
    sql, args = page_query.statement()
    rows = await db.fetch_all(sql, *args)
    return rows, total


async def find(resource: Resource, record_id: Any) -> dict[str, Any] | None:
    query = base_query(resource).where(_key_column(resource), "=", record_id).limit(1)
    sql, args = query.statement()
    return await db.fetch_one(sql, *args)


async def create(resource: Resource, attributes: dict[str, Any]) -> dict[str, Any]:
    dialect = db.dialect()
    columns = list(attributes)
    column_sql = ", ".join(dialect.quote_identifier(c) for c in columns)
    value_sql = ", ".join("?" for _ in columns)
    sql = (
        f"insert into {dialect.quote_identifier(resource.qualified_table)} ({column_sql}) "
        f"values ({value_sql}) returning *"
    )
    row = await db.fetch_one(dialect.format_placeholders(sql), *[attributes[c] for c in columns])
    if row is None:
        raise RuntimeError(f"Failed to create {resource.type} record.")
    return row


async def update(resource: Resource, record_id: Any, attributes: dict[str, Any]) -> dict[str, Any] | None:
    if not attributes and not resource.timestamps:
        return await find(resource, record_id)

    dialect = db.dialect()
    assignments = [f"{dialect.quote_identifier(c)} = ?" for c in attributes]
    if resource.timestamps:
        assignments.append(f"{dialect.quote_identifier('updated_at')} = now()")
    sql = (
        f"update {dialect.quote_identifier(resource.qualified_table)} "
        f"set {', '.join(assignments)} "
        f"where {dialect.quote_identifier(resource.primary_key)} = ? returning *"
    )
    return await db.fetch_one(dialect.format_placeholders(sql), *attributes.values(), record_id)


async def delete(resource: Resource, record_id: Any) -> dict[str, Any] | None:
    dialect = db.dialect()
    sql = (
        f"delete from {dialect.quote_identifier(resource.qualified_table)} "
        f"where {dialect.quote_identifier(resource.primary_key)} = ? returning *"
    )
    return await db.fetch_one(dialect.format_placeholders(sql), record_id)
