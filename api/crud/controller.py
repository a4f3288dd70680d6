"""
Generic CRUD controller.

Maps the five REST actions onto a resource's persistence operations:
- index   -> sorted, optionally searched, paginated list
- store   -> validate + insert
- show    -> fetch by key
- update  -> validate + partial update
- destroy -> delete, returning the removed record

Failures are raised as `jsonapi.errors.ApiException` subclasses; the
app-level handlers render them.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from core import config
from jsonapi.errors import BadRequestException, ForbiddenException, NotFoundException
from jsonapi.pagination import Page
from search import service as search_service

from . import repository
from .resource import Record, Resource

logger = logging.getLogger(__name__)


def parse_sort(raw: str | None) -> list[tuple[str, str]]:
    """`-created_at,name` -> [("created_at", "desc"), ("name", "asc")]."""
    fields: list[tuple[str, str]] = []
    for part in (raw or "").split(","):
        part = part.strip()
        if not part:
            continue
        if part.startswith("-"):
            fields.append((part[1:], "desc"))
        else:
            fields.append((part.lstrip("+"), "asc"))
    return fields


class ApiController:
    def __init__(self, resource: Resource):
        self.resource = resource
        self.resource.validate_api()

    # ── actions ───────────────────────────────────────────────

    async def index(
        self,
        *,
        sort: str | None = None,
        search: str | None = None,
        limit: int | None = None,
        page: int = 1,
        path: str = "",
        query_params: dict[str, str] | None = None,
    ) -> Page:
        resource = self.resource
        per_page = min(limit or config.page_limit(), config.max_page_limit())
        page = max(page, 1)

        query = repository.base_query(resource)

        sort_fields = parse_sort(sort)
        for column, direction in sort_fields:
            if column not in resource.sortable:
                raise BadRequestException("invalid_sort", column)
            query.order_by(f"{resource.qualified_table}.{column}", direction)

        searching = bool(search and search.strip()) and resource.is_searchable()
        if searching:
            query = await search_service.search(
                query,
                resource.searchable,
                search,
                primary_key=resource.primary_key,
            )
        elif not sort_fields:
            query.order_by(f"{resource.qualified_table}.{resource.primary_key}", "asc")

        rows, total = await repository.paginate(query, per_page=per_page, page=page)
        logger.debug(
            "index type=%s page=%s per_page=%s total=%s search=%s",
            resource.type,
            page,
            per_page,
            total,
            searching,
        )
        return Page(
            items=[resource.record(row) for row in rows],
            total=total,
            per_page=per_page,
            current_page=page,
            path=path,
            query=dict(query_params or {}),
        )

    async def store(self, payload: dict[str, Any]) -> Record:
        attributes = self.validate("create", payload)
        row = await repository.create(self.resource, attributes)
        record = self.resource.record(row)
        logger.info("record_created type=%s id=%s", self.resource.type, record.get_id())
        return record

    async def show(self, record_id: Any) -> Record:
        key = self._key(record_id)
        row = await repository.find(self.resource, key)
        if row is None:
            raise self._not_found(record_id)
        return self.resource.record(row)

    async def update(self, record_id: Any, payload: dict[str, Any]) -> Record:
        key = self._key(record_id)
        attributes = self.validate("update", payload)
        row = await repository.update(self.resource, key, attributes)
        if row is None:
            raise self._not_found(record_id)
        logger.info("record_updated type=%s id=%s fields=%s", self.resource.type, key, sorted(attributes))
        return self.resource.record(row)

    async def destroy(self, record_id: Any) -> Record:
        key = self._key(record_id)
        row = await repository.delete(self.resource, key)
        if row is None:
            raise self._not_found(record_id)
        logger.info("record_deleted type=%s id=%s", self.resource.type, key)
        return self.resource.record(row)

    # ── helpers ───────────────────────────────────────────────

    def validate(self, action: str, payload: dict[str, Any]) -> dict[str, Any]:
        """
        Validate `payload` against the resource schema for `action`.

        Returns only fillable columns. Every failing field becomes one
        `invalid_attribute` error pointing at that field.
        """
        schema = self.resource.schema_for(action)
        try:
            model = schema.model_validate(payload)
        except ValidationError as exc:
            details = []
            for error in exc.errors():
                field = ".".join(str(part) for part in error.get("loc", ())) or "data"
                details.append((field, error.get("msg", "Invalid value.")))
            raise ForbiddenException("invalid_attribute").with_details(details) from exc

        values = model.model_dump(exclude_unset=(action == "update"))
        values = self.resource.prepare(values, action=action)
        return {key: value for key, value in values.items() if key in self.resource.fillable}

    def _key(self, record_id: Any) -> Any:
        try:
            return self.resource.cast_key(record_id)
        except (TypeError, ValueError) as exc:
            raise self._not_found(record_id) from exc

    def _not_found(self, record_id: Any) -> NotFoundException:
        return NotFoundException("not_found", (self.resource.type, record_id))
