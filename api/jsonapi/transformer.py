"""
Wrap records and pages into JSON:API documents.

A record is "transformable" when it exposes `transform()` and `get_id()`
plus a `type` attribute (see `crud.resource.Record`). Anything else is
passed through untouched apart from the top-level `jsonapi` member.
"""

from __future__ import annotations

from typing import Any

from core import config

from .api import api
from .pagination import Page


def jsonapi_meta() -> dict[str, str]:
    return {"version": config.jsonapi_version(), "self": api.get_version()}


def is_transformable(item: Any) -> bool:
    return callable(getattr(item, "transform", None)) and callable(getattr(item, "get_id", None))


def render(item: Any, fields: dict[str, list[str]] | None = None) -> dict[str, Any]:
    attributes = item.transform()
    wanted = (fields or {}).get(item.type)
    if wanted:
        attributes = {key: value for key, value in attributes.items() if key in wanted}
    return {
        "type": item.type,
        "id": str(item.get_id()),
        "attributes": attributes,
    }


def transform_objects(items: list[Any], fields: dict[str, list[str]] | None = None) -> list[Any]:
    return [render(item, fields) if is_transformable(item) else item for item in items]


def pagination_meta(page: Page) -> dict[str, Any]:
    return {
        "meta": {
            "total": page.total,
            "total_pages": page.last_page,
            "per_page": page.per_page,
            "current_page": page.current_page,
            "has_more_pages": page.has_more_pages(),
            "has_pages": page.has_pages(),
        },
        "links": {
            "self": page.url(page.current_page),
            "first": page.url(1),
            "last": page.url(page.last_page),
            "next": page.next_page_url(),
            "prev": page.previous_page_url(),
        },
    }


def convert(content: Any, *, fields: dict[str, list[str]] | None = None) -> dict[str, Any]:
    if is_transformable(content):
        document: dict[str, Any] = {"data": render(content, fields)}
    elif isinstance(content, Page):
        document = {"data": transform_objects(content.items, fields)}
        document.update(pagination_meta(content))
    elif isinstance(content, dict):
        document = dict(content)
    else:
        document = {"data": content}

    document["jsonapi"] = jsonapi_meta()
    return document
