"""
Resource declarations for the generic CRUD layer.

A resource describes one table: its JSON:API type, key, writable columns,
validation schemas and (optionally) its search configuration. Feature
packages subclass `Resource` and register it with `crud.router.build_router`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar

from pydantic import BaseModel

from core import config
from search.schemas import Searchable


class Resource:
    type: ClassVar[str] = ""
    table: ClassVar[str] = ""
    primary_key: ClassVar[str] = "id"
    key_type: ClassVar[type] = int

    # Columns written on create/update; anything else is dropped.
    fillable: ClassVar[tuple[str, ...]] = ()
    # Columns never rendered in attributes.
    hidden: ClassVar[tuple[str, ...]] = ()
    sortable: ClassVar[tuple[str, ...]] = ()
    # Touch `updated_at` on update.
    timestamps: ClassVar[bool] = True

    searchable: ClassVar[Searchable | None] = None

    create_schema: ClassVar[type[BaseModel] | None] = None
    update_schema: ClassVar[type[BaseModel] | None] = None

    def validate_api(self) -> None:
        """Fail fast on a half-declared resource (at router build time)."""
        name = self.__class__.__name__
        missing = [attr for attr in ("type", "table", "primary_key") if not getattr(self, attr)]
        if missing:
            raise RuntimeError(f"{name} must declare: {', '.join(missing)}.")
        if not self.fillable:
            raise RuntimeError(f"{name} must declare at least one fillable column.")
        if self.create_schema is None or self.update_schema is None:
            raise RuntimeError(f"{name} must declare create_schema and update_schema.")

    @property
    def qualified_table(self) -> str:
        return config.table_prefix() + self.table

    def is_searchable(self) -> bool:
        return self.searchable is not None

    def schema_for(self, action: str) -> type[BaseModel]:
        schema = self.create_schema if action == "create" else self.update_schema
        if schema is None:
            raise RuntimeError(f"{self.__class__.__name__} has no schema for {action!r}.")
        return schema

    def cast_key(self, value: Any) -> Any:
        """Convert a path parameter to the key type; raises ValueError."""
        return self.key_type(value)

    def prepare(self, attributes: dict[str, Any], *, action: str) -> dict[str, Any]:
        """Hook to derive stored values (hashing, normalisation) before writes."""
        return attributes

    def transform(self, row: dict[str, Any]) -> dict[str, Any]:
        return {key: value for key, value in row.items() if key not in self.hidden}

    def record(self, row: dict[str, Any]) -> "Record":
        return Record(resource=self, row=row)


@dataclass(frozen=True)
class Record:
    """A fetched row bound to its resource; what the transformer renders."""

    resource: Resource
    row: dict[str, Any]

    @property
    def type(self) -> str:
        return self.resource.type

    def get_id(self) -> Any:
        return self.row.get(self.resource.primary_key)

    def transform(self) -> dict[str, Any]:
        return self.resource.transform(self.row)
