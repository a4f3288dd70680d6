"""
Search configuration and per-call values.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from pydantic import BaseModel, Field, field_validator


class Searchable(BaseModel):
    """
    Per-resource search configuration.

    - columns: column -> weight. When omitted, every column of the table is
      searched with weight 1 (resolved from the schema at request time).
    - joins: table -> [first, second] or [first, second, column, value];
      each entry becomes a LEFT JOIN used only by the search subquery.
    - group_by: replaces the default `<table>.<primary key>` grouping.
    """

    columns: dict[str, float] | None = None
    joins: dict[str, list[str]] = Field(default_factory=dict)
    group_by: list[str] | None = None

    @field_validator("columns")
    @classmethod
    def _positive_weights(cls, value: dict[str, float] | None) -> dict[str, float] | None:
        if value is None:
            return value
        if not value:
            raise ValueError("columns must name at least one column.")
        for column, weight in value.items():
            if not column.strip():
                raise ValueError("column names must not be empty.")
            if weight <= 0:
                raise ValueError(f"weight for {column!r} must be positive, got {weight}.")
        return value

    @field_validator("joins")
    @classmethod
    def _join_shape(cls, value: dict[str, list[str]]) -> dict[str, list[str]]:
        for table, keys in value.items():
            if len(keys) not in (2, 4):
                raise ValueError(
                    f"join {table!r} needs [first, second] or [first, second, column, value]."
                )
        return value


def normalize(search: str) -> tuple[str, tuple[str, ...]]:
    """
    Lower-case and trim the search string, then split it on single spaces.

    Consecutive spaces produce empty tokens; they are kept.
    """
    text = (search or "").strip().lower()
    return text, tuple(text.split(" "))


@dataclass(frozen=True)
class SearchSpec:
    columns: Mapping[str, float]
    words: tuple[str, ...]
    search: str
    threshold: float | None = None
    entire_text: bool = False

    @classmethod
    def build(
        cls,
        search: str,
        columns: Mapping[str, float],
        *,
        threshold: float | None = None,
        entire_text: bool = False,
    ) -> "SearchSpec":
        text, words = normalize(search)
        return cls(
            columns=MappingProxyType(dict(columns)),
            words=words,
            search=text,
            threshold=threshold,
            entire_text=bool(entire_text),
        )

    @property
    def total_weight(self) -> float:
        return float(sum(self.columns.values()))

    @property
    def effective_threshold(self) -> float:
        if self.threshold is not None:
            return float(self.threshold)
        return self.total_weight / 4


@dataclass(frozen=True)
class CompiledSearch:
    """
    Output of one compile step.

    `bindings` holds one value per comparison in emission order; callers
    attach it once per `Dialect.binding_duplication_factor`.
    """

    select_sql: str
    relevance_sql: str
    having_sql: str
    threshold: float
    bindings: tuple[str, ...] = field(default_factory=tuple)
    term_count: int = 0
