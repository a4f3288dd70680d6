"""
Length-aware page of results.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlencode


@dataclass(frozen=True)
class Page:
    items: list[Any]
    total: int
    per_page: int
    current_page: int
    path: str
    # Query parameters carried over into every link (sort, search, ...).
    query: dict[str, str] = field(default_factory=dict)

    @property
    def last_page(self) -> int:
        return max(int(math.ceil(self.total / self.per_page)), 1) if self.per_page > 0 else 1

    def has_more_pages(self) -> bool:
        return self.current_page < self.last_page

    def has_pages(self) -> bool:
        return self.current_page != 1 or self.has_more_pages()

    def url(self, page: int) -> str:
        params = dict(self.query)
        params["page[number]"] = str(max(page, 1))
        params["page[limit]"] = str(self.per_page)
        return f"{self.path}?{urlencode(params, safe='[]')}"

    def next_page_url(self) -> str | None:
        if not self.has_more_pages():
            return None
        return self.url(self.current_page + 1)

    def previous_page_url(self) -> str | None:
        if self.current_page <= 1:
            return None
        return self.url(self.current_page - 1)
