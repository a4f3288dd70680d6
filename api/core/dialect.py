"""
SQL dialect capabilities.

All dialect branching lives here so callers never look at the driver
name themselves. The query builder emits `?` placeholders and quoted
identifiers through this object; `format_placeholders` turns the final
statement into the driver's parameter style.
"""

from __future__ import annotations

from dataclasses import dataclass

MYSQL = "mysql"
PGSQL = "pgsql"


@dataclass(frozen=True)
class Dialect:
    name: str

    @classmethod
    def from_driver(cls, driver: str | None) -> "Dialect":
        name = (driver or "").strip().lower()
        if name in ("postgres", "postgresql", "pg"):
            name = PGSQL
        elif name == "mariadb":
            name = MYSQL
        return cls(name=name or PGSQL)

    @property
    def is_mysql(self) -> bool:
        return self.name == MYSQL

    @property
    def is_postgres(self) -> bool:
        return self.name == PGSQL

    @property
    def like_operator(self) -> str:
        """Case-insensitive LIKE. PG has ILIKE; others compare LOWER() values."""
        return "ILIKE" if self.is_postgres else "LIKE"

    @property
    def supports_having_alias(self) -> bool:
        """Whether HAVING may reference a SELECT-list alias."""
        return self.is_mysql

    @property
    def binding_duplication_factor(self) -> int:
        # HAVING restates the scored expression when the alias is unusable,
        # so every placeholder appears twice.
        return 1 if self.supports_having_alias else 2

    def quote_identifier(self, name: str) -> str:
        """
        Quote a (possibly dotted) identifier: posts.title -> "posts"."title".

        `*` segments and already-quoted segments are left alone.
        """
        quote = "`" if self.is_mysql else '"'
        parts = []
        for part in name.split("."):
            part = part.strip()
            if part == "*" or (part.startswith(quote) and part.endswith(quote)):
                parts.append(part)
            else:
                parts.append(quote + part.replace(quote, quote + quote) + quote)
        return ".".join(parts)

    def format_placeholders(self, sql: str) -> str:
        """
        Rewrite `?` placeholders into the driver's style.

        Postgres (asyncpg) uses $1, $2, ...; MySQL drivers use %s; anything
        else keeps qmark style. Question marks inside quoted literals are
        not placeholders and are kept as-is.
        """
        if not self.is_postgres and not self.is_mysql:
            return sql

        out: list[str] = []
        quote: str | None = None
        index = 0
        for ch in sql:
            if quote is not None:
                if ch == quote:
                    quote = None
                out.append(ch)
                continue
            if ch in ("'", '"', "`"):
                quote = ch
                out.append(ch)
                continue
            if ch == "?":
                index += 1
                out.append(f"${index}" if self.is_postgres else "%s")
                continue
            out.append(ch)
        return "".join(out)
