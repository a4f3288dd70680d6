"""
Environment-driven settings.

Every value has a development default so the app boots without a `.env`.
Values are read on each call (not cached) so tests can monkeypatch the
environment.
"""

from __future__ import annotations

import os
from urllib.parse import urlsplit

JSONAPI_MEDIA_TYPE = "application/vnd.api+json"

ALLOWED_GET = ("include", "fields", "page", "limit", "sort", "search")

# URL scheme -> driver name understood by core.dialect.
_SCHEMES = {
    "postgresql": "pgsql",
    "postgres": "pgsql",
    "pgsql": "pgsql",
    "mysql": "mysql",
    "mariadb": "mysql",
    "sqlite": "sqlite",
}


def _env_str(name: str, default: str) -> str:
    return os.environ.get(name, default).strip() or default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return default
    return raw in {"1", "true", "yes", "on"}


def database_driver() -> str:
    """
    Active SQL dialect name: `mysql`, `pgsql` or anything else.

    DATABASE_DRIVER wins; otherwise the DATABASE_URL scheme decides and
    Postgres is assumed when neither is set.
    """
    explicit = os.environ.get("DATABASE_DRIVER", "").strip().lower()
    if explicit:
        return explicit

    url = os.environ.get("DATABASE_URL", "").strip()
    scheme = urlsplit(url).scheme.split("+", 1)[0].lower() if url else ""
    return _SCHEMES.get(scheme, "pgsql")


def table_prefix() -> str:
    return os.environ.get("DB_TABLE_PREFIX", "").strip()


def api_version() -> str:
    return _env_str("API_VERSION", "v1")


def jsonapi_version() -> str:
    return _env_str("JSONAPI_VERSION", "1.0")


def jsonapi_strict() -> bool:
    return _env_bool("JSONAPI_STRICT", False)


def page_limit() -> int:
    return max(1, _env_int("JSONAPI_PAGE_LIMIT", 10))


def max_page_limit() -> int:
    return max(page_limit(), _env_int("JSONAPI_MAX_PAGE_LIMIT", 100))


def log_level() -> str:
    return _env_str("LOG_LEVEL", "INFO").upper()
