"""
JSON:API error objects.

Each error key maps to a template. `detail` and `source.value` are
`str.format` templates filled positionally from one detail entry, so
`NotFoundException("not_found", ("users", 7))` renders
"users 7 was not found." Templates may ignore some of the arguments;
missing ones render empty. Every extra positional detail adds one more
error object.
"""

from __future__ import annotations

import string
from typing import Any

ERRORS: dict[str, dict[str, Any]] = {
    "bad_request": {
        "title": "Bad Request",
        "detail": "{0}",
        "code": 400,
    },
    "invalid_get": {
        "title": "Invalid Query Parameter",
        "detail": "The query parameter '{0}' is not allowed.",
        "source": {"type": "parameter", "value": "{0}"},
        "code": 400,
    },
    "invalid_sort": {
        "title": "Invalid Sort",
        "detail": "The resource cannot be sorted by '{0}'.",
        "source": {"type": "parameter", "value": "sort"},
        "code": 400,
    },
    "invalid_include": {
        "title": "Invalid Include",
        "detail": "The relationship '{0}' cannot be included.",
        "source": {"type": "parameter", "value": "include"},
        "code": 400,
    },
    "invalid_body": {
        "title": "Invalid Document",
        "detail": "{0}",
        "source": {"type": "pointer", "value": ""},
        "code": 400,
    },
    "invalid_attribute": {
        "title": "Invalid Attribute",
        "detail": "{1}",
        "source": {"type": "pointer", "value": "/data/attributes/{0}"},
        "code": 403,
    },
    "not_found": {
        "title": "Resource Not Found",
        "detail": "{0} {1} was not found.",
        "code": 404,
    },
    "not_acceptable": {
        "title": "Not Acceptable",
        "detail": "The Accept header must allow '{0}'.",
        "source": {"type": "header", "value": "Accept"},
        "code": 406,
    },
    "unsupported_media_type": {
        "title": "Unsupported Media Type",
        "detail": "The Content-Type header must be '{0}'.",
        "source": {"type": "header", "value": "Content-Type"},
        "code": 415,
    },
    "server_error": {
        "title": "Internal Server Error",
        "detail": "{0}",
        "code": 500,
    },
}


class ApiException(Exception):
    """
    Base error rendered as a JSON:API `errors` array.

    Usage:
        raise BadRequestException("invalid_sort", "colour")
        raise ForbiddenException("invalid_attribute").with_details(
            [("email", "value is not a valid email address")]
        )
        raise ApiException("server_error", status=503).with_details(
            {"errors": [{"title": "...", "detail": "..."}]}  # pre-rendered
        )
    """

    status: int = 500

    def __init__(self, error: str | None = None, *details: Any, status: int | None = None):
        template: dict[str, Any] = {"title": "", "detail": ""}
        template.update(ERRORS.get(error or "", {}))
        code = template.pop("code", None)

        self.error_key = error
        self.template = template
        self.status = int(status or code or self.status)
        self.details: Any = details[0] if len(details) == 1 else list(details)
        super().__init__(template["title"] or error or self.__class__.__name__)

    def get_status_code(self) -> int:
        return int(self.status)

    def with_details(self, details: Any) -> "ApiException":
        self.details = details
        return self

    def errors(self) -> list[dict[str, Any]]:
        details = self.details

        # Pre-rendered errors pass straight through.
        if isinstance(details, dict) and isinstance(details.get("errors"), list):
            return list(details["errors"])

        if not isinstance(details, list):
            details = [details]
        if not details:
            details = [()]

        return [self._item(detail) for detail in details]

    def _item(self, detail: Any) -> dict[str, Any]:
        args = tuple(detail) if isinstance(detail, (tuple, list)) else (detail,)
        item: dict[str, Any] = {"status": str(self.status)}
        if self.error_key:
            item["code"] = self.error_key
        item["title"] = self.template["title"]
        item["detail"] = _fill(self.template["detail"], args)

        source = self.template.get("source")
        if source:
            item["source"] = {source["type"]: _fill(source["value"], args)}
        return item


class _Formatter(string.Formatter):
    """Positional formatter that renders missing arguments as ''."""

    def get_value(self, key, args, kwargs):
        if isinstance(key, int) and key >= len(args):
            return ""
        return super().get_value(key, args, kwargs)


_formatter = _Formatter()


def _fill(template: str, args: tuple[Any, ...]) -> str:
    return _formatter.format(template, *args).strip()


class BadRequestException(ApiException):
    status = 400


class ForbiddenException(ApiException):
    status = 403


class NotFoundException(ApiException):
    status = 404


class NotAcceptableException(ApiException):
    status = 406


class UnsupportedMediaTypeException(ApiException):
    status = 415


class ServerErrorException(ApiException):
    status = 500
