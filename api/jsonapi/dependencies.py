"""
Content negotiation for JSON:API routes.

Always enforced:
- query parameters must be one of `config.ALLOWED_GET` (bracketed forms
  like `page[number]` or `fields[users]` count by their base name)

Enforced only with JSONAPI_STRICT=1:
- `Accept` must allow the JSON:API media type (406 otherwise)
- POST/PATCH bodies must be sent as the JSON:API media type (415 otherwise)
"""

from __future__ import annotations

from fastapi import Request

from core import config

from .errors import BadRequestException, NotAcceptableException, UnsupportedMediaTypeException

_WRITE_METHODS = {"POST", "PATCH", "PUT"}


def _base_name(param: str) -> str:
    return param.split("[", 1)[0]


def _check_query_params(request: Request) -> None:
    rejected = [
        key for key in request.query_params.keys() if _base_name(key) not in config.ALLOWED_GET
    ]
    if rejected:
        raise BadRequestException("invalid_get", *rejected)


def _check_accept(request: Request) -> None:
    accept = (request.headers.get("accept") or "").strip()
    if not accept:
        return
    media_types = {part.split(";", 1)[0].strip().lower() for part in accept.split(",")}
    if not media_types & {config.JSONAPI_MEDIA_TYPE, "*/*", "application/*"}:
        raise NotAcceptableException("not_acceptable", config.JSONAPI_MEDIA_TYPE)


def _check_content_type(request: Request) -> None:
    if request.method not in _WRITE_METHODS:
        return
    content_type = (request.headers.get("content-type") or "").split(";", 1)[0].strip().lower()
    if content_type != config.JSONAPI_MEDIA_TYPE:
        raise UnsupportedMediaTypeException("unsupported_media_type", config.JSONAPI_MEDIA_TYPE)


async def negotiate(request: Request) -> None:
    _check_query_params(request)
    if config.jsonapi_strict():
        _check_accept(request)
        _check_content_type(request)
