"""
FastAPI exception handlers that answer with JSON:API error documents.
"""

from __future__ import annotations

import logging

import asyncpg
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError

from .errors import ApiException, BadRequestException, ServerErrorException
from .responses import JSONAPIResponse
from .transformer import jsonapi_meta

logger = logging.getLogger(__name__)


def error_response(exc: ApiException) -> JSONAPIResponse:
    return JSONAPIResponse(
        status_code=exc.get_status_code(),
        content={"errors": exc.errors(), "jsonapi": jsonapi_meta()},
    )


async def api_exception_handler(_: Request, exc: ApiException) -> JSONAPIResponse:
    if exc.get_status_code() >= 500:
        logger.error("api_error status=%s code=%s", exc.get_status_code(), exc.error_key)
    return error_response(exc)


async def request_validation_handler(_: Request, exc: RequestValidationError) -> JSONAPIResponse:
    details = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ())]
        where = ".".join(loc[1:]) or ".".join(loc)
        details.append(f"{where}: {error.get('msg', 'invalid value')}")
    return error_response(BadRequestException("bad_request").with_details(details))


async def database_error_handler(request: Request, exc: asyncpg.PostgresError) -> JSONAPIResponse:
    logger.error(
        "database_error method=%s path=%s",
        request.method,
        request.url.path,
        exc_info=exc,
    )
    return error_response(ServerErrorException("server_error", "The query could not be executed."))


def install_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiException, api_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(asyncpg.PostgresError, database_error_handler)
