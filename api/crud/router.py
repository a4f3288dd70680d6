"""
Router factory: five JSON:API routes per resource.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query, Request, status

from jsonapi import transformer
from jsonapi.api import api
from jsonapi.dependencies import negotiate
from jsonapi.errors import BadRequestException
from jsonapi.responses import JSONAPIResponse

from .controller import ApiController
from .resource import Resource


async def _json_payload(request: Request) -> dict[str, Any]:
    try:
        payload = await request.json()
    except ValueError as exc:
        raise BadRequestException("invalid_body", "Request body is not valid JSON.") from exc
    return api.attributes(payload)


def _link_params(request: Request) -> dict[str, str]:
    # Paging params are rebuilt per link.
    return {
        key: value
        for key, value in request.query_params.items()
        if not key.startswith("page[")
    }


def _reject_includes(request: Request) -> None:
    includes = api.includes(request)
    if includes:
        raise BadRequestException("invalid_include", *includes)


def build_router(resource: Resource) -> APIRouter:
    controller = ApiController(resource)
    router = APIRouter(prefix=f"/{resource.type}", dependencies=[Depends(negotiate)])

    @router.get("")
    async def index(
        request: Request,
        sort: str | None = Query(default=None, max_length=500),
        search: str | None = Query(default=None, max_length=500),
        page_limit: int | None = Query(default=None, alias="page[limit]", ge=1),
        page_number: int = Query(default=1, alias="page[number]", ge=1),
    ) -> JSONAPIResponse:
        _reject_includes(request)
        page = await controller.index(
            sort=sort,
            search=search,
            limit=page_limit,
            page=page_number,
            path=str(request.url.replace(query="")),
            query_params=_link_params(request),
        )
        return JSONAPIResponse(transformer.convert(page, fields=api.fields(request)))

    @router.post("", status_code=status.HTTP_201_CREATED)
    async def store(request: Request) -> JSONAPIResponse:
        record = await controller.store(await _json_payload(request))
        return JSONAPIResponse(transformer.convert(record), status_code=status.HTTP_201_CREATED)

    @router.get("/{record_id}")
    async def show(record_id: str, request: Request) -> JSONAPIResponse:
        _reject_includes(request)
        record = await controller.show(record_id)
        return JSONAPIResponse(transformer.convert(record, fields=api.fields(request)))

    @router.patch("/{record_id}")
    async def update(record_id: str, request: Request) -> JSONAPIResponse:
        record = await controller.update(record_id, await _json_payload(request))
        return JSONAPIResponse(transformer.convert(record))

    @router.delete("/{record_id}")
    async def destroy(record_id: str) -> JSONAPIResponse:
        record = await controller.destroy(record_id)
        return JSONAPIResponse(transformer.convert(record))

    return router
