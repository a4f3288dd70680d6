"""
JSON response with the JSON:API media type.
"""

from __future__ import annotations

from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from core.config import JSONAPI_MEDIA_TYPE


class JSONAPIResponse(JSONResponse):
    media_type = JSONAPI_MEDIA_TYPE

    def render(self, content: Any) -> bytes:
        # Rows carry datetimes/decimals straight from asyncpg.
        return super().render(jsonable_encoder(content))
