"""
Request-side JSON:API helpers.
"""

from __future__ import annotations

import re
from typing import Any

from fastapi import Request

from core import config

from .errors import BadRequestException

_FIELDS_PARAM = re.compile(r"^fields\[([^\]]+)\]$")


class Api:
    def __init__(self, version: str | None = None):
        self._version = version

    def get_version(self) -> str:
        return self._version or config.api_version()

    def set_version(self, version: str | None) -> None:
        self._version = version

    def includes(self, request: Request) -> list[str]:
        """`?include=author,comments` -> ["author", "comments"]."""
        raw = request.query_params.get("include") or ""
        return [name.strip() for name in raw.split(",") if name.strip()]

    def fields(self, request: Request) -> dict[str, list[str]]:
        """`?fields[users]=name,email` -> {"users": ["name", "email"]}."""
        results: dict[str, list[str]] = {}
        for key, members in request.query_params.multi_items():
            match = _FIELDS_PARAM.match(key)
            if not match or not members:
                continue
            for member in members.split(","):
                member = member.strip()
                if member:
                    results.setdefault(match.group(1), []).append(member)
        return results

    def json_body(self, payload: Any) -> Any:
        if not isinstance(payload, dict):
            return None
        return payload.get("data")

    def attributes(self, payload: Any) -> dict[str, Any]:
        """
        Attributes from either a JSON:API document or a flat JSON object.
        """
        if not isinstance(payload, dict):
            raise BadRequestException("invalid_body", "Request body must be a JSON object.")

        if "data" not in payload:
            return payload

        data = self.json_body(payload)
        if not isinstance(data, dict):
            raise BadRequestException("invalid_body", "Member 'data' must be a resource object.")
        attributes = data.get("attributes", {})
        if not isinstance(attributes, dict):
            raise BadRequestException("invalid_body", "Member 'attributes' must be an object.")
        return attributes


api = Api()
