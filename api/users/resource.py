"""
Users exposed as a JSON:API resource.
"""

from __future__ import annotations

from typing import Any

from crud.resource import Resource
from search.schemas import Searchable

from . import schemas, security


class UserResource(Resource):
    type = "users"
    table = "users"
    fillable = ("name", "email", "password_hash")
    hidden = ("password_hash",)
    sortable = ("id", "name", "email", "created_at", "updated_at")

    searchable = Searchable(columns={"users.name": 2, "users.email": 1})

    create_schema = schemas.UserCreate
    update_schema = schemas.UserUpdate

    def prepare(self, attributes: dict[str, Any], *, action: str) -> dict[str, Any]:
        attributes = dict(attributes)
        password = attributes.pop("password", None)
        if password is not None:
            attributes["password_hash"] = security.hash_password(password)
        return attributes


resource = UserResource()
