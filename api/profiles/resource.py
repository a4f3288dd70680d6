"""
Profiles exposed as a JSON:API resource.

Search also matches the owning user's name through a LEFT JOIN.
"""

from __future__ import annotations

from crud.resource import Resource
from search.schemas import Searchable

from . import schemas


class ProfileResource(Resource):
    type = "profiles"
    table = "profiles"
    fillable = ("phone", "user_id")
    sortable = ("id", "phone", "created_at")

    searchable = Searchable(
        columns={"profiles.phone": 2, "users.name": 1},
        joins={"users": ["profiles.user_id", "users.id"]},
    )

    create_schema = schemas.ProfileCreate
    update_schema = schemas.ProfileUpdate


resource = ProfileResource()
