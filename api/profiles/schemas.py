"""
Pydantic schemas for the profiles resource.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ProfileCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    phone: str = Field(..., min_length=3, max_length=40)
    user_id: int | None = Field(default=None, ge=1)


class ProfileUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    phone: str | None = Field(default=None, min_length=3, max_length=40)
    user_id: int | None = Field(default=None, ge=1)
