from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class FragmentSchema(BaseModel):
    """Fragment metadata as served to clients (camelCase keys)."""

    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    id: str
    owner_id: str
    created: datetime
    updated: datetime
    type: str
    size: int
    formats: list[str]


class FragmentListResponse(BaseModel):
    fragments: list[FragmentSchema] | list[str]


class ErrorResponse(BaseModel):
    error: str


class HealthResponse(BaseModel):
    status: str = "ok"


class ReadinessResponse(BaseModel):
    status: str = "ok"
    storage: str = "up"
