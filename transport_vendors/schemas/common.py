"""Shared Pydantic schema base and small response models."""

from __future__ import annotations

from pydantic import BaseModel


class ApiModel(BaseModel):
    """All API schemas inherit from this; field names stay snake_case on the wire."""

    model_config = {
        "populate_by_name": True,
        "from_attributes": True,
        "coerce_numbers_to_str": True,
    }


class MessageResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    """Health-check response returned by /health."""
    status: str = "ok"
    app: str
    env: str
    database: str = "connected"
    hint: str | None = None
