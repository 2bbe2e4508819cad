"""Response models for the read-only status API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    error: str
    detail: str


class HealthResponse(BaseModel):
    status: str
    ready: bool
    resource: str
    objects: int


class ObjectEntry(BaseModel):
    namespace: str | None
    name: str
    object: dict[str, Any]


class ObjectListResponse(BaseModel):
    resource: str
    count: int
    items: list[ObjectEntry]
