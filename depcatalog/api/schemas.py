"""Pydantic schemas for the REST API."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Error envelope returned for every non-2xx response."""

    error: str
    detail: str


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str


class GraphQuery(BaseModel):
    """Graph filters.  At most one is honoured: dependency > service > team."""

    team: str | None = Field(default=None, min_length=1, max_length=128)
    service: str | None = Field(default=None, min_length=1, max_length=128)
    dependency: str | None = Field(default=None, min_length=1, max_length=128)
