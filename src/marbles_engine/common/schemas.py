"""Shared Pydantic schemas for Marbles-Engine."""

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"
    service: str = "marbles-engine"


class ErrorResponse(BaseModel):
    error: str
    code: str
    detail: str = ""
