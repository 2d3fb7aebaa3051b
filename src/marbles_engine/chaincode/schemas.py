"""Pydantic schemas for the invocation endpoints."""

from typing import Optional

from pydantic import BaseModel, Field


class InvokeRequest(BaseModel):
    function: str = Field(..., min_length=1, max_length=64)
    args: list[str] = []
    tx_id: Optional[str] = Field(default=None, max_length=64)


class InvokeResponse(BaseModel):
    status: int
    tx_id: str
    payload: str = ""
