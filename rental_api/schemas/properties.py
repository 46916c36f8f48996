"""Pydantic schemas for property routes."""

from __future__ import annotations

from pydantic import BaseModel, Field


class PropertyViewResponse(BaseModel):
    message: str = Field("View counted", description="Confirmation message.")
    views: int = Field(..., ge=1, description="Total views recorded for the property.")
