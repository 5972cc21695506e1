"""Pydantic models shared by the relay endpoints and the client application."""

from __future__ import annotations

import math
from typing import List

from pydantic import BaseModel, Field, field_validator


class ImageRequest(BaseModel):
    prompt: str = Field(..., description="Text prompt for image generation")


class ImageResponse(BaseModel):
    images: List[str] = Field(..., description="Base64-encoded images returned by the provider")


class ErrorResponse(BaseModel):
    error: str = Field(..., description="Human readable failure description")


class HealthResponse(BaseModel):
    status: str
    engine: str
    configured: bool = Field(..., description="Whether a provider credential is set")


# ---- Client-side records ----
class ImageRecord(BaseModel):
    dataUrl: str = Field(..., description="Displayable data:image/...;base64 reference")
    createdAt: int = Field(..., description="Creation time in milliseconds since the epoch")

    @field_validator("createdAt", mode="before")
    @classmethod
    def _truncate_fractional_millis(cls, value):
        if isinstance(value, float) and math.isfinite(value):
            return int(value)
        return value
