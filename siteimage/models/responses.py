"""API response models."""

from __future__ import annotations

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"
    codec: str = ""
    codec_kind: str = ""
    route_pattern: str = "/_image"
