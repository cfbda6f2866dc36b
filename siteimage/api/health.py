"""Health check + meta endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from siteimage import __version__
from siteimage.codecs.base import ImageCodec
from siteimage.config import Settings
from siteimage.dependencies import get_codec, get_settings
from siteimage.models.responses import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health(
    codec: ImageCodec = Depends(get_codec),
    settings: Settings = Depends(get_settings),
) -> HealthResponse:
    return HealthResponse(
        status="ok",
        version=__version__,
        codec=codec.name,
        codec_kind=codec.kind.value,
        route_pattern=settings.route_pattern,
    )
