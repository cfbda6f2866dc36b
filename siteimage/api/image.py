"""GET <route_pattern>?<serialized transform> — on-demand image transforms.

ParseRequest → 400 | load source → 404 | codec → 500 | 200 with image bytes.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse, Response

from siteimage.codecs.base import ImageCodec, ServerImageCodec
from siteimage.config import Settings
from siteimage.dependencies import get_codec, get_loader, get_settings
from siteimage.errors import CodecError
from siteimage.loader import ImageLoader

logger = logging.getLogger(__name__)

_CACHE_IMMUTABLE = "public, max-age=31536000, immutable"
_CACHE_DEV = "no-cache"


def transform_image(
    request: Request,
    codec: ImageCodec = Depends(get_codec),
    loader: ImageLoader = Depends(get_loader),
    settings: Settings = Depends(get_settings),
) -> Response:
    # Sync handler: FastAPI runs it in the threadpool, so codec work never blocks the loop
    if not isinstance(codec, ServerImageCodec):
        logger.error("Codec %s is tagged as server-side but cannot transform images", codec.name)
        return PlainTextResponse(f"Server Error: codec {codec.name!r} cannot transform images", status_code=500)

    transform = codec.parse_transform(request.url.query)
    if transform is None:
        return PlainTextResponse("Bad Request", status_code=400)

    try:
        data = loader.load_image(transform.src)
        if data is None:
            return PlainTextResponse(f'"{transform.src}" not found', status_code=404)
        result = codec.transform(data, transform)
    except CodecError as e:
        logger.warning("Transform failed for %s: %s", transform.src, e)
        return PlainTextResponse(f"Server Error: {e}", status_code=500)
    except Exception as e:
        logger.exception("Unexpected error transforming %s", transform.src)
        return PlainTextResponse(f"Server Error: {e}", status_code=500)

    return Response(
        content=result.data,
        media_type=result.format.mime_type,
        headers={"Cache-Control": _CACHE_DEV if settings.is_dev else _CACHE_IMMUTABLE},
    )


def create_image_router(route_pattern: str) -> APIRouter:
    router = APIRouter()
    router.add_api_route(route_pattern, transform_image, methods=["GET"], include_in_schema=False)
    return router
