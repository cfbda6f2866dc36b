"""FastAPI app factory."""

from __future__ import annotations

import logging

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from siteimage import __version__
from siteimage.codecs import CodecKind, ImageCodec, create_codec
from siteimage.config import LOG_FORMAT, Settings, settings as default_settings
from siteimage.loader import ImageLoader

load_dotenv()

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )


def create_app(
    settings: Settings | None = None,
    codec: ImageCodec | None = None,
    loader: ImageLoader | None = None,
) -> FastAPI:
    settings = settings or default_settings
    configure_logging(settings.log_level)

    app = FastAPI(
        title="siteimage",
        description="On-demand and build-time image transforms for static and SSR sites",
        version=__version__,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    # Selected once here, injected into handlers via app.state
    app.state.settings = settings
    app.state.codec = codec or create_codec(settings.codec, settings)
    app.state.loader = loader or ImageLoader(
        src_dir=settings.src_dir,
        public_dir=settings.public_dir,
        timeout=settings.remote_timeout_seconds,
    )

    from siteimage.api.image import create_image_router
    from siteimage.api.router import api_router

    app.include_router(api_router)
    if app.state.codec.kind is CodecKind.SERVER:
        app.include_router(create_image_router(settings.route_pattern))

    logger.info(
        "siteimage ready: codec=%s (%s), route=%s",
        app.state.codec.name,
        app.state.codec.kind.value,
        settings.route_pattern,
    )
    return app


app = create_app()
