"""FastAPI dependency injection.

The codec and loader are built once in ``create_app`` and kept on
``app.state``; handlers receive them through these dependencies.
"""

from __future__ import annotations

from fastapi import Request

from siteimage.codecs.base import ImageCodec
from siteimage.config import Settings
from siteimage.loader import ImageLoader


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_codec(request: Request) -> ImageCodec:
    return request.app.state.codec


def get_loader(request: Request) -> ImageLoader:
    return request.app.state.loader
