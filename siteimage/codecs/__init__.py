"""Codec selection. The codec is chosen once at start-up and injected."""

from __future__ import annotations

from typing import TYPE_CHECKING

from siteimage.codecs.base import CodecKind, CodecResult, HostedImageCodec, ImageCodec, ServerImageCodec

if TYPE_CHECKING:
    from siteimage.config import Settings

__all__ = [
    "CodecKind",
    "CodecResult",
    "HostedImageCodec",
    "ImageCodec",
    "ServerImageCodec",
    "available_codecs",
    "create_codec",
]


def _pillow(settings: Settings) -> ImageCodec:
    from siteimage.codecs.pillow import PillowCodec

    return PillowCodec(default_quality=settings.default_quality)


def _cdn(settings: Settings) -> ImageCodec:
    from siteimage.codecs.cdn import CdnCodec

    return CdnCodec(base_url=settings.cdn_base_url)


_FACTORIES = {
    "pillow": _pillow,
    "cdn": _cdn,
}


def available_codecs() -> list[str]:
    return sorted(_FACTORIES)


def create_codec(name: str, settings: Settings) -> ImageCodec:
    try:
        factory = _FACTORIES[name]
    except KeyError:
        raise ValueError(f"Unknown codec {name!r} (available: {', '.join(available_codecs())})") from None
    return factory(settings)
