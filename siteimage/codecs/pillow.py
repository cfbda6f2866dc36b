"""Pillow-backed codec — decode, resize, re-encode in-process."""

from __future__ import annotations

import io
import logging

from PIL import Image, ImageColor, ImageOps, UnidentifiedImageError

from siteimage.codecs.base import CodecResult, ServerImageCodec
from siteimage.errors import CodecError
from siteimage.models.transform import OutputFormat, ResolvedTransform

logger = logging.getLogger(__name__)

_PIL_FORMATS = {
    OutputFormat.AVIF: "AVIF",
    OutputFormat.JPEG: "JPEG",
    OutputFormat.PNG: "PNG",
    OutputFormat.WEBP: "WEBP",
}

FIT_FILL = "fill"
FIT_COVER = "cover"
FIT_CONTAIN = "contain"
_FITS = {FIT_FILL, FIT_COVER, FIT_CONTAIN}

# JPEG has no alpha channel; transparent pixels are flattened onto this
_DEFAULT_BACKGROUND = "#ffffff"


class PillowCodec(ServerImageCodec):
    """Local codec built on Pillow.

    Supported options:
        fit: ``fill`` (stretch, default), ``cover`` (crop) or ``contain`` (letterbox)
        bg: background colour used for letterboxing and alpha flattening
    """

    name = "pillow"

    def __init__(self, default_quality: int = 80) -> None:
        self.default_quality = default_quality

    def transform(self, data: bytes, transform: ResolvedTransform) -> CodecResult:
        fit = transform.option("fit", FIT_FILL)
        if fit not in _FITS:
            raise CodecError(f"Unsupported fit {fit!r} (expected one of: {', '.join(sorted(_FITS))})")

        try:
            with Image.open(io.BytesIO(data)) as img:
                img = ImageOps.exif_transpose(img)
                resized = self._resize(img, transform, fit)
                encoded = self._encode(resized, transform)
        except CodecError:
            raise
        except (UnidentifiedImageError, OSError, ValueError, KeyError) as e:
            raise CodecError(f"Failed to transform {transform.src}: {e}", original=e) from e

        logger.debug(
            "Transformed %s → %dx%d %s (%d bytes)",
            transform.src,
            transform.width,
            transform.height,
            transform.format.value,
            len(encoded),
        )
        return CodecResult(data=encoded, format=transform.format)

    def _background(self, transform: ResolvedTransform) -> tuple[int, ...]:
        raw = transform.option("bg", _DEFAULT_BACKGROUND) or _DEFAULT_BACKGROUND
        try:
            return ImageColor.getrgb(raw)
        except ValueError as e:
            raise CodecError(f"Invalid background colour {raw!r}", original=e) from e

    def _resize(self, img: Image.Image, transform: ResolvedTransform, fit: str) -> Image.Image:
        size = (transform.width, transform.height)
        if img.mode not in ("RGB", "RGBA", "L", "LA"):
            img = img.convert("RGBA" if "transparency" in img.info or img.mode == "P" else "RGB")

        if fit == FIT_COVER:
            return ImageOps.fit(img, size, Image.Resampling.LANCZOS)
        if fit == FIT_CONTAIN:
            color = self._background(transform) if "bg" in dict(transform.options) else None
            return ImageOps.pad(img, size, Image.Resampling.LANCZOS, color=color)
        return img.resize(size, Image.Resampling.LANCZOS)

    def _encode(self, img: Image.Image, transform: ResolvedTransform) -> bytes:
        fmt = transform.format
        if fmt is OutputFormat.JPEG and img.mode != "RGB":
            if img.mode in ("RGBA", "LA"):
                background = Image.new("RGB", img.size, self._background(transform)[:3])
                background.paste(img, mask=img.getchannel("A"))
                img = background
            else:
                img = img.convert("RGB")

        params: dict[str, object] = {}
        if fmt is not OutputFormat.PNG:
            params["quality"] = transform.quality or self.default_quality
        if fmt is OutputFormat.PNG:
            params["optimize"] = True

        buf = io.BytesIO()
        img.save(buf, format=_PIL_FORMATS[fmt], **params)
        return buf.getvalue()
