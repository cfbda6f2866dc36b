"""Transform resolver — turns a partial TransformRequest into a ResolvedTransform.

Sizing rules:
- width and height both given → kept as-is (explicit values win over aspect ratio)
- neither given → natural size from metadata
- one given → the other is derived from the aspect ratio (explicit, else metadata)

Derived dimensions use half-up rounding, floor(x + 0.5). That is what the
host runtime's Math.round does for positive values, so keys produced here
match keys produced by page code.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping

from siteimage.engine.serializer import RESERVED_PARAMS
from siteimage.errors import InvalidAspectRatio, InvalidTransform
from siteimage.models.transform import (
    AspectRatio,
    ImageMetadata,
    OutputFormat,
    ResolvedTransform,
    TransformRequest,
)

_RATIO_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*:\s*(\d+(?:\.\d+)?)\s*$")


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def parse_aspect_ratio(aspect_ratio: AspectRatio | None) -> float | None:
    """Parse a numeric ratio or a ``"W:H"`` string into ``W / H``."""
    if aspect_ratio is None:
        return None
    if isinstance(aspect_ratio, bool):
        raise InvalidAspectRatio(f"Invalid aspect ratio: {aspect_ratio!r}")
    if isinstance(aspect_ratio, (int, float)):
        if not math.isfinite(aspect_ratio) or aspect_ratio <= 0:
            raise InvalidAspectRatio(f"Aspect ratio must be positive, got {aspect_ratio!r}")
        return float(aspect_ratio)

    match = _RATIO_RE.match(str(aspect_ratio))
    if not match:
        raise InvalidAspectRatio(f'Aspect ratio must look like "16:9", got {aspect_ratio!r}')
    w, h = float(match.group(1)), float(match.group(2))
    if w <= 0 or h <= 0:
        raise InvalidAspectRatio(f"Aspect ratio sides must be positive, got {aspect_ratio!r}")
    return w / h


def _check_dimension(name: str, value: int | None) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidTransform(f'"{name}" must be a positive integer, got {value!r}')
    return value


def _check_quality(quality: int | None) -> int | None:
    if quality is None:
        return None
    if isinstance(quality, bool) or not isinstance(quality, int) or not 1 <= quality <= 100:
        raise InvalidTransform(f'"quality" must be an integer in 1..100, got {quality!r}')
    return quality


def _parse_format(value: object) -> OutputFormat:
    try:
        return OutputFormat.parse(value)  # type: ignore[arg-type]
    except ValueError:
        supported = ", ".join(f.value for f in OutputFormat)
        raise InvalidTransform(f"Unsupported output format {value!r} (expected one of: {supported})") from None


def normalize_options(options: Mapping[str, object] | None) -> tuple[tuple[str, str], ...]:
    if not options:
        return ()
    pairs = []
    for key, value in options.items():
        if not isinstance(key, str) or not key:
            raise InvalidTransform(f"Option names must be non-empty strings, got {key!r}")
        if key in RESERVED_PARAMS:
            raise InvalidTransform(f'Option "{key}" collides with a reserved transform field')
        pairs.append((key, str(value)))
    return tuple(sorted(pairs))


def _derive_size(
    width: int | None,
    height: int | None,
    ratio: float | None,
) -> tuple[int, int]:
    given = "width" if width is not None else "height"
    if ratio is None:
        raise InvalidTransform(f'"aspect_ratio" must be included if only "{given}" is provided')
    if width is not None:
        return width, max(1, round_half_up(width / ratio))
    if height is not None:
        return max(1, round_half_up(height * ratio)), height
    raise InvalidTransform('"width" and "height" cannot both be undefined')


def resolve_transform(
    request: TransformRequest,
    metadata: ImageMetadata | None = None,
) -> ResolvedTransform:
    """Resolve ``request`` into a fully specified transform.

    ``metadata`` is only used when passed explicitly or when ``request.src``
    is itself an ``ImageMetadata``; a plain string src never triggers a lookup.

    Raises:
        InvalidTransform: sizing or format cannot be determined.
        InvalidAspectRatio: the aspect ratio string is malformed.
    """
    if isinstance(request.src, ImageMetadata):
        metadata = request.src
        src = request.src.src
    else:
        src = request.src
    if not src:
        raise InvalidTransform('"src" is required')

    width = _check_dimension("width", request.width)
    height = _check_dimension("height", request.height)
    ratio = parse_aspect_ratio(request.aspect_ratio)

    if width is not None and height is not None:
        pass
    elif width is None and height is None:
        if metadata is None:
            raise InvalidTransform('"width" and "height" cannot both be undefined')
        width, height = metadata.width, metadata.height
    else:
        if ratio is None and metadata is not None and metadata.height:
            ratio = metadata.width / metadata.height
        width, height = _derive_size(width, height, ratio)

    fmt = request.format
    if fmt is None:
        if metadata is None:
            raise InvalidTransform('"format" is required when no source metadata is available')
        fmt = metadata.format

    return ResolvedTransform(
        src=src,
        width=width,
        height=height,
        format=_parse_format(fmt),
        quality=_check_quality(request.quality),
        options=normalize_options(request.options),
    )
