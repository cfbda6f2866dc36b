"""siteimage — image transforms for static and server-rendered sites.

Typical use while rendering pages::

    ctx = BuildContext(mode=DeliveryMode.STATIC, codec=PillowCodec())
    images = DeliveryDispatcher(ctx)
    attrs = images.get_image(TransformRequest(src="/cat.jpg", width=400, aspect_ratio="4:3", format="webp"))

and once every page has rendered::

    StaticBuildDriver(ImageLoader("site")).run(ctx, "dist")
"""

__version__ = "0.1.0"

from siteimage.codecs import CodecKind, create_codec
from siteimage.codecs.pillow import PillowCodec
from siteimage.engine.build import BuildReport, StaticBuildDriver
from siteimage.engine.config import BuildConfig
from siteimage.engine.context import BuildContext, DeliveryMode
from siteimage.engine.dispatcher import DeliveryDispatcher
from siteimage.engine.resolver import resolve_transform
from siteimage.engine.serializer import parse_transform, to_query_string
from siteimage.errors import (
    BuildAggregateError,
    CodecError,
    InvalidAspectRatio,
    InvalidTransform,
    SiteImageError,
    SourceNotFound,
)
from siteimage.loader import ImageLoader
from siteimage.models.transform import (
    ImageAttributes,
    ImageMetadata,
    OutputFormat,
    ResolvedTransform,
    TransformRequest,
)

__all__ = [
    "BuildAggregateError",
    "BuildConfig",
    "BuildContext",
    "BuildReport",
    "CodecError",
    "CodecKind",
    "DeliveryDispatcher",
    "DeliveryMode",
    "ImageAttributes",
    "ImageLoader",
    "ImageMetadata",
    "InvalidAspectRatio",
    "InvalidTransform",
    "OutputFormat",
    "PillowCodec",
    "ResolvedTransform",
    "SiteImageError",
    "SourceNotFound",
    "StaticBuildDriver",
    "TransformRequest",
    "create_codec",
    "parse_transform",
    "resolve_transform",
    "to_query_string",
]
