"""Delivery dispatcher — decides how a resolved transform reaches the page.

dev / server → URL on the image route carrying the serialized key
static       → content-addressed file path, registered for the build driver
Hosted codecs bypass both: their attributes are final.
"""

from __future__ import annotations

import logging
from typing import Any

from siteimage.codecs.base import CodecKind
from siteimage.engine.context import BuildContext, DeliveryMode
from siteimage.engine.resolver import resolve_transform
from siteimage.engine.serializer import to_query_string
from siteimage.errors import InvalidTransform
from siteimage.models.transform import ImageAttributes, ImageMetadata, ResolvedTransform, TransformRequest

logger = logging.getLogger(__name__)


class DeliveryDispatcher:
    def __init__(self, ctx: BuildContext) -> None:
        self.ctx = ctx

    def register(self, transform: ResolvedTransform) -> bool:
        return self.ctx.registry.register(transform)

    def resolve_delivery_path(self, transform: ResolvedTransform) -> str:
        mode = self.ctx.mode
        if mode is DeliveryMode.DEV or mode is DeliveryMode.SERVER:
            return f"{self.ctx.route_pattern}?{to_query_string(transform)}"
        if mode is DeliveryMode.STATIC:
            path = self.ctx.static_path(transform)
            self.register(transform)
            return "/" + path
        raise AssertionError(f"Unhandled delivery mode: {mode}")

    def get_image(
        self,
        request: TransformRequest,
        metadata: ImageMetadata | None = None,
        **attributes: Any,
    ) -> ImageAttributes:
        """Resolve ``request`` and return the ``<img>`` attributes for it.

        Extra keyword arguments (alt, loading, decoding, ...) are passed
        through to the returned attributes.
        """
        if not request.src:
            raise InvalidTransform('"src" is required')

        resolved = resolve_transform(request, metadata)
        codec = self.ctx.codec
        attrs = codec.get_image_attributes(resolved)
        attrs.extra.update(attributes)

        if codec.kind is CodecKind.SERVER:
            attrs.src = self.resolve_delivery_path(resolved)
        elif codec.kind is CodecKind.HOSTED:
            pass
        else:
            raise AssertionError(f"Unhandled codec kind: {codec.kind}")

        logger.debug("Image %s → %s", resolved.src, attrs.src)
        return attrs
