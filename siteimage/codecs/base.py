"""Image codec interface.

A codec comes in one of two kinds:
- SERVER: transforms bytes locally; pages get URLs pointing at the image
  route (or at pre-built files in static builds)
- HOSTED: an external service does the work; attributes are final as returned
"""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass

from siteimage.engine.serializer import QueryInput, parse_transform, serialize_transform
from siteimage.errors import InvalidTransform
from siteimage.models.transform import ImageAttributes, OutputFormat, ResolvedTransform


class CodecKind(enum.Enum):
    SERVER = "server"
    HOSTED = "hosted"


@dataclass
class CodecResult:
    data: bytes
    format: OutputFormat


class ImageCodec(ABC):
    name: str = ""
    kind: CodecKind

    def get_image_attributes(self, transform: ResolvedTransform) -> ImageAttributes:
        return ImageAttributes(src=transform.src, width=transform.width, height=transform.height)


class ServerImageCodec(ImageCodec):
    """Base for codecs that transform bytes in-process."""

    kind = CodecKind.SERVER

    def parse_transform(self, params: QueryInput) -> ResolvedTransform | None:
        try:
            return parse_transform(params)
        except InvalidTransform:
            return None

    def serialize_transform(self, transform: ResolvedTransform) -> list[tuple[str, str]]:
        return serialize_transform(transform)

    @abstractmethod
    def transform(self, data: bytes, transform: ResolvedTransform) -> CodecResult:
        """Return ``data`` resized and re-encoded per ``transform``.

        Raises:
            CodecError: decoding or encoding failed.
        """


class HostedImageCodec(ImageCodec):
    """Base for codecs backed by an external image service."""

    kind = CodecKind.HOSTED

    @abstractmethod
    def get_image_attributes(self, transform: ResolvedTransform) -> ImageAttributes:
        ...
