"""Transform data model — requests, resolved transforms, metadata, attributes.

TransformRequest  → partial input from a page/component
ResolvedTransform → fully specified output of the resolver (hashable, frozen)
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Mapping, Union


class OutputFormat(str, enum.Enum):
    AVIF = "avif"
    JPEG = "jpeg"
    PNG = "png"
    WEBP = "webp"

    @property
    def mime_type(self) -> str:
        return f"image/{self.value}"

    @property
    def extension(self) -> str:
        return "jpg" if self is OutputFormat.JPEG else self.value

    @classmethod
    def parse(cls, value: str | OutputFormat) -> OutputFormat:
        """Parse a format name, accepting ``jpg`` as an alias of ``jpeg``."""
        if isinstance(value, OutputFormat):
            return value
        name = str(value).strip().lower()
        if name == "jpg":
            name = "jpeg"
        return cls(name)


@dataclass(frozen=True)
class ImageMetadata:
    """Natural size and format of a source image."""

    src: str
    width: int
    height: int
    format: str


AspectRatio = Union[int, float, str]


@dataclass(frozen=True)
class TransformRequest:
    src: str | ImageMetadata
    width: int | None = None
    height: int | None = None
    aspect_ratio: AspectRatio | None = None
    format: str | OutputFormat | None = None
    quality: int | None = None
    # Codec-specific options, e.g. {"fit": "cover"}
    options: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ResolvedTransform:
    src: str
    width: int
    height: int
    format: OutputFormat
    quality: int | None = None
    # Sorted (key, value) pairs so equal options compare and hash equal
    options: tuple[tuple[str, str], ...] = ()

    def option(self, name: str, default: str | None = None) -> str | None:
        return dict(self.options).get(name, default)


@dataclass
class ImageAttributes:
    """HTML attributes for an ``<img>`` element."""

    src: str
    width: int
    height: int
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {**self.extra, "src": self.src, "width": self.width, "height": self.height}
