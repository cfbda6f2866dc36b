"""BuildContext — the state shared by page rendering and the static build.

One context per build invocation. Pages register transforms through the
dispatcher; the build driver consumes the registry afterwards.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Callable

from siteimage.codecs.base import ImageCodec
from siteimage.engine.registry import StaticImageRegistry
from siteimage.engine.serializer import DEFAULT_STATIC_PREFIX, filename_format, to_query_string
from siteimage.errors import InvalidTransform
from siteimage.models.transform import ResolvedTransform
from siteimage.utils.paths import slash

# (transform, serialized key) → output path relative to the build directory
FilenameFormat = Callable[[ResolvedTransform, str], str]


class DeliveryMode(enum.Enum):
    DEV = "dev"
    SERVER = "server"
    STATIC = "static"


@dataclass
class BuildContext:
    """Shared state for one build (or one running server)."""

    mode: DeliveryMode
    codec: ImageCodec
    registry: StaticImageRegistry = field(default_factory=StaticImageRegistry)
    route_pattern: str = "/_image"
    static_prefix: str = DEFAULT_STATIC_PREFIX
    # Overrides the default "<static_prefix>/<dirs>/<stem>_<hash>.<ext>" layout
    filename_format: FilenameFormat | None = None

    def static_path(self, transform: ResolvedTransform) -> str:
        """Output path of ``transform`` relative to the build directory, no leading slash.

        Raises:
            InvalidTransform: a filename override produced an empty path or a ``..`` segment.
        """
        key = to_query_string(transform)
        if self.filename_format is not None:
            path = self.filename_format(transform, key)
        else:
            path = filename_format(transform, key, prefix=self.static_prefix)
        path = slash(path).lstrip("/")
        segments = path.split("/")
        if not path or ".." in segments:
            raise InvalidTransform(f"Static output path {path!r} must stay inside the build directory")
        return path
