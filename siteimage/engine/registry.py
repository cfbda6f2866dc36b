"""Static image registry — every transform requested while rendering a static build.

Layout: src → {SerializedKey → ResolvedTransform}. Registration is idempotent,
so a (src, transform) pair is built at most once no matter how many pages
ask for it.
"""

from __future__ import annotations

import logging
import threading

from siteimage.engine.serializer import to_query_string
from siteimage.models.transform import ResolvedTransform

logger = logging.getLogger(__name__)


class StaticImageRegistry:
    """Per-build registry of requested transforms."""

    def __init__(self) -> None:
        self._images: dict[str, dict[str, ResolvedTransform]] = {}
        self._lock = threading.Lock()
        self._frozen = False

    def register(self, transform: ResolvedTransform) -> bool:
        """Add ``transform``; returns False when the same key was already registered."""
        key = to_query_string(transform)
        with self._lock:
            if self._frozen:
                raise RuntimeError("Registry is frozen: the build phase has already started")
            transforms = self._images.setdefault(transform.src, {})
            if key in transforms:
                return False
            transforms[key] = transform
        logger.debug("Registered static image %s [%s]", transform.src, key)
        return True

    def get(self, src: str, key: str) -> ResolvedTransform | None:
        return self._images.get(src, {}).get(key)

    def entries(self) -> list[tuple[str, ResolvedTransform]]:
        """All (key, transform) pairs sorted by (src, key) for reproducible builds."""
        return [
            (key, self._images[src][key])
            for src in sorted(self._images)
            for key in sorted(self._images[src])
        ]

    def freeze(self) -> None:
        """Close the collection phase; later registrations raise."""
        with self._lock:
            self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def sources(self) -> list[str]:
        return sorted(self._images)

    @property
    def count(self) -> int:
        return sum(len(t) for t in self._images.values())

    def __len__(self) -> int:
        return self.count
