"""Path helpers shared by the serializer, dispatcher and loader."""

from __future__ import annotations

import re

_REMOTE_RE = re.compile(r"^(https?:)?//", re.IGNORECASE)
_UNSAFE_CHARS_RE = re.compile(r"[^A-Za-z0-9._-]+")


def is_remote_image(src: str) -> bool:
    return bool(_REMOTE_RE.match(src))


def slash(path: str) -> str:
    """Normalise Windows separators to forward slashes."""
    return path.replace("\\", "/")


def safe_segment(segment: str) -> str:
    """Reduce a path segment to ``[A-Za-z0-9._-]`` without leading/trailing dots.

    Returns an empty string for segments like ``..`` that carry no name.
    """
    return _UNSAFE_CHARS_RE.sub("-", segment).strip(".-")
