"""Transform serializer — canonical query strings and output filenames.

The query string is the SerializedKey: same transform, same string. Field
order is fixed (src, w, h, f, q) followed by codec options sorted by name,
and integers are written in plain decimal form.
"""

from __future__ import annotations

import hashlib
from collections.abc import Iterable, Mapping
from pathlib import PurePosixPath
from typing import Union
from urllib.parse import parse_qsl, urlencode, urlsplit

from siteimage.errors import InvalidTransform
from siteimage.models.transform import OutputFormat, ResolvedTransform
from siteimage.utils.paths import is_remote_image, safe_segment

PARAM_SRC = "src"
PARAM_WIDTH = "w"
PARAM_HEIGHT = "h"
PARAM_FORMAT = "f"
PARAM_QUALITY = "q"

RESERVED_PARAMS = frozenset({PARAM_SRC, PARAM_WIDTH, PARAM_HEIGHT, PARAM_FORMAT, PARAM_QUALITY})

# Filename stems longer than this are truncated; the key hash keeps them unique
_MAX_STEM_LENGTH = 64
_HASH_LENGTH = 10

DEFAULT_STATIC_PREFIX = "_image"

QueryInput = Union[str, Mapping[str, str], Iterable[tuple[str, str]]]


def serialize_transform(t: ResolvedTransform) -> list[tuple[str, str]]:
    """Return the ordered (name, value) pairs for ``t``."""
    params = [
        (PARAM_SRC, t.src),
        (PARAM_WIDTH, str(t.width)),
        (PARAM_HEIGHT, str(t.height)),
        (PARAM_FORMAT, t.format.value),
    ]
    if t.quality is not None:
        params.append((PARAM_QUALITY, str(t.quality)))
    params.extend(sorted(t.options))
    return params


def to_query_string(t: ResolvedTransform) -> str:
    return urlencode(serialize_transform(t))


def _pairs(query: QueryInput) -> list[tuple[str, str]]:
    if isinstance(query, str):
        return parse_qsl(query.lstrip("?"), keep_blank_values=True)
    if isinstance(query, Mapping):
        return [(str(k), str(v)) for k, v in query.items()]
    return [(str(k), str(v)) for k, v in query]


def _parse_int(name: str, raw: str | None, required: bool = True) -> int | None:
    if raw is None:
        if required:
            raise InvalidTransform(f'Missing required parameter "{name}"')
        return None
    # Canonical form only: no signs, no leading zeros
    if not (raw.isascii() and raw.isdigit()) or raw.startswith("0"):
        raise InvalidTransform(f'Parameter "{name}" must be a positive integer, got {raw!r}')
    return int(raw)


def parse_transform(query: QueryInput) -> ResolvedTransform:
    """Parse a query string (or mapping of params) back into a ResolvedTransform.

    Raises:
        InvalidTransform: a required parameter is missing, repeated or malformed.
    """
    fields: dict[str, str] = {}
    options: dict[str, str] = {}
    for name, value in _pairs(query):
        target = fields if name in RESERVED_PARAMS else options
        if name in target:
            raise InvalidTransform(f'Parameter "{name}" given more than once')
        target[name] = value

    src = fields.get(PARAM_SRC)
    if not src:
        raise InvalidTransform(f'Missing required parameter "{PARAM_SRC}"')

    raw_format = fields.get(PARAM_FORMAT)
    if not raw_format:
        raise InvalidTransform(f'Missing required parameter "{PARAM_FORMAT}"')
    try:
        fmt = OutputFormat.parse(raw_format)
    except ValueError:
        raise InvalidTransform(f"Unsupported output format {raw_format!r}") from None

    quality = _parse_int(PARAM_QUALITY, fields.get(PARAM_QUALITY), required=False)
    if quality is not None and quality > 100:
        raise InvalidTransform(f'Parameter "{PARAM_QUALITY}" must be in 1..100, got {quality}')

    return ResolvedTransform(
        src=src,
        width=_parse_int(PARAM_WIDTH, fields.get(PARAM_WIDTH)),  # type: ignore[arg-type]
        height=_parse_int(PARAM_HEIGHT, fields.get(PARAM_HEIGHT)),  # type: ignore[arg-type]
        format=fmt,
        quality=quality,
        options=tuple(sorted(options.items())),
    )


def key_digest(key: str) -> str:
    return hashlib.sha256(key.encode("utf-8")).hexdigest()[:_HASH_LENGTH]


def props_to_filename(t: ResolvedTransform) -> str:
    """Build a filesystem-safe relative path for ``t``.

    Layout: ``<source dirs>/<stem>_<hash>.<ext>``; remote sources live under
    ``remote/<host>/``. The hash covers the whole SerializedKey.
    """
    if is_remote_image(t.src):
        parts = urlsplit(t.src if "://" in t.src else f"https:{t.src}")
        path = PurePosixPath(parts.path or "/image")
        dirs = ["remote", parts.hostname or "unknown", *path.parent.parts]
    else:
        path = PurePosixPath(t.src.split("?", 1)[0].replace("\\", "/"))
        dirs = list(path.parent.parts)

    safe_dirs = [s for s in (safe_segment(d) for d in dirs) if s]
    stem = safe_segment(path.stem)[:_MAX_STEM_LENGTH].rstrip(".-") or "image"
    filename = f"{stem}_{key_digest(to_query_string(t))}.{t.format.extension}"
    return "/".join([*safe_dirs, filename])


def filename_format(t: ResolvedTransform, key: str, prefix: str = DEFAULT_STATIC_PREFIX) -> str:
    """Default static output path: ``<prefix>/<props_to_filename(t)>``."""
    prefix = "/".join(s for s in (safe_segment(p) for p in prefix.split("/")) if s)
    name = props_to_filename(t)
    return f"{prefix}/{name}" if prefix else name
