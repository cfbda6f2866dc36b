"""Hosted codec — images are resized by a CDN via URL parameters."""

from __future__ import annotations

from urllib.parse import urlencode

from siteimage.codecs.base import HostedImageCodec
from siteimage.models.transform import ImageAttributes, ResolvedTransform
from siteimage.utils.paths import is_remote_image


class CdnCodec(HostedImageCodec):
    """Builds CDN URLs of the form ``<base_url><src>?w=..&h=..&fm=..[&q=..]``.

    Remote sources are passed through as a ``url`` parameter instead of being
    appended to the base URL.
    """

    name = "cdn"

    def __init__(self, base_url: str) -> None:
        if not base_url:
            raise ValueError("CdnCodec requires a base URL")
        self.base_url = base_url.rstrip("/")

    def get_image_attributes(self, transform: ResolvedTransform) -> ImageAttributes:
        params: list[tuple[str, str]] = [
            ("w", str(transform.width)),
            ("h", str(transform.height)),
            ("fm", transform.format.value),
        ]
        if transform.quality is not None:
            params.append(("q", str(transform.quality)))
        params.extend(transform.options)

        if is_remote_image(transform.src):
            src = f"{self.base_url}/?{urlencode([('url', transform.src), *params])}"
        else:
            src = f"{self.base_url}/{transform.src.lstrip('/')}?{urlencode(params)}"

        return ImageAttributes(src=src, width=transform.width, height=transform.height)
