"""Image loader — fetches source bytes from disk or over HTTP."""

from __future__ import annotations

import io
import logging
from pathlib import Path

import httpx
from PIL import Image, UnidentifiedImageError

from siteimage.errors import CodecError, SourceNotFound
from siteimage.models.transform import ImageMetadata
from siteimage.utils.paths import is_remote_image

logger = logging.getLogger(__name__)


class ImageLoader:
    """Loads source images.

    Local sources (``/cat.jpg``) are looked up under ``public_dir`` first,
    then ``src_dir``; paths escaping those roots are treated as missing.
    Remote sources (``https://...``) are fetched with httpx.
    """

    def __init__(
        self,
        src_dir: str | Path = ".",
        public_dir: str | Path | None = "public",
        timeout: float = 10.0,
        client: httpx.Client | None = None,
    ) -> None:
        self.src_dir = Path(src_dir).resolve()
        roots = []
        if public_dir is not None:
            public = Path(public_dir)
            roots.append((public if public.is_absolute() else self.src_dir / public).resolve())
        roots.append(self.src_dir)
        self.roots = roots
        self.timeout = timeout
        self._client = client

    def _local_path(self, src: str) -> Path | None:
        relative = src.split("?", 1)[0].replace("\\", "/").lstrip("/")
        if not relative:
            return None
        for root in self.roots:
            candidate = (root / relative).resolve()
            if not candidate.is_relative_to(root):
                logger.warning("Rejected source outside %s: %s", root, src)
                continue
            if candidate.is_file():
                return candidate
        return None

    def _fetch(self, url: str) -> bytes | None:
        if url.startswith("//"):
            url = f"https:{url}"
        if self._client is not None:
            response = self._client.get(url)
        else:
            with httpx.Client(timeout=self.timeout, follow_redirects=True) as client:
                response = client.get(url)
        if response.status_code == 404:
            return None
        response.raise_for_status()
        return response.content

    def load_image(self, src: str) -> bytes | None:
        """Return the bytes of ``src``, or None when it does not exist."""
        if is_remote_image(src):
            return self._fetch(src)
        path = self._local_path(src)
        if path is None:
            return None
        return path.read_bytes()

    def require_image(self, src: str) -> bytes:
        data = self.load_image(src)
        if data is None:
            raise SourceNotFound(src)
        return data

    def read_metadata(self, src: str) -> ImageMetadata:
        """Read natural size and format of ``src`` from its header.

        Raises:
            SourceNotFound: the image does not exist.
            CodecError: the bytes are not a recognised image.
        """
        data = self.require_image(src)
        try:
            with Image.open(io.BytesIO(data)) as img:
                width, height = img.size
                fmt = (img.format or "").lower()
        except UnidentifiedImageError as e:
            raise CodecError(f"Cannot identify image {src}", original=e) from e
        return ImageMetadata(src=src, width=width, height=height, format=fmt)
