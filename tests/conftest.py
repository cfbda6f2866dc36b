"""Shared test fixtures."""

from __future__ import annotations

import io
import threading
from pathlib import Path

import pytest
from PIL import Image

from siteimage.codecs.base import CodecResult, ServerImageCodec
from siteimage.engine.serializer import to_query_string
from siteimage.errors import CodecError
from siteimage.loader import ImageLoader
from siteimage.models.transform import ResolvedTransform


def make_image_bytes(size: tuple[int, int], fmt: str = "JPEG", mode: str = "RGB") -> bytes:
    color = (200, 80, 40, 128) if mode == "RGBA" else (200, 80, 40)
    img = Image.new(mode, size, color)
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


class CountingCodec(ServerImageCodec):
    """Records every transform; fails for sources containing "broken"."""

    name = "counting"

    def __init__(self) -> None:
        self.calls: list[ResolvedTransform] = []
        self._lock = threading.Lock()

    def transform(self, data: bytes, transform: ResolvedTransform) -> CodecResult:
        with self._lock:
            self.calls.append(transform)
        if "broken" in transform.src:
            raise CodecError(f"cannot decode {transform.src}")
        return CodecResult(data=b"img:" + to_query_string(transform).encode(), format=transform.format)


@pytest.fixture
def site_dir(tmp_path: Path) -> Path:
    """A site with public/cat.jpg (800x600), public/logo.png (RGBA) and src/assets/dog.png."""
    public = tmp_path / "public"
    public.mkdir()
    (public / "cat.jpg").write_bytes(make_image_bytes((800, 600)))
    (public / "logo.png").write_bytes(make_image_bytes((64, 32), fmt="PNG", mode="RGBA"))
    (public / "broken.jpg").write_bytes(b"definitely not an image")
    assets = tmp_path / "src" / "assets"
    assets.mkdir(parents=True)
    (assets / "dog.png").write_bytes(make_image_bytes((300, 200), fmt="PNG"))
    return tmp_path


@pytest.fixture
def loader(site_dir: Path) -> ImageLoader:
    return ImageLoader(src_dir=site_dir, public_dir="public")


@pytest.fixture
def counting_codec() -> CountingCodec:
    return CountingCodec()
