"""Tests for the image loader."""

import httpx
import pytest

from siteimage.errors import CodecError, SourceNotFound
from siteimage.loader import ImageLoader
from siteimage.models.transform import ImageMetadata
from tests.conftest import make_image_bytes


def test_public_dir_first(site_dir, loader):
    assert loader.load_image("/cat.jpg") == (site_dir / "public" / "cat.jpg").read_bytes()


def test_src_dir_fallback(loader):
    assert loader.load_image("src/assets/dog.png") is not None


def test_missing_returns_none(loader):
    assert loader.load_image("/nope.png") is None
    assert loader.load_image("/") is None


def test_traversal_rejected(site_dir, loader):
    (site_dir.parent / "secret.png").write_bytes(b"x")
    assert loader.load_image("/../../secret.png") is None


def test_require_image(loader):
    with pytest.raises(SourceNotFound) as exc_info:
        loader.require_image("/nope.png")
    assert exc_info.value.src == "/nope.png"


def test_read_metadata(loader):
    assert loader.read_metadata("/cat.jpg") == ImageMetadata(src="/cat.jpg", width=800, height=600, format="jpeg")


def test_read_metadata_of_garbage(loader):
    with pytest.raises(CodecError):
        loader.read_metadata("/broken.jpg")


def _mock_client(routes: dict[str, httpx.Response]) -> httpx.Client:
    def handler(request: httpx.Request) -> httpx.Response:
        return routes.get(str(request.url), httpx.Response(404))

    return httpx.Client(transport=httpx.MockTransport(handler))


def test_remote_image(site_dir):
    body = make_image_bytes((5, 5), fmt="PNG")
    client = _mock_client({"https://example.com/a.png": httpx.Response(200, content=body)})
    loader = ImageLoader(site_dir, client=client)
    assert loader.load_image("https://example.com/a.png") == body
    assert loader.load_image("//example.com/a.png") == body
    assert loader.load_image("https://example.com/missing.png") is None


def test_remote_server_error_raises(site_dir):
    client = _mock_client({"https://example.com/a.png": httpx.Response(503)})
    with pytest.raises(httpx.HTTPStatusError):
        ImageLoader(site_dir, client=client).load_image("https://example.com/a.png")
