"""Static image build from a JSON manifest.

Usage:
  siteimage-build manifest.json --out dist
  siteimage-build manifest.json --out dist --on-error continue --workers 4

Manifest layout:
  {"pages": [{"path": "index.html",
              "images": [{"src": "/cat.jpg", "width": 400, "format": "webp", "alt": "A cat"}]}]}

Writes the rendered images under --out plus ``images.json`` mapping each
page to the ``<img>`` attributes it should use.

Images that cannot be resolved (missing source, bad sizing) and images that
fail to render are collected together and handled by --on-error:
  abort     log every failure, write nothing else, exit 1
  continue  write images.json without the failed images, exit 2
A clean build exits 0.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any

from siteimage.codecs import create_codec
from siteimage.config import LOG_FORMAT, settings
from siteimage.engine.build import StaticBuildDriver
from siteimage.engine.config import ON_ERROR_ABORT, ON_ERROR_CONTINUE, BuildConfig
from siteimage.engine.context import BuildContext, DeliveryMode
from siteimage.engine.dispatcher import DeliveryDispatcher
from siteimage.errors import BuildAggregateError, BuildFailure, SiteImageError
from siteimage.loader import ImageLoader
from siteimage.models.transform import TransformRequest
from siteimage.utils.paths import is_remote_image

logger = logging.getLogger("siteimage.cli")

_REQUEST_FIELDS = {"src", "width", "height", "aspect_ratio", "format", "quality", "options"}

OUTPUT_MANIFEST = "images.json"


def render_pages(
    manifest: dict[str, Any],
    dispatcher: DeliveryDispatcher,
    loader: ImageLoader,
) -> tuple[dict[str, list[dict[str, Any]]], list[BuildFailure]]:
    """Collection phase: resolve every image of every page through the dispatcher.

    An image that cannot be resolved is left out of its page and recorded as
    a failure instead of stopping the collection.
    """
    rendered: dict[str, list[dict[str, Any]]] = {}
    failures: list[BuildFailure] = []
    for page in manifest.get("pages", []):
        page_path = page["path"]
        attrs_list = []
        for image in page.get("images", []):
            fields = {k: v for k, v in image.items() if k in _REQUEST_FIELDS}
            html_attrs = {k: v for k, v in image.items() if k not in _REQUEST_FIELDS}
            request = TransformRequest(**fields)
            try:
                metadata = None
                if _needs_metadata(request):
                    # Local images get their natural size, like a bundler import would
                    metadata = loader.read_metadata(request.src)
                attrs = dispatcher.get_image(request, metadata, **html_attrs)
            except SiteImageError as e:
                failures.append(BuildFailure(src=str(request.src), key="", error=f"{page_path}: {e}"))
                logger.warning("  %s on %s FAILED: %s", request.src, page_path, e)
                continue
            attrs_list.append(attrs.to_dict())
        rendered[page_path] = attrs_list
    return rendered, failures


def _needs_metadata(request: TransformRequest) -> bool:
    if not isinstance(request.src, str) or is_remote_image(request.src):
        return False
    return request.width is None or request.height is None or request.format is None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="siteimage-build", description="Render static images from a manifest")
    parser.add_argument("manifest", type=Path, help="JSON manifest listing pages and their images")
    parser.add_argument("-o", "--out", type=Path, required=True, help="Build output directory")
    parser.add_argument("--src-dir", default=settings.src_dir, help="Directory holding source images")
    parser.add_argument("--public-dir", default=settings.public_dir, help="Public assets directory")
    parser.add_argument(
        "--on-error",
        choices=[ON_ERROR_ABORT, ON_ERROR_CONTINUE],
        default=settings.build_on_error,
        help="Abort the build on any failed image (default) or continue and report",
    )
    parser.add_argument("--workers", type=int, default=settings.build_max_workers, help="Max parallel codec jobs")
    parser.add_argument("--log-level", default=settings.log_level)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO), format=LOG_FORMAT)

    manifest = json.loads(args.manifest.read_text(encoding="utf-8"))
    loader = ImageLoader(args.src_dir, args.public_dir, timeout=settings.remote_timeout_seconds)
    ctx = BuildContext(
        mode=DeliveryMode.STATIC,
        codec=create_codec(settings.codec, settings),
        route_pattern=settings.route_pattern,
        static_prefix=settings.static_prefix,
    )
    if args.workers:
        config = BuildConfig(max_workers=args.workers, on_error=args.on_error)
    else:
        config = BuildConfig(on_error=args.on_error)

    rendered, failures = render_pages(manifest, DeliveryDispatcher(ctx), loader)
    # The driver always reports; the policy is applied once to the merged failures
    report = StaticBuildDriver(loader, replace(config, on_error=ON_ERROR_CONTINUE)).run(ctx, args.out)
    failures = sorted(failures + report.failures, key=lambda f: (f.src, f.key))

    if failures and config.on_error == ON_ERROR_ABORT:
        logger.error("%s", BuildAggregateError(failures))
        return 1

    args.out.mkdir(parents=True, exist_ok=True)
    (args.out / OUTPUT_MANIFEST).write_text(json.dumps(rendered, indent=2), encoding="utf-8")
    logger.info("Wrote %d image(s), %d failure(s)", len(report.written), len(failures))
    return 2 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
