"""Static build driver — renders every registered transform to disk once."""

from __future__ import annotations

import logging
import shutil
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path

from siteimage.codecs.base import CodecKind, ServerImageCodec
from siteimage.engine.config import ON_ERROR_ABORT, BuildConfig
from siteimage.engine.context import BuildContext
from siteimage.errors import BuildAggregateError, BuildFailure, InvalidTransform, SourceNotFound
from siteimage.loader import ImageLoader
from siteimage.models.transform import ResolvedTransform

logger = logging.getLogger(__name__)

# Extensions mirrored into server builds so the image route can find originals
SOURCE_IMAGE_EXTENSIONS = frozenset({".avif", ".gif", ".jpeg", ".jpg", ".png", ".svg", ".tif", ".tiff", ".webp"})


@dataclass
class BuildReport:
    written: list[Path] = field(default_factory=list)
    failures: list[BuildFailure] = field(default_factory=list)
    elapsed_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return not self.failures


class StaticBuildDriver:
    """Runs the codec once per unique (src, key) entry of a build's registry."""

    def __init__(self, loader: ImageLoader, config: BuildConfig | None = None) -> None:
        self.loader = loader
        self.config = config or BuildConfig()

    def run(self, ctx: BuildContext, out_dir: str | Path) -> BuildReport:
        """Build all registered images into ``out_dir``.

        Freezes the registry first: registration is over once the build starts.

        Raises:
            BuildAggregateError: one or more entries failed and the policy is "abort".
        """
        start = time.perf_counter()
        ctx.registry.freeze()
        report = BuildReport()

        if ctx.codec.kind is CodecKind.HOSTED:
            logger.info("Static build: codec %s is hosted, nothing to render", ctx.codec.name)
            return report
        codec = ctx.codec
        if not isinstance(codec, ServerImageCodec):
            raise TypeError(f"Codec {codec.name!r} is tagged as server-side but cannot transform images")

        entries = ctx.registry.entries()
        out = Path(out_dir)
        jobs = self._plan_outputs(ctx, entries, report)
        workers = min(self.config.max_workers, max(1, len(jobs)))
        logger.info("Static build: %d image(s) queued on %d worker(s)", len(jobs), workers)

        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = {
                pool.submit(self._build_one, codec, transform, out / path): (key, transform)
                for key, transform, path in jobs
            }
            for future in as_completed(futures):
                key, transform = futures[future]
                try:
                    report.written.append(future.result())
                except Exception as e:
                    report.failures.append(BuildFailure(src=transform.src, key=key, error=str(e)))
                    logger.warning("  %s [%s] FAILED: %s", transform.src, key, e)

        report.written.sort()
        report.failures.sort(key=lambda f: (f.src, f.key))
        report.elapsed_ms = round((time.perf_counter() - start) * 1000, 1)
        logger.info(
            "Static build complete: %d/%d images in %.0fms",
            len(report.written),
            len(entries),
            report.elapsed_ms,
        )

        if report.failures and self.config.on_error == ON_ERROR_ABORT:
            raise BuildAggregateError(report.failures)
        return report

    def _plan_outputs(
        self,
        ctx: BuildContext,
        entries: list[tuple[str, ResolvedTransform]],
        report: BuildReport,
    ) -> list[tuple[str, ResolvedTransform, str]]:
        """Compute each entry's output path; entries sharing a path are all failed."""
        by_path: dict[str, list[tuple[str, ResolvedTransform]]] = {}
        for key, transform in entries:
            try:
                path = ctx.static_path(transform)
            except InvalidTransform as e:
                report.failures.append(BuildFailure(src=transform.src, key=key, error=str(e)))
                logger.warning("  %s [%s] FAILED: %s", transform.src, key, e)
                continue
            by_path.setdefault(path, []).append((key, transform))

        jobs = []
        for path, group in by_path.items():
            if len(group) == 1:
                key, transform = group[0]
                jobs.append((key, transform, path))
                continue
            for key, transform in group:
                error = f"Output path {path} is shared by {len(group)} distinct transforms"
                report.failures.append(BuildFailure(src=transform.src, key=key, error=error))
                logger.warning("  %s [%s] FAILED: %s", transform.src, key, error)
        return jobs

    def _build_one(
        self,
        codec: ServerImageCodec,
        transform: ResolvedTransform,
        target: Path,
    ) -> Path:
        t0 = time.perf_counter()
        data = self.loader.load_image(transform.src)
        if data is None:
            raise SourceNotFound(transform.src)

        result = codec.transform(data, transform)

        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(result.data)
        logger.debug("  %s written in %.1fms", target, (time.perf_counter() - t0) * 1000)
        return target


def copy_source_images(src_dir: str | Path, out_dir: str | Path) -> list[Path]:
    """Mirror source images from ``src_dir`` into ``out_dir`` for server builds.

    Server builds transform on request, so the originals must ship next to
    the server bundle. Relative paths are preserved.
    """
    src = Path(src_dir).resolve()
    out = Path(out_dir).resolve()
    copied: list[Path] = []
    for path in sorted(src.rglob("*")):
        if not path.is_file() or path.suffix.lower() not in SOURCE_IMAGE_EXTENSIONS:
            continue
        if path.is_relative_to(out):
            continue
        target = out / path.relative_to(src)
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(path, target)
        copied.append(target)
    logger.info("Copied %d source image(s) to %s", len(copied), out)
    return copied
