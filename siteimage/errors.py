"""Error taxonomy for transform resolution, delivery and builds."""

from __future__ import annotations

from dataclasses import dataclass


class SiteImageError(Exception):
    """Base class for every error raised by siteimage."""


class InvalidTransform(SiteImageError, ValueError):
    """The transform is missing required sizing info or has invalid fields."""


class InvalidAspectRatio(InvalidTransform):
    """An aspect ratio string could not be parsed as ``W:H``."""


class SourceNotFound(SiteImageError):
    def __init__(self, src: str) -> None:
        super().__init__(f'"{src}" not found')
        self.src = src


class CodecError(SiteImageError):
    """Wraps a failure raised inside an image codec."""

    def __init__(self, message: str, original: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.original = original


@dataclass
class BuildFailure:
    src: str
    key: str
    error: str


class BuildAggregateError(SiteImageError):
    """Collects every failing entry of a static build."""

    def __init__(self, failures: list[BuildFailure]) -> None:
        self.failures = failures
        lines = [f"{len(failures)} image(s) failed to build:"]
        lines.extend(f"  {f.src} [{f.key}]: {f.error}" if f.key else f"  {f.src}: {f.error}" for f in failures)
        super().__init__("\n".join(lines))
