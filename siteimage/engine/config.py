"""Build configuration — worker pool and failure policy."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

ON_ERROR_ABORT = "abort"
ON_ERROR_CONTINUE = "continue"


def _default_workers() -> int:
    return min(32, os.cpu_count() or 1)


@dataclass
class BuildConfig:
    """Controls how the static build driver runs its entries."""

    # Upper bound on concurrent codec invocations
    max_workers: int = field(default_factory=_default_workers)

    # "abort": raise BuildAggregateError once every entry has been attempted
    # "continue": log failures and return the report
    on_error: str = ON_ERROR_ABORT

    def __post_init__(self) -> None:
        if self.on_error not in (ON_ERROR_ABORT, ON_ERROR_CONTINUE):
            raise ValueError(f"on_error must be 'abort' or 'continue', got {self.on_error!r}")
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")
