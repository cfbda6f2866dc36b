"""Application configuration from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings

LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


class Settings(BaseSettings):
    env: str = "development"
    log_level: str = "info"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Delivery
    route_pattern: str = "/_image"
    static_prefix: str = "_image"

    # Codec selection: "pillow" (local) or "cdn" (hosted)
    codec: str = "pillow"
    default_quality: int = 80
    cdn_base_url: str = ""

    # Image loading
    src_dir: str = "."
    public_dir: str = "public"
    remote_timeout_seconds: float = 10.0

    # Static builds
    build_max_workers: int | None = None
    build_on_error: str = "abort"

    model_config = {"env_prefix": "SITEIMAGE_", "env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def is_dev(self) -> bool:
        return self.env == "development"


settings = Settings()
