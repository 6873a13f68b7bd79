"""Application configuration for the conversion service.

Defaults mirror the behaviour of the original deployment: artifacts land in
``./downloads``, files are swept once a day when older than two days and a
served file is deleted once its download completes. Every field can be
overridden through ``TUBECONV_*`` environment variables.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, cast

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_downloads_dir() -> Path:
    return Path("./downloads")


class AppConfig(BaseSettings):
    """Pydantic settings container for the conversion pipeline."""

    model_config = cast(Any, SettingsConfigDict(env_prefix="TUBECONV_"))

    downloads_dir: Path = Field(
        default_factory=_default_downloads_dir,
        description="Shared working directory for produced artifacts.",
    )
    extractor_binary: str = Field(
        default="yt-dlp",
        min_length=1,
        description="Executable name or path of the media extraction tool.",
    )
    extraction_timeout_seconds: float = Field(
        default=900.0,
        gt=0,
        description=(
            "Upper bound for a single extraction run before it is killed; also bounds "
            "the wait for a free extraction slot."
        ),
    )
    max_concurrent_extractions: int = Field(
        default=4,
        ge=1,
        description="Number of extraction processes allowed to run at once.",
    )
    retention_max_age_seconds: int = Field(
        default=2 * 24 * 60 * 60,
        ge=1,
        description="Files older than this are removed by the retention sweep.",
    )
    retention_interval_seconds: float = Field(
        default=24 * 60 * 60,
        ge=1,
        description="Delay between two retention sweeps.",
    )
    sweeper_enabled: bool = Field(
        default=True,
        description="Start the periodic retention sweep with the application.",
    )
    delete_after_download: bool = Field(
        default=True,
        description="Delete an artifact once it has been streamed to a client.",
    )
    stream_chunk_size_bytes: int = Field(
        default=1024 * 1024,
        ge=1024,
        description="Chunk size used when streaming artifacts.",
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        description="Origins allowed by the CORS middleware.",
    )
    host: str = Field(default="0.0.0.0", description="Bind address for uvicorn.")
    port: int = Field(default=3000, ge=1, le=65535, description="Bind port for uvicorn.")
    log_level: str = Field(default="INFO", description="Root log level.")

    @classmethod
    def build_default(cls) -> "AppConfig":
        """Construct configuration from the environment."""

        return cls()


def load_config() -> AppConfig:
    """Load configuration and make sure the working directory exists."""

    config = AppConfig.build_default()
    config.downloads_dir.mkdir(parents=True, exist_ok=True)
    return config


__all__ = ["AppConfig", "load_config"]
