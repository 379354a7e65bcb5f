"""Harness configuration settings."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from common.models.workload import BenchmarkProfile

MIB = 1024 * 1024


class BenchSettings(BaseSettings):
    """Harness settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="SSDBENCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Workspace
    workspace_root: Path = Field(default=Path("./test_data"))
    profile_path: Optional[Path] = None

    # Streaming
    chunk_size: int = Field(default=MIB, gt=0)  # bytes per submission/row
    high_water_mark: int = Field(default=16 * MIB, gt=0)  # sink saturation threshold

    # Archives
    compression_level: int = Field(default=9, ge=0, le=9)

    # Fan-out bound, None = unbounded
    max_concurrency: Optional[int] = Field(default=None, ge=1)

    # Logging
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # Optional JSON summary written at the end of a run
    summary_path: Optional[Path] = None

    def load_profile(self) -> BenchmarkProfile:
        """Load the configured profile, or the built-in defaults."""
        if self.profile_path is None:
            return BenchmarkProfile()
        return BenchmarkProfile.from_yaml(self.profile_path)


# Global settings instance
_settings: Optional[BenchSettings] = None


def get_settings() -> BenchSettings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = BenchSettings()
    return _settings


def init_settings(**kwargs) -> BenchSettings:
    """Initialize settings with custom values."""
    global _settings
    _settings = BenchSettings(**kwargs)
    return _settings
