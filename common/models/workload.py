"""Benchmark profile models: the tunable parameters of every workload phase."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, List, Union

from pydantic import BaseModel, Field, field_validator

from common.utils import parse_size, load_yaml, deep_merge


# Fixed run order; profiles may select a subset but never reorder.
PHASE_ORDER: tuple[str, ...] = (
    "append_single_file",
    "small_files_write",
    "small_files_read",
    "large_files_write",
    "large_files_read",
    "store_ingest",
    "store_count",
    "store_random_read",
    "full_device_append",
    "full_device_small_files",
    "archive",
    "cleanup",
)


class AppendConfig(BaseModel):
    """Single-file synchronous append workload."""
    count: int = Field(default=50000, ge=0, description="Rows appended per run")
    runs: int = Field(default=3, ge=1, description="Runs; the file is recreated each run")


class SmallFilesConfig(BaseModel):
    """Many small files written and read concurrently."""
    file_count: int = Field(default=1000, ge=0, description="Number of small files")
    writes_per_file: int = Field(default=300, ge=0, description="Rows appended per file")
    read_rounds: int = Field(default=100, ge=0, description="Full concurrent read passes")


class LargeFilesConfig(BaseModel):
    """Large streamed files."""
    count: int = Field(default=100, ge=0, description="Number of large files")
    size: int = Field(default=1024 ** 3, ge=0, description="Bytes per file (accepts '1G' etc.)")

    @field_validator("size", mode="before")
    @classmethod
    def _parse_size(cls, v: Union[str, int]) -> int:
        return parse_size(v)


class StoreConfig(BaseModel):
    """Record store ingestion and query workloads."""
    convert_count: int = Field(default=10, ge=0, description="Large files ingested into stores")
    count_rounds: int = Field(default=100, ge=0, description="Open/count/close passes over all stores")
    random_reads: int = Field(default=100, ge=0, description="Random point reads per store")
    seed: Optional[int] = Field(default=None, description="Seed for the random id picker")


class FullDeviceConfig(BaseModel):
    """Small-write re-runs once the device is partially full."""
    append_count: int = Field(default=50000, ge=0)
    append_runs: int = Field(default=5, ge=1)
    file_count: int = Field(default=1000, ge=0)
    writes_per_file: int = Field(default=50, ge=0)


class ArchiveConfig(BaseModel):
    """Archive phase inputs."""
    large_prefix: int = Field(default=5, ge=0, description="Large files packed into one archive")
    store_prefix: int = Field(default=5, ge=0, description="Store files packed into one archive")


class BenchmarkProfile(BaseModel):
    """Complete parameter set for one benchmark run."""
    name: str = Field(default="default", description="Profile name")
    description: Optional[str] = None

    append: AppendConfig = Field(default_factory=AppendConfig)
    small_files: SmallFilesConfig = Field(default_factory=SmallFilesConfig)
    large_files: LargeFilesConfig = Field(default_factory=LargeFilesConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    full_device: FullDeviceConfig = Field(default_factory=FullDeviceConfig)
    archive: ArchiveConfig = Field(default_factory=ArchiveConfig)

    # None runs every phase
    enabled_phases: Optional[List[str]] = Field(default=None)

    @field_validator("enabled_phases")
    @classmethod
    def _known_phases(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        if v is None:
            return v
        unknown = [name for name in v if name not in PHASE_ORDER]
        if unknown:
            raise ValueError(f"Unknown phases: {', '.join(unknown)}")
        return v

    def selected_phases(self) -> list[str]:
        """Enabled phase names in run order."""
        if self.enabled_phases is None:
            return list(PHASE_ORDER)
        enabled = set(self.enabled_phases)
        return [name for name in PHASE_ORDER if name in enabled]

    @classmethod
    def from_yaml(cls, path: str | Path, overrides: Optional[dict] = None) -> "BenchmarkProfile":
        """Load a profile from YAML, deep-merged over the model defaults."""
        data = deep_merge(cls().model_dump(), load_yaml(path))
        if overrides:
            data = deep_merge(data, overrides)
        return cls(**data)

    def with_phases(self, names: List[str]) -> "BenchmarkProfile":
        """Validated copy restricted to ``names``."""
        return type(self).model_validate({**self.model_dump(), "enabled_phases": list(names)})
