"""Pytest configuration and shared fixtures."""

import tempfile
import shutil
from pathlib import Path
from typing import Generator

import pytest

from common.models.workload import BenchmarkProfile
from harness.config import BenchSettings


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def workspace(temp_dir: Path) -> Path:
    """Workspace root inside the temporary directory."""
    return temp_dir / "workspace"


@pytest.fixture
def settings(workspace: Path) -> BenchSettings:
    """Settings with small chunks so streams span several submissions."""
    return BenchSettings(
        workspace_root=workspace,
        chunk_size=64 * 1024,
        high_water_mark=128 * 1024,
        compression_level=1,
        _env_file=None,
    )


@pytest.fixture
def tiny_profile_data() -> dict:
    """Profile small enough to run every phase in well under a second."""
    return {
        "name": "tiny",
        "append": {"count": 5, "runs": 2},
        "small_files": {"file_count": 4, "writes_per_file": 3, "read_rounds": 2},
        "large_files": {"count": 2, "size": "200K"},
        "store": {"convert_count": 2, "count_rounds": 2, "random_reads": 5, "seed": 7},
        "full_device": {"append_count": 4, "append_runs": 1, "file_count": 3, "writes_per_file": 2},
        "archive": {"large_prefix": 1, "store_prefix": 1},
    }


@pytest.fixture
def tiny_profile(tiny_profile_data: dict) -> BenchmarkProfile:
    return BenchmarkProfile(**tiny_profile_data)
