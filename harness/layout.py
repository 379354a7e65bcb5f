"""Workspace directory layout."""

from __future__ import annotations

import logging
from pathlib import Path

from common.utils import ensure_dir

logger = logging.getLogger(__name__)


class WorkspaceLayout:
    """Named subdirectories under one workspace root."""

    def __init__(self, root: str | Path):
        self.root = Path(root)

    @property
    def append_file(self) -> Path:
        return self.root / "step1_single.csv"

    @property
    def small_files_dir(self) -> Path:
        return self.root / "step2_smallfiles"

    @property
    def large_files_dir(self) -> Path:
        return self.root / "step4_large_csv"

    @property
    def store_dir(self) -> Path:
        return self.root / "step6_db"

    @property
    def archive_dir(self) -> Path:
        return self.root / "compressed"

    def small_file(self, index: int, prefix: str = "small") -> Path:
        return self.small_files_dir / f"{prefix}_{index}.csv"

    def large_file(self, index: int) -> Path:
        return self.large_files_dir / f"large_{index}.csv"

    def store_file(self, index: int) -> Path:
        return self.store_dir / f"bigdata_{index}.sqlite"

    def prepare(self) -> None:
        """Create required directories."""
        for d in (
            self.root,
            self.small_files_dir,
            self.large_files_dir,
            self.store_dir,
            self.archive_dir,
        ):
            ensure_dir(d)
        logger.info(f"Initialized workspace directories at {self.root}")
