"""Common data models for the benchmark harness."""

from common.models.workload import (
    PHASE_ORDER,
    BenchmarkProfile,
    AppendConfig,
    SmallFilesConfig,
    LargeFilesConfig,
    StoreConfig,
    FullDeviceConfig,
    ArchiveConfig,
)
from common.models.report import RunReport, RunStatus
from common.models.transfer import StreamTransferTask

__all__ = [
    "PHASE_ORDER",
    "BenchmarkProfile",
    "AppendConfig",
    "SmallFilesConfig",
    "LargeFilesConfig",
    "StoreConfig",
    "FullDeviceConfig",
    "ArchiveConfig",
    "RunReport",
    "RunStatus",
    "StreamTransferTask",
]
