"""Common utilities and models shared across the harness and the CLI."""

from common.models.workload import BenchmarkProfile, PHASE_ORDER
from common.models.report import RunReport, RunStatus
from common.models.transfer import StreamTransferTask

__all__ = [
    "BenchmarkProfile",
    "PHASE_ORDER",
    "RunReport",
    "RunStatus",
    "StreamTransferTask",
]
