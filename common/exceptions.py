"""Exception hierarchy for the benchmark harness."""

from __future__ import annotations

from typing import Any, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from common.models.report import RunReport


class BenchmarkError(Exception):
    """Base class for all harness errors."""

    def to_dict(self) -> dict[str, Any]:
        return {
            "error_type": self.__class__.__name__,
            "message": str(self),
        }


class StorageIOError(BenchmarkError):
    """Read/write/open/remove failure from the filesystem or the record store."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(message)


class RecordNotFoundError(BenchmarkError):
    """Record store lookup of an id that does not exist."""

    def __init__(self, record_id: int, path: Optional[str] = None):
        self.record_id = record_id
        self.path = path
        super().__init__(f"Record {record_id} not found in {path or 'record store'}")


class StoreClosedError(BenchmarkError):
    """Operation attempted on a released record store handle."""


class TransformError(BenchmarkError):
    """Compression stream failure."""


class ProfileError(BenchmarkError):
    """Invalid benchmark profile or phase selection."""


class FanOutError(BenchmarkError):
    """First failing member of a concurrent fan-out."""

    def __init__(self, item: Any, index: int, cause: BaseException):
        self.item = item
        self.index = index
        self.cause = cause
        super().__init__(f"Sub-task {index} ({item}) failed: {cause}")


class PhaseFailedError(BenchmarkError):
    """A phase action raised; the run was aborted after it."""

    def __init__(self, phase: str, cause: BaseException, report: Optional["RunReport"] = None):
        self.phase = phase
        self.cause = cause
        self.report = report
        super().__init__(f"Phase '{phase}' failed: {cause}")

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["phase"] = self.phase
        data["cause"] = f"{type(self.cause).__name__}: {self.cause}"
        return data
