"""Phase scheduler: runs named workload phases in order and times them."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Awaitable, Callable, Iterable, Optional, Sequence, TypeVar

from common.exceptions import FanOutError, PhaseFailedError
from common.models.report import RunReport, RunStatus
from common.utils import format_seconds, generate_run_id

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


@dataclass(frozen=True)
class WorkloadPhase:
    """One named, timed unit of benchmark work."""
    name: str
    action: Callable[[], Awaitable[Any]]
    description: str = ""


async def fan_out(
    items: Iterable[T],
    worker: Callable[[T], Awaitable[R]],
    concurrency: Optional[int] = None,
) -> list[R]:
    """Run ``worker(item)`` for every item concurrently and join.

    Fail-fast: the first sub-task failure is raised as :class:`FanOutError`
    naming the item. Sub-tasks still in flight are not cancelled; their
    outcome is no longer awaited.
    """
    items = list(items)
    semaphore = asyncio.Semaphore(concurrency) if concurrency else None

    async def _run(index: int, item: T) -> R:
        try:
            if semaphore is None:
                return await worker(item)
            async with semaphore:
                return await worker(item)
        except Exception as e:
            raise FanOutError(item, index, e) from e

    return await asyncio.gather(*(_run(i, item) for i, item in enumerate(items)))


class BenchmarkDriver:
    """Sequential phase runner that owns the run's result map.

    Only the driver writes durations, and only after a phase's action has
    completed successfully.
    """

    def __init__(self, run_id: Optional[str] = None):
        self.run_id = run_id or generate_run_id()
        self._durations: dict[str, float] = {}
        self._status = RunStatus.PENDING
        self._failed_phase: Optional[str] = None
        self._error_message: Optional[str] = None
        self._started_at: Optional[datetime] = None
        self._completed_at: Optional[datetime] = None

    @property
    def results(self) -> dict[str, float]:
        return dict(self._durations)

    def report(self) -> RunReport:
        """Snapshot of the run so far."""
        return RunReport(
            run_id=self.run_id,
            status=self._status,
            durations=dict(self._durations),
            failed_phase=self._failed_phase,
            error_message=self._error_message,
            started_at=self._started_at,
            completed_at=self._completed_at,
        )

    async def run(self, phases: Sequence[WorkloadPhase]) -> RunReport:
        """Run ``phases`` in order; abort the sequence on the first failure.

        Raises :class:`PhaseFailedError` carrying the partial report when a
        phase fails. Phases after it never start.
        """
        names = [phase.name for phase in phases]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Duplicate phase names: {', '.join(duplicates)}")

        self._durations.clear()
        self._failed_phase = None
        self._error_message = None
        self._completed_at = None
        self._started_at = datetime.now()
        self._status = RunStatus.RUNNING
        logger.info(f"Starting run {self.run_id} with {len(phases)} phases")

        for phase in phases:
            logger.info(f"===== [{phase.name}] start =====")
            start = time.perf_counter()
            try:
                await phase.action()
            except Exception as e:
                elapsed = time.perf_counter() - start
                self._status = RunStatus.FAILED
                self._failed_phase = phase.name
                self._error_message = f"{type(e).__name__}: {e}"
                self._completed_at = datetime.now()
                logger.error(
                    f"===== [{phase.name}] failed after {elapsed:.3f}s: {e}", exc_info=True
                )
                raise PhaseFailedError(phase.name, e, report=self.report()) from e

            duration = time.perf_counter() - start
            self._durations[phase.name] = duration
            logger.info(f"===== [{phase.name}] done: {format_seconds(duration)} =====")

        self._status = RunStatus.COMPLETED
        self._completed_at = datetime.now()
        logger.info(f"Run {self.run_id} completed")
        return self.report()
