"""Benchmark run orchestration: logging setup and one complete run."""

from __future__ import annotations

import logging
import sys
from typing import Optional

from common.exceptions import PhaseFailedError
from common.models.report import RunReport
from common.models.workload import BenchmarkProfile
from harness.config import BenchSettings
from harness.core.driver import BenchmarkDriver
from harness.core.phases import WorkloadPhases
from harness.core.reporter import ResultReporter

logger = logging.getLogger(__name__)


def configure_logging(settings: BenchSettings) -> None:
    """Configure root logging to stdout."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format=settings.log_format,
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )


async def run_benchmark(
    settings: BenchSettings,
    profile: BenchmarkProfile,
    reporter: Optional[ResultReporter] = None,
) -> RunReport:
    """Run every enabled phase and report the durations.

    The report of completed phases is emitted even when a phase fails;
    the failure is then re-raised as :class:`PhaseFailedError`.
    """
    reporter = reporter or ResultReporter()
    workload = WorkloadPhases(settings, profile)
    workload.layout.prepare()
    phases = workload.build()
    driver = BenchmarkDriver()
    logger.info(
        f"Profile '{profile.name}': {len(phases)} phases under {settings.workspace_root}"
    )

    try:
        report = await driver.run(phases)
    except PhaseFailedError as e:
        report = e.report or driver.report()
        reporter.emit(report)
        if settings.summary_path:
            reporter.save_summary(report, settings.summary_path)
        raise

    reporter.emit(report)
    if settings.summary_path:
        reporter.save_summary(report, settings.summary_path)
    return report
