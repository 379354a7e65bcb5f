"""Console reporting of per-phase durations."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Callable, Optional

from common.models.report import RunReport
from common.utils import ensure_dir

logger = logging.getLogger(__name__)


class ResultReporter:
    """Render a run report as a table of phase name -> seconds."""

    def __init__(self, precision: int = 3, printer: Optional[Callable[[str], None]] = print):
        self.precision = precision
        self.printer = printer

    def render(self, report: RunReport) -> list[str]:
        """Table lines; only phases that completed are listed."""
        lines = ["===== Phase durations (seconds) ====="]
        if report.durations:
            width = max(len(name) for name in report.durations)
            for name, seconds in report.durations.items():
                lines.append(f"{name:<{width}}  {seconds:>12.{self.precision}f}")
            lines.append("-" * (width + 14))
            lines.append(f"{'total':<{width}}  {report.total_seconds:>12.{self.precision}f}")
        else:
            lines.append("(no phase completed)")

        if report.failed_phase:
            lines.append(f"FAILED in phase '{report.failed_phase}': {report.error_message}")
        return lines

    def emit(self, report: RunReport) -> list[str]:
        """Print the rendered table, or log it when no printer is set."""
        lines = self.render(report)
        for line in lines:
            if self.printer is not None:
                self.printer(line)
            else:
                logger.info(line)
        return lines

    def save_summary(self, report: RunReport, path: str | Path) -> Path:
        """Write the report as JSON."""
        path = Path(path)
        ensure_dir(path.parent)
        with open(path, 'w') as f:
            json.dump(report.model_dump(mode="json"), f, indent=2, default=str)

        logger.info(f"Saved summary for run {report.run_id} to {path}")
        return path
