"""Run report models."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional, Dict

from pydantic import BaseModel, Field


class RunStatus(str, Enum):
    """Benchmark run states."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class RunReport(BaseModel):
    """Snapshot of a benchmark run: completed phases and their durations."""
    run_id: str = Field(..., description="Unique run identifier")
    status: RunStatus = Field(default=RunStatus.PENDING)

    # phase name -> seconds, in completion order; successful phases only
    durations: Dict[str, float] = Field(default_factory=dict)

    failed_phase: Optional[str] = None
    error_message: Optional[str] = None

    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @property
    def succeeded(self) -> bool:
        return self.status == RunStatus.COMPLETED

    @property
    def total_seconds(self) -> float:
        """Sum of completed phase durations."""
        return sum(self.durations.values())
