"""Progress model for a single whole-object stream transfer."""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator


class StreamTransferTask(BaseModel):
    """One write-a-whole-object operation.

    ``progress`` only grows, by at most ``chunk_size`` per step, and never
    passes ``total_size``.
    """
    destination: str = Field(..., description="Path or store handle being written")
    total_size: int = Field(..., ge=0, description="Target byte length")
    chunk_size: int = Field(..., gt=0, description="Upper bound of a single submission")
    progress: int = Field(default=0, ge=0, description="Bytes submitted so far")
    submissions: int = Field(default=0, ge=0, description="Chunks handed to the sink")
    stalls: int = Field(default=0, ge=0, description="Times the writer waited for a drain")

    @model_validator(mode="after")
    def _progress_within_target(self) -> "StreamTransferTask":
        if self.progress > self.total_size:
            raise ValueError("progress exceeds total_size")
        return self

    @property
    def remaining(self) -> int:
        return self.total_size - self.progress

    @property
    def is_complete(self) -> bool:
        return self.progress == self.total_size

    def next_chunk_length(self) -> int:
        return min(self.chunk_size, self.remaining)

    def advance(self, nbytes: int) -> None:
        """Record one submission of ``nbytes``."""
        if nbytes <= 0 or nbytes > self.chunk_size:
            raise ValueError(f"Chunk of {nbytes} bytes outside (0, {self.chunk_size}]")
        if nbytes > self.remaining:
            raise ValueError(f"Chunk of {nbytes} bytes overruns {self.remaining} remaining")
        self.progress += nbytes
        self.submissions += 1
