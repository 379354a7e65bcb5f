"""Common utility functions."""

from __future__ import annotations

import re
import time
import uuid
from datetime import datetime
from pathlib import Path

import yaml


def generate_id(prefix: str = "") -> str:
    """Generate a unique identifier."""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    short_uuid = uuid.uuid4().hex[:8]
    if prefix:
        return f"{prefix}_{timestamp}_{short_uuid}"
    return f"{timestamp}_{short_uuid}"


def generate_run_id() -> str:
    """Generate a benchmark run ID."""
    return generate_id("run")


def parse_size(size_str: str | int) -> int:
    """Parse a size string (e.g., '10G', '512M', '4k') to bytes."""
    if isinstance(size_str, int):
        return size_str

    size_str = size_str.strip().upper()

    units = {
        'B': 1,
        'K': 1024,
        'KB': 1024,
        'KIB': 1024,
        'M': 1024 ** 2,
        'MB': 1024 ** 2,
        'MIB': 1024 ** 2,
        'G': 1024 ** 3,
        'GB': 1024 ** 3,
        'GIB': 1024 ** 3,
        'T': 1024 ** 4,
        'TB': 1024 ** 4,
        'TIB': 1024 ** 4,
    }

    match = re.match(r'^(\d+(?:\.\d+)?)\s*([A-Z]*)$', size_str)
    if not match:
        raise ValueError(f"Invalid size format: {size_str}")

    value = float(match.group(1))
    unit = match.group(2) or 'B'

    if unit not in units:
        raise ValueError(f"Unknown unit: {unit}")

    return int(value * units[unit])


def format_size(bytes_val: int, precision: int = 2) -> str:
    """Format bytes to human-readable string."""
    if bytes_val < 0:
        return "0 B"

    units = ['B', 'KB', 'MB', 'GB', 'TB', 'PB']
    unit_index = 0
    size = float(bytes_val)

    while size >= 1024 and unit_index < len(units) - 1:
        size /= 1024
        unit_index += 1

    if unit_index == 0:
        return f"{int(size)} {units[unit_index]}"
    return f"{size:.{precision}f} {units[unit_index]}"


def format_seconds(seconds: float, precision: int = 3) -> str:
    """Format a phase duration, switching to minutes past one minute."""
    if seconds < 60:
        return f"{seconds:.{precision}f}s"
    minutes, secs = divmod(seconds, 60)
    if minutes < 60:
        return f"{int(minutes)}m {secs:.{precision}f}s"
    hours, minutes = divmod(minutes, 60)
    return f"{int(hours)}h {int(minutes)}m {secs:.{precision}f}s"


def load_yaml(path: str | Path) -> dict:
    """Load a YAML file."""
    with open(path, 'r') as f:
        return yaml.safe_load(f) or {}


def deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dictionaries."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def ensure_dir(path: str | Path) -> Path:
    """Ensure a directory exists, creating it if necessary."""
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


class Timer:
    """Context manager timing a code block on the monotonic clock."""

    def __init__(self):
        self.start_time: float | None = None
        self.end_time: float | None = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, *args):
        self.end_time = time.perf_counter()

    @property
    def elapsed_seconds(self) -> float:
        if self.start_time is None:
            return 0
        end = self.end_time if self.end_time is not None else time.perf_counter()
        return end - self.start_time
