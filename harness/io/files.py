"""Non-blocking wrappers for plain filesystem operations.

Every call runs the blocking syscall on the loop's default executor so the
event loop keeps interleaving fan-out members while the device works.
"""

from __future__ import annotations

import asyncio
import functools
import logging
import shutil
from pathlib import Path
from typing import Any, Callable

from common.exceptions import StorageIOError

logger = logging.getLogger(__name__)

CSV_HEADER = "id,value\n"


async def run_blocking(func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """Run a blocking callable on the default executor."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, functools.partial(func, *args, **kwargs))


def _append_sync(path: Path, text: str) -> None:
    with open(path, "a", encoding="utf-8") as f:
        f.write(text)


def _read_text_sync(path: Path) -> str:
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def _unlink_if_exists(path: Path) -> bool:
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    return True


async def append_text(path: str | Path, text: str) -> None:
    """Open, append and close: one independent append per call."""
    try:
        await run_blocking(_append_sync, Path(path), text)
    except OSError as e:
        raise StorageIOError(f"Append to {path} failed: {e}", path=str(path)) from e


async def read_text(path: str | Path) -> str:
    try:
        return await run_blocking(_read_text_sync, Path(path))
    except OSError as e:
        raise StorageIOError(f"Read of {path} failed: {e}", path=str(path)) from e


async def remove_file(path: str | Path) -> bool:
    """Remove a file if present. Returns whether something was removed."""
    try:
        return await run_blocking(_unlink_if_exists, Path(path))
    except OSError as e:
        raise StorageIOError(f"Remove of {path} failed: {e}", path=str(path)) from e


async def remove_tree(path: str | Path) -> bool:
    """Remove a directory tree if present."""
    path = Path(path)
    if not await run_blocking(path.exists):
        return False
    try:
        await run_blocking(shutil.rmtree, path)
    except OSError as e:
        raise StorageIOError(f"Remove of {path} failed: {e}", path=str(path)) from e
    return True


async def ensure_directory(path: str | Path) -> Path:
    path = Path(path)
    try:
        await run_blocking(path.mkdir, parents=True, exist_ok=True)
    except OSError as e:
        raise StorageIOError(f"Cannot create directory {path}: {e}", path=str(path)) from e
    return path


async def list_files(directory: str | Path, suffix: str | None = None) -> list[Path]:
    """Regular files in ``directory`` sorted by name, optionally filtered by suffix."""
    directory = Path(directory)

    def _scan() -> list[Path]:
        return sorted(
            p for p in directory.iterdir()
            if p.is_file() and (suffix is None or p.name.endswith(suffix))
        )

    try:
        return await run_blocking(_scan)
    except OSError as e:
        raise StorageIOError(f"Cannot list {directory}: {e}", path=str(directory)) from e


async def write_csv_rows(path: str | Path, count: int) -> None:
    """Recreate ``path`` as a header plus ``count`` separately appended rows."""
    await remove_file(path)
    await append_text(path, CSV_HEADER)
    for n in range(1, count + 1):
        await append_text(path, f"{n},value_{n}\n")
