"""ZIP archival of benchmark artifacts."""

from __future__ import annotations

import logging
import os
import shutil
import zipfile
import zlib
from pathlib import Path
from typing import Sequence, Union

from common.exceptions import StorageIOError, TransformError
from harness.io.files import run_blocking
from harness.io.stream_writer import DEFAULT_CHUNK_SIZE

logger = logging.getLogger(__name__)

DEFAULT_COMPRESSION_LEVEL = 9

Sources = Union[str, Path, Sequence[Union[str, Path]]]


def _directory_entries(directory: Path) -> list[tuple[Path, str]]:
    return [
        (p, p.relative_to(directory).as_posix())
        for p in sorted(directory.rglob("*"))
        if p.is_file()
    ]


def _file_entries(files: Sequence[Union[str, Path]]) -> list[tuple[Path, str]]:
    return [(Path(f), Path(f).name) for f in files]


def _write_archive(
    entries: list[tuple[Path, str]],
    destination: Path,
    level: int,
    chunk_size: int,
) -> int:
    with zipfile.ZipFile(
        destination, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=level
    ) as zf:
        for src, arcname in entries:
            try:
                src_file = open(src, "rb")
            except FileNotFoundError as e:
                # a vanished input is a warning, not a failure
                logger.warning(f"Skipping missing archive input {src}: {e}")
                continue
            with src_file:
                size = os.fstat(src_file.fileno()).st_size
                with zf.open(arcname, "w", force_zip64=size >= zipfile.ZIP64_LIMIT) as dst:
                    shutil.copyfileobj(src_file, dst, chunk_size)
    return destination.stat().st_size


async def compress(
    sources: Sources,
    destination: str | Path,
    level: int = DEFAULT_COMPRESSION_LEVEL,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> int:
    """Pack ``sources`` into one DEFLATE ZIP at ``destination``.

    ``sources`` is either a single directory (the whole tree, stored with
    paths relative to it) or a sequence of files (stored by base name).
    Returns the archive size in bytes. On failure the partial archive is
    left where it is.
    """
    destination = Path(destination)
    if isinstance(sources, (str, Path)):
        directory = Path(sources)
        if not directory.is_dir():
            raise StorageIOError(f"Archive source {directory} is not a directory", path=str(directory))
        entries = await run_blocking(_directory_entries, directory)
    else:
        entries = _file_entries(sources)

    try:
        size = await run_blocking(_write_archive, entries, destination, level, chunk_size)
    except (zlib.error, zipfile.BadZipFile, zipfile.LargeZipFile) as e:
        raise TransformError(f"Compression into {destination} failed: {e}") from e
    except OSError as e:
        raise StorageIOError(f"Archive {destination} failed: {e}", path=str(destination)) from e

    logger.info(f"Compressed {len(entries)} entries into {destination} ({size} bytes)")
    return size


async def compress_directory(directory: str | Path, destination: str | Path, **kwargs) -> int:
    return await compress(Path(directory), destination, **kwargs)


async def compress_files(files: Sequence[Union[str, Path]], destination: str | Path, **kwargs) -> int:
    return await compress(list(files), destination, **kwargs)
