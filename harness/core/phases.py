"""Workload phase library: the benchmark's fixed phase sequence."""

from __future__ import annotations

import logging
import random
from pathlib import Path
from typing import Awaitable, Callable

from common.models.workload import BenchmarkProfile
from common.utils import Timer, format_size
from harness.config import BenchSettings
from harness.core.driver import WorkloadPhase, fan_out
from harness.io.archive import compress_directory, compress_files
from harness.io.chunk_reader import consume_file
from harness.io.files import (
    CSV_HEADER,
    append_text,
    ensure_directory,
    list_files,
    read_text,
    remove_file,
    remove_tree,
    write_csv_rows,
)
from harness.io.ingest import ingest_file
from harness.io.stream_writer import stream_to_file
from harness.layout import WorkspaceLayout
from harness.storage.record_store import RecordStore

logger = logging.getLogger(__name__)


class WorkloadPhases:
    """Builds the phase actions for one run from settings and a profile.

    Every phase that creates artifacts removes its targets first, so a
    repeated run measures fresh writes.
    """

    def __init__(self, settings: BenchSettings, profile: BenchmarkProfile):
        self.settings = settings
        self.profile = profile
        self.layout = WorkspaceLayout(settings.workspace_root)
        self._rng = random.Random(profile.store.seed)

    def _catalog(self) -> dict[str, tuple[Callable[[], Awaitable[object]], str]]:
        return {
            "append_single_file": (self.append_single_file, "Repeated appends to one CSV file"),
            "small_files_write": (self.small_files_write, "Concurrent appends to many small files"),
            "small_files_read": (self.small_files_read, "Concurrent reads of every small file"),
            "large_files_write": (self.large_files_write, "Concurrent streamed large-file writes"),
            "large_files_read": (self.large_files_read, "Concurrent streamed large-file reads"),
            "store_ingest": (self.store_ingest, "Chunked ingestion of large files into record stores"),
            "store_count": (self.store_count, "Open/count/close passes over every store"),
            "store_random_read": (self.store_random_read, "Random point reads per store"),
            "full_device_append": (self.full_device_append, "Append workload on a partially full device"),
            "full_device_small_files": (
                self.full_device_small_files,
                "Small-file writes on a partially full device",
            ),
            "archive": (self.archive, "ZIP archives of small files, large files and stores"),
            "cleanup": (self.cleanup, "Removal of the whole workspace"),
        }

    def build(self) -> list[WorkloadPhase]:
        """Enabled phases in run order."""
        catalog = self._catalog()
        phases = []
        for name in self.profile.selected_phases():
            action, description = catalog[name]
            phases.append(WorkloadPhase(name=name, action=action, description=description))
        return phases

    # ==================== Small writes ====================

    async def _append_runs(self, count: int, runs: int) -> float:
        """Recreate the append target ``runs`` times; returns mean append time."""
        path = self.layout.append_file
        await ensure_directory(path.parent)

        total = 0.0
        for run in range(1, runs + 1):
            await remove_file(path)
            await append_text(path, CSV_HEADER)

            with Timer() as timer:
                for n in range(1, count + 1):
                    await append_text(path, f"{n},value_{n}\n")
            elapsed = timer.elapsed_seconds
            total += elapsed
            logger.debug(f"Append run {run}/{runs}: {count} rows in {elapsed:.3f}s")

        average = total / runs
        logger.info(f"Average append time over {runs} runs: {average:.3f}s")
        return average

    async def _write_small_files(self, file_count: int, writes_per_file: int, prefix: str) -> None:
        await ensure_directory(self.layout.small_files_dir)
        await fan_out(
            range(file_count),
            lambda i: write_csv_rows(self.layout.small_file(i, prefix), writes_per_file),
            concurrency=self.settings.max_concurrency,
        )
        logger.info(f"Wrote {file_count} files x {writes_per_file} rows ({prefix}_*.csv)")

    async def append_single_file(self) -> float:
        return await self._append_runs(self.profile.append.count, self.profile.append.runs)

    async def small_files_write(self) -> None:
        cfg = self.profile.small_files
        await self._write_small_files(cfg.file_count, cfg.writes_per_file, "small")

    async def small_files_read(self) -> None:
        cfg = self.profile.small_files
        paths = [self.layout.small_file(i) for i in range(cfg.file_count)]
        for round_no in range(1, cfg.read_rounds + 1):
            await fan_out(paths, read_text, concurrency=self.settings.max_concurrency)
            logger.debug(f"Small-file read round {round_no}/{cfg.read_rounds} done")

    # ==================== Large streams ====================

    async def large_files_write(self) -> None:
        cfg = self.profile.large_files
        await ensure_directory(self.layout.large_files_dir)

        async def _write(index: int) -> None:
            path = self.layout.large_file(index)
            await remove_file(path)
            await stream_to_file(
                path,
                cfg.size,
                chunk_size=self.settings.chunk_size,
                high_water_mark=self.settings.high_water_mark,
            )

        await fan_out(range(cfg.count), _write, concurrency=self.settings.max_concurrency)
        logger.info(f"Wrote {cfg.count} large files of {format_size(cfg.size)}")

    async def large_files_read(self) -> None:
        paths = await list_files(self.layout.large_files_dir)
        sizes = await fan_out(
            paths,
            lambda p: consume_file(p, self.settings.chunk_size),
            concurrency=self.settings.max_concurrency,
        )
        logger.info(f"Read {len(paths)} large files ({format_size(sum(sizes))})")

    # ==================== Record store ====================

    async def store_ingest(self) -> None:
        await ensure_directory(self.layout.store_dir)
        sources = (await list_files(self.layout.large_files_dir, ".csv"))[: self.profile.store.convert_count]

        for index, source in enumerate(sources):
            target = self.layout.store_file(index)
            rows = await ingest_file(source, target, chunk_size=self.settings.chunk_size)
            logger.info(f"Converted '{source.name}' -> '{target.name}' ({rows} chunks)")

    async def _store_files(self) -> list[Path]:
        return await list_files(self.layout.store_dir, ".sqlite")

    async def store_count(self) -> None:
        stores = await self._store_files()
        rounds = self.profile.store.count_rounds
        for round_no in range(1, rounds + 1):
            for path in stores:
                async with await RecordStore.open_or_create(path) as store:
                    rows = await store.count()
                logger.debug(f"[round {round_no}] {path.name}: {rows} chunks")
            logger.debug(f"Store count round {round_no}/{rounds} done")

    async def store_random_read(self) -> None:
        reads = self.profile.store.random_reads
        for path in await self._store_files():
            async with await RecordStore.open_or_create(path) as store:
                rows = await store.count()
                if rows == 0:
                    logger.info(f"{path.name}: no chunks, skipped")
                    continue
                for _ in range(reads):
                    await store.get_by_id(self._rng.randint(1, rows))
            logger.info(f"{path.name}: {reads} random reads done")

    # ==================== Partially full device ====================

    async def full_device_append(self) -> float:
        cfg = self.profile.full_device
        return await self._append_runs(cfg.append_count, cfg.append_runs)

    async def full_device_small_files(self) -> None:
        cfg = self.profile.full_device
        await self._write_small_files(cfg.file_count, cfg.writes_per_file, "small_retest")

    # ==================== Archives & cleanup ====================

    async def _archive_to(self, name: str, make: Callable[[Path], Awaitable[int]]) -> int:
        target = self.layout.archive_dir / name
        await remove_file(target)
        return await make(target)

    async def archive(self) -> None:
        cfg = self.profile.archive
        level = self.settings.compression_level
        chunk = self.settings.chunk_size
        await ensure_directory(self.layout.archive_dir)

        await self._archive_to(
            "small_files.zip",
            lambda dest: compress_directory(self.layout.small_files_dir, dest, level=level, chunk_size=chunk),
        )

        large = (await list_files(self.layout.large_files_dir))[: cfg.large_prefix]
        await self._archive_to(
            f"large_csv_{cfg.large_prefix}.zip",
            lambda dest: compress_files(large, dest, level=level, chunk_size=chunk),
        )

        stores = (await list_files(self.layout.store_dir))[: cfg.store_prefix]
        await self._archive_to(
            f"db_files_{cfg.store_prefix}.zip",
            lambda dest: compress_files(stores, dest, level=level, chunk_size=chunk),
        )

    async def cleanup(self) -> None:
        removed = await remove_tree(self.layout.root)
        logger.info(f"Workspace {self.layout.root} {'removed' if removed else 'already absent'}")
