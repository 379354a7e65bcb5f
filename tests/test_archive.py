"""Unit tests for ZIP archival."""

import zipfile
import zlib
from unittest.mock import patch

import pytest

from common.exceptions import StorageIOError, TransformError
from harness.io.archive import compress, compress_directory, compress_files


@pytest.mark.asyncio
class TestCompress:
    """Tests for compress and its helpers."""

    async def test_directory_tree(self, temp_dir):
        src = temp_dir / "small"
        (src / "nested").mkdir(parents=True)
        (src / "small_0.csv").write_text("id,value\n1,value_1\n")
        (src / "nested" / "deep.csv").write_text("x" * 1000)
        dest = temp_dir / "small_files.zip"

        size = await compress_directory(src, dest)

        assert size == dest.stat().st_size
        with zipfile.ZipFile(dest) as zf:
            assert sorted(zf.namelist()) == ["nested/deep.csv", "small_0.csv"]
            assert zf.read("small_0.csv") == b"id,value\n1,value_1\n"
            assert zf.getinfo("nested/deep.csv").compress_type == zipfile.ZIP_DEFLATED

    async def test_file_list_uses_base_names(self, temp_dir):
        a = temp_dir / "a" / "large_0.csv"
        b = temp_dir / "b" / "bigdata_0.sqlite"
        a.parent.mkdir()
        b.parent.mkdir()
        a.write_bytes(b"X" * 50_000)
        b.write_bytes(b"\x00\x01" * 100)
        dest = temp_dir / "mixed.zip"

        await compress_files([a, b], dest, chunk_size=4096)

        with zipfile.ZipFile(dest) as zf:
            assert zf.namelist() == ["large_0.csv", "bigdata_0.sqlite"]
            assert zf.read("large_0.csv") == b"X" * 50_000
            assert zf.testzip() is None

        # highly repetitive input compresses well at the default level
        assert dest.stat().st_size < 5_000

    async def test_missing_file_skipped(self, temp_dir):
        present = temp_dir / "present.csv"
        present.write_text("data")
        dest = temp_dir / "out.zip"

        await compress_files([temp_dir / "gone.csv", present], dest)

        with zipfile.ZipFile(dest) as zf:
            assert zf.namelist() == ["present.csv"]

    async def test_empty_file_list(self, temp_dir):
        dest = temp_dir / "empty.zip"

        await compress([], dest)

        with zipfile.ZipFile(dest) as zf:
            assert zf.namelist() == []

    async def test_source_not_a_directory(self, temp_dir):
        with pytest.raises(StorageIOError):
            await compress(temp_dir / "missing_dir", temp_dir / "out.zip")

    async def test_unwritable_destination(self, temp_dir):
        src = temp_dir / "src"
        src.mkdir()
        (src / "f.csv").write_text("x")

        with pytest.raises(StorageIOError):
            await compress(src, temp_dir / "no_such_dir" / "out.zip")

    async def test_compression_failure(self, temp_dir):
        src = temp_dir / "src"
        src.mkdir()
        (src / "f.csv").write_text("x" * 100)
        dest = temp_dir / "out.zip"

        with patch("harness.io.archive.shutil.copyfileobj", side_effect=zlib.error("stream error")):
            with pytest.raises(TransformError, match="stream error"):
                await compress(src, dest)

        # the partial archive is left in place
        assert dest.exists()
