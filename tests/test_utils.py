"""Unit tests for common utility functions."""

import time

import pytest

from common.utils import (
    generate_id,
    generate_run_id,
    parse_size,
    format_size,
    format_seconds,
    load_yaml,
    deep_merge,
    ensure_dir,
    Timer,
)


class TestGenerateID:
    """Tests for ID generation functions."""

    def test_generate_id_no_prefix(self):
        """Test generating ID without prefix."""
        id1 = generate_id()
        id2 = generate_id()

        assert id1 != id2
        assert "_" in id1

    def test_generate_id_with_prefix(self):
        """Test generating ID with prefix."""
        assert generate_id("test").startswith("test_")

    def test_generate_run_id(self):
        """Test generating run ID."""
        run_id = generate_run_id()

        assert run_id.startswith("run_")
        assert len(run_id) > len("run_")


class TestParseSize:
    """Tests for size parsing functions."""

    def test_parse_size_bytes(self):
        assert parse_size("1024") == 1024
        assert parse_size("1024B") == 1024

    def test_parse_size_int_passthrough(self):
        assert parse_size(4096) == 4096

    def test_parse_size_units(self):
        """Test K/M/G/T with and without the B and IB suffixes."""
        assert parse_size("1K") == 1024
        assert parse_size("1KiB") == 1024
        assert parse_size("2M") == 2 * 1024 ** 2
        assert parse_size("1MB") == 1024 ** 2
        assert parse_size("1G") == 1024 ** 3
        assert parse_size("1GiB") == 1024 ** 3
        assert parse_size("1T") == 1024 ** 4

    def test_parse_size_lowercase_and_spaces(self):
        assert parse_size(" 8m ") == 8 * 1024 ** 2
        assert parse_size("512 k") == 512 * 1024

    def test_parse_size_decimal(self):
        assert parse_size("1.5G") == int(1.5 * (1024 ** 3))

    def test_parse_size_invalid(self):
        """Test parsing invalid size strings."""
        with pytest.raises(ValueError):
            parse_size("invalid")

        with pytest.raises(ValueError):
            parse_size("10X")  # Unknown unit

    def test_format_size(self):
        """Test formatting bytes to human-readable."""
        assert format_size(0) == "0 B"
        assert format_size(1024) == "1.00 KB"
        assert format_size(1024 ** 3) == "1.00 GB"
        assert format_size(1536) == "1.50 KB"
        assert format_size(-100) == "0 B"


class TestFormatSeconds:
    """Tests for phase duration formatting."""

    def test_format_seconds_short(self):
        assert format_seconds(0) == "0.000s"
        assert format_seconds(1.5) == "1.500s"
        assert format_seconds(59.25, precision=1) == "59.2s"

    def test_format_seconds_minutes(self):
        assert format_seconds(90) == "1m 30.000s"

    def test_format_seconds_hours(self):
        assert format_seconds(3661) == "1h 1m 1.000s"


class TestYAML:
    """Tests for YAML loading."""

    def test_load_yaml(self, temp_dir):
        yaml_path = temp_dir / "profile.yaml"
        yaml_path.write_text("name: quick\nappend:\n  count: 10\n")

        assert load_yaml(yaml_path) == {"name": "quick", "append": {"count": 10}}

    def test_load_yaml_nonexistent(self, temp_dir):
        with pytest.raises(FileNotFoundError):
            load_yaml(temp_dir / "nonexistent.yaml")

    def test_load_yaml_empty(self, temp_dir):
        """Test loading empty YAML file."""
        yaml_path = temp_dir / "empty.yaml"
        yaml_path.write_text("")

        assert load_yaml(yaml_path) == {}


class TestDeepMerge:
    """Tests for deep merge function."""

    def test_deep_merge_simple(self):
        base = {"a": 1, "b": 2}
        result = deep_merge(base, {"b": 3, "c": 4})

        assert result == {"a": 1, "b": 3, "c": 4}
        assert base == {"a": 1, "b": 2}  # Original unchanged

    def test_deep_merge_nested(self):
        base = {"a": {"x": 1, "y": 2}, "b": 3}
        result = deep_merge(base, {"a": {"y": 20, "z": 30}, "c": 4})

        assert result == {"a": {"x": 1, "y": 20, "z": 30}, "b": 3, "c": 4}

    def test_deep_merge_override_list(self):
        """Test that lists are replaced, not merged."""
        result = deep_merge({"items": [1, 2, 3]}, {"items": [4, 5]})

        assert result == {"items": [4, 5]}


class TestEnsureDir:
    """Tests for directory creation."""

    def test_ensure_dir_creates(self, temp_dir):
        new_dir = temp_dir / "new" / "nested" / "dir"

        result = ensure_dir(new_dir)

        assert new_dir.is_dir()
        assert result == new_dir

    def test_ensure_dir_existing(self, temp_dir):
        existing_dir = temp_dir / "existing"
        existing_dir.mkdir()

        assert ensure_dir(existing_dir) == existing_dir


class TestTimer:
    """Tests for Timer context manager."""

    def test_timer_context(self):
        with Timer() as timer:
            time.sleep(0.01)

        assert timer.end_time is not None
        assert timer.elapsed_seconds >= 0.01

    def test_timer_not_started(self):
        assert Timer().elapsed_seconds == 0

    def test_timer_elapsed_before_exit(self):
        timer = Timer()
        with timer:
            elapsed = timer.elapsed_seconds

        assert elapsed >= 0
        assert timer.elapsed_seconds >= elapsed
