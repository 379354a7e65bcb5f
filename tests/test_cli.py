"""Tests for the ssdbench command line."""

import pytest

import cli.main
from cli.main import main


@pytest.fixture(autouse=True)
def _keep_test_logging(monkeypatch):
    """Leave pytest's log capture in place of the CLI's stdout handler."""
    monkeypatch.setattr(cli.main, "configure_logging", lambda settings: None)


class TestCLI:
    """Tests for CLI commands."""

    def test_no_command(self, capsys):
        assert main([]) == 1
        assert "usage" in capsys.readouterr().out

    def test_phases(self, capsys):
        assert main(["phases"]) == 0

        out = capsys.readouterr().out
        assert "append_single_file" in out
        assert "cleanup" in out

    def test_profile_dump(self, temp_dir, capsys):
        path = temp_dir / "p.yaml"
        path.write_text("name: dumped\nappend:\n  count: 3\n")

        assert main(["-p", str(path), "profile"]) == 0

        out = capsys.readouterr().out
        assert "name: dumped" in out
        assert "count: 3" in out

    def test_bad_profile(self, temp_dir, capsys):
        path = temp_dir / "p.yaml"
        path.write_text("enabled_phases: [nope]\n")

        assert main(["-p", str(path), "phases"]) == 2
        assert "Unknown phases" in capsys.readouterr().out

    def test_malformed_yaml_profile(self, temp_dir, capsys):
        path = temp_dir / "p.yaml"
        path.write_text("append: [unclosed\n")

        assert main(["-p", str(path), "phases"]) == 2
        assert main(["-p", str(path), "run", "-w", str(temp_dir / "ws")]) == 2
        assert "Invalid profile" in capsys.readouterr().out

    def test_missing_profile_file(self, temp_dir, capsys):
        assert main(["-p", str(temp_dir / "absent.yaml"), "profile"]) == 2
        assert "Invalid profile" in capsys.readouterr().out

    def test_unknown_phase_choice(self):
        with pytest.raises(SystemExit):
            main(["run", "--phase", "defrag"])

    def test_run_single_phase(self, temp_dir):
        workspace = temp_dir / "ws"
        path = temp_dir / "p.yaml"
        path.write_text("append:\n  count: 3\n  runs: 1\n")

        code = main([
            "-p", str(path),
            "run",
            "-w", str(workspace),
            "--phase", "append_single_file",
            "--summary", str(temp_dir / "summary.json"),
        ])

        assert code == 0
        assert (workspace / "step1_single.csv").read_text().count("\n") == 4
        assert (temp_dir / "summary.json").exists()

    def test_run_failing_phase(self, temp_dir):
        path = temp_dir / "p.yaml"
        path.write_text("small_files:\n  file_count: 2\n  read_rounds: 1\n")

        code = main([
            "-p", str(path),
            "run",
            "-w", str(temp_dir / "ws"),
            "--phase", "small_files_read",
        ])

        assert code == 1
