"""
Smoke Tests for CLI Commands.

These tests verify that CLI commands run without errors and produce output.
They don't validate correctness deeply - just that commands work.

Each test points DATA_DIR at its own temporary directory so the learner
database never touches the real home directory.

Usage:
    pytest tests/smoke/test_cli_commands.py -v
    pytest tests/smoke/test_cli_commands.py -v -m smoke
"""

import json
import os
import subprocess
import sys
from pathlib import Path

import pytest

# Mark all tests in this module as smoke tests
pytestmark = pytest.mark.smoke

# Project root
PROJECT_ROOT = Path(__file__).parent.parent.parent


@pytest.fixture
def data_dir(tmp_path):
    return tmp_path / "lexicon-data"


def run_cli_command(
    command: list[str],
    data_dir: Path,
    stdin: str = "",
    timeout: int = 30,
) -> tuple[int, str, str]:
    """
    Run a CLI command and return exit code, stdout, stderr.

    Args:
        command: Arguments after 'python -m lexicon.delivery.cli'
        data_dir: DATA_DIR for this run
        stdin: Text fed to interactive prompts
        timeout: Maximum time to wait

    Returns:
        Tuple of (exit_code, stdout, stderr)
    """
    env = dict(os.environ, DATA_DIR=str(data_dir), LOG_LEVEL="WARNING", COLUMNS="120")

    result = subprocess.run(
        [sys.executable, "-m", "lexicon.delivery.cli", *command],
        cwd=PROJECT_ROOT,
        env=env,
        input=stdin,
        capture_output=True,
        text=True,
        timeout=timeout,
    )

    return result.returncode, result.stdout, result.stderr


class TestCLIHelp:
    """Test that help commands work."""

    def test_main_help(self, data_dir):
        """Main help should list the commands."""
        code, stdout, stderr = run_cli_command(["--help"], data_dir)

        assert code == 0, f"Help failed: {stderr}"
        assert "Commands" in stdout
        for command in ("study", "test", "progress", "search", "export", "import", "reset"):
            assert command in stdout

    @pytest.mark.parametrize("command", ["study", "test", "search", "export"])
    def test_command_help(self, data_dir, command):
        code, stdout, stderr = run_cli_command([command, "--help"], data_dir)

        assert code == 0, f"{command} help failed: {stderr}"


class TestCLISearch:
    def test_search_finds_word(self, data_dir):
        code, stdout, stderr = run_cli_command(["search", "ability"], data_dir)

        assert code == 0, f"Search failed: {stderr}"
        assert "ability" in stdout

    def test_search_without_hits(self, data_dir):
        code, stdout, stderr = run_cli_command(["search", "zzzzqqq"], data_dir)

        assert code == 0
        assert "No words match" in stdout


class TestCLIStudy:
    def test_learn_session_completes(self, data_dir):
        code, stdout, stderr = run_cli_command(
            ["study", "--mode", "learn", "--count", "3"], data_dir, stdin="y\n" * 3
        )

        assert code == 0, f"Study failed: {stderr}"
        assert "Session Complete" in stdout
        assert (data_dir / "state.db").exists()

    def test_review_with_nothing_due(self, data_dir):
        code, stdout, stderr = run_cli_command(["study", "--mode", "review"], data_dir)

        assert code == 0, f"Review failed: {stderr}"
        assert "Nothing to study" in stdout

    def test_unknown_mode_exits_with_error(self, data_dir):
        code, stdout, stderr = run_cli_command(["study", "--mode", "cram"], data_dir)

        assert code == 1
        assert "Error" in stdout


class TestCLITest:
    def test_short_test_runs(self, data_dir):
        code, stdout, stderr = run_cli_command(
            ["test", "--level", "beginner", "--count", "3"], data_dir, stdin="\n" * 3
        )

        assert code == 0, f"Test failed: {stderr}"
        assert "Test Results" in stdout

    def test_unknown_level(self, data_dir):
        code, stdout, stderr = run_cli_command(["test", "--level", "expert"], data_dir)

        assert code == 1


class TestCLIProgress:
    def test_progress_for_new_learner(self, data_dir):
        code, stdout, stderr = run_cli_command(["progress"], data_dir)

        assert code == 0, f"Progress failed: {stderr}"
        assert "Level 1" in stdout
        assert "Mastery" in stdout


class TestCLIData:
    def test_export_import_reset(self, data_dir, tmp_path):
        run_cli_command(["study", "--count", "2"], data_dir, stdin="y\n" * 2)
        export_path = tmp_path / "export.json"

        code, stdout, stderr = run_cli_command(["export", str(export_path)], data_dir)
        assert code == 0, f"Export failed: {stderr}"
        payload = json.loads(export_path.read_text(encoding="utf-8"))
        assert len(payload["study_records"]) == 2

        code, stdout, stderr = run_cli_command(["reset", "--yes"], data_dir)
        assert code == 0, f"Reset failed: {stderr}"
        assert "Progress reset" in stdout

        code, stdout, stderr = run_cli_command(["import", str(export_path)], data_dir)
        assert code == 0, f"Import failed: {stderr}"
        assert "2 study records" in stdout

    def test_import_rejects_invalid_json(self, data_dir, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text("{nope", encoding="utf-8")

        code, stdout, stderr = run_cli_command(["import", str(bad)], data_dir)

        assert code == 1
