"""Tests for gitflow.platform.process module."""

from __future__ import annotations

import sys
from pathlib import Path

from gitflow.core.result import Err, Ok
from gitflow.platform.process import ProcessError, run, run_silent


class TestProcessError:
    def test_str_short_command(self) -> None:
        error = ProcessError(command=("npm", "ci"), returncode=1, stdout="", stderr="")
        assert str(error) == "npm ci failed (exit 1)"

    def test_str_long_command_truncated(self) -> None:
        error = ProcessError(
            command=("gh", "api", "-X", "POST", "repos/acme/widgets/merges"),
            returncode=1,
            stdout="",
            stderr="HTTP 409",
        )
        assert str(error) == "gh api -X ... failed (exit 1)"


class TestRun:
    def test_captures_stdout(self, tmp_path: Path) -> None:
        result = run([sys.executable, "-c", "print('hello')"], cwd=tmp_path)
        assert isinstance(result, Ok)
        assert result.value.strip() == "hello"

    def test_input_is_written_to_stdin(self, tmp_path: Path) -> None:
        payload = "x" * 300_000
        code = "import sys; print(len(sys.stdin.read()))"
        result = run([sys.executable, "-c", code], cwd=tmp_path, input=payload)
        assert isinstance(result, Ok)
        assert result.value.strip() == "300000"

    def test_nonzero_exit(self, tmp_path: Path) -> None:
        code = "import sys; sys.stderr.write('boom'); sys.exit(3)"
        result = run([sys.executable, "-c", code], cwd=tmp_path)
        assert isinstance(result, Err)
        assert result.error.returncode == 3
        assert "boom" in result.error.stderr

    def test_missing_executable(self, tmp_path: Path) -> None:
        result = run(["definitely-not-a-real-command-xyz"], cwd=tmp_path)
        assert isinstance(result, Err)
        assert result.error.returncode == -1

    def test_timeout(self, tmp_path: Path) -> None:
        cmd = [sys.executable, "-c", "import time; time.sleep(5)"]
        result = run(cmd, cwd=tmp_path, timeout=0.2)
        assert isinstance(result, Err)
        assert "timed out" in result.error.stderr


class TestRunSilent:
    def test_success(self, tmp_path: Path) -> None:
        assert isinstance(run_silent([sys.executable, "-c", "pass"], cwd=tmp_path), Ok)

    def test_failure(self, tmp_path: Path) -> None:
        result = run_silent([sys.executable, "-c", "raise SystemExit(2)"], cwd=tmp_path)
        assert isinstance(result, Err)
        assert result.error.returncode == 2
