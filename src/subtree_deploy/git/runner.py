"""External process execution.

Commands are argument lists handed straight to subprocess, never a shell
string, and every call names its working directory explicitly.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)


class ProcessError(RuntimeError):
    """An external command exited with a non-zero status."""

    def __init__(self, command: list[str], returncode: int, stderr: str = ""):
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr or ""
        message = f"Command failed ({returncode}): {shlex.join(self.command)}"
        if self.stderr.strip():
            message += f"\n{self.stderr.strip()}"
        super().__init__(message)


class ProcessRunner:
    """Runs commands, raising ProcessError on failure."""

    def __init__(self, timeout: float | None = None):
        self.timeout = timeout

    def run(self, command: list[str], cwd: Path | str | None = None) -> None:
        """Run a command with its output passed through to the operator."""
        self._execute(command, cwd, capture=False)

    def run_captured(self, command: list[str], cwd: Path | str | None = None) -> str:
        """Run a command and return its standard output."""
        return self._execute(command, cwd, capture=True).stdout

    def _execute(
        self,
        command: list[str],
        cwd: Path | str | None,
        capture: bool,
    ) -> subprocess.CompletedProcess:
        logger.info("> %s", shlex.join(command))
        try:
            result = subprocess.run(
                command,
                cwd=cwd,
                capture_output=capture,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            # Missing executable or missing working directory
            raise ProcessError(command, 127, str(e)) from e
        except subprocess.TimeoutExpired as e:
            raise ProcessError(command, -1, f"timed out after {self.timeout}s") from e

        if result.returncode != 0:
            raise ProcessError(command, result.returncode, result.stderr or "")
        return result


class Git:
    """A git executable bound to one working directory."""

    def __init__(
        self,
        runner: ProcessRunner,
        executable: str = "git",
        cwd: Path | str | None = None,
    ):
        self.runner = runner
        self.executable = executable
        self.cwd = Path(cwd) if cwd is not None else None

    def at(self, cwd: Path | str) -> Git:
        """Return the same git binding rooted at another directory."""
        return Git(self.runner, self.executable, cwd)

    def run(self, *args: str) -> None:
        self.runner.run([self.executable, *args], cwd=self.cwd)

    def output(self, *args: str) -> str:
        return self.runner.run_captured([self.executable, *args], cwd=self.cwd)

    def succeeds(self, *args: str) -> bool:
        """Probe with a git command; any failure reads as False."""
        try:
            self.output(*args)
        except ProcessError as e:
            logger.debug("Probe failed: %s", e)
            return False
        return True
