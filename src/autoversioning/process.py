"""Run external executables and capture their output."""

from __future__ import annotations

import shlex
import subprocess
from dataclasses import dataclass
from pathlib import Path

from autoversioning.exceptions import ProcessExitError, ProcessLaunchError


@dataclass(frozen=True)
class ProcessResult:
    """Captured output of a finished process."""

    stdout: str
    exit_code: int


def run_process(
    executable: str,
    arguments: str,
    working_directory: Path | str | None = None,
) -> ProcessResult:
    """Run an executable and wait for it to exit.

    Arguments are given as one pre-joined string and split using shell-like
    quoting rules, but no shell is involved. Values containing spaces must be
    quoted by the caller (e.g. ``tag --list "v[0-9]*"``).

    Args:
        executable: Name or path of the executable.
        arguments: Command-line arguments as a single string.
        working_directory: Directory to run in. Defaults to the current directory.

    Returns:
        ProcessResult with the captured stdout and exit code (always 0).

    Raises:
        ProcessLaunchError: If the executable cannot be found or started.
        ProcessExitError: If the process exits with a non-zero status.
    """
    try:
        args = shlex.split(arguments)
    except ValueError as e:
        raise ProcessLaunchError(executable, f"Invalid arguments for {executable}: {e}") from e

    try:
        completed = subprocess.run(  # noqa: S603
            [executable, *args],
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            cwd=working_directory,
        )
    except OSError as e:
        # FileNotFoundError, PermissionError, NotADirectoryError...
        raise ProcessLaunchError(executable, f"Failed to start process '{executable}': {e}") from e

    if completed.returncode != 0:
        raise ProcessExitError(completed.stderr or "", completed.returncode)

    return ProcessResult(stdout=completed.stdout or "", exit_code=completed.returncode)
