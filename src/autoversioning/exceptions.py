"""Exception hierarchy for autoversioning.

Process errors are raised by the process runner and recovered by the git
client's fallback policy. Parsing and argument errors propagate to the
resolution pass, which reports them per field.
"""

from __future__ import annotations


class AutoVersioningError(Exception):
    """Base exception for all autoversioning errors."""

    pass


class ProcessError(AutoVersioningError):
    """Base class for failures invoking an external executable."""

    pass


class ProcessLaunchError(ProcessError):
    """The executable could not be found or started."""

    def __init__(self, executable: str, message: str | None = None) -> None:
        self.executable = executable
        if message is None:
            message = f"Failed to start process: {executable}"
        super().__init__(message)


class ProcessExitError(ProcessError):
    """The executable ran but exited with a non-zero status.

    Attributes:
        stderr: Captured standard error output.
        exit_code: Process exit status.
    """

    def __init__(self, stderr: str, exit_code: int) -> None:
        self.stderr = stderr
        self.exit_code = exit_code
        super().__init__(f"{stderr.strip()}\nExitCode: {exit_code}")


class GitError(AutoVersioningError):
    """Base class for git query errors."""

    pass


class MalformedGitOutputError(GitError):
    """Git output did not contain an expected pattern."""

    pass


class ArgumentRangeError(AutoVersioningError, ValueError):
    """A caller-supplied argument is outside its valid range."""

    def __init__(self, name: str, value: object, message: str | None = None) -> None:
        self.name = name
        self.value = value
        if message is None:
            message = f"Argument '{name}' is out of range: {value}"
        super().__init__(message)


class UnsupportedMethodError(AutoVersioningError, ValueError):
    """Unrecognized numbering method."""

    pass


class ConfigError(AutoVersioningError):
    """Invalid configuration."""

    pass
