"""Read-only git queries used to derive version numbers."""

from __future__ import annotations

import re
from collections.abc import Callable
from pathlib import Path

from autoversioning.diagnostics import Diagnostics
from autoversioning.exceptions import (
    ArgumentRangeError,
    MalformedGitOutputError,
    ProcessError,
)
from autoversioning.process import ProcessResult, run_process

DEFAULT_GIT_PATH = "git"

# Distance marker in `git describe --long` output, e.g. "v1.2-14-g1a2b3c4"
_DISTANCE_PATTERN = re.compile(r"-(\d+)-g")

Runner = Callable[[str, str, Path | str | None], ProcessResult]


class GitClient:
    """Runs git queries against a working directory.

    Every invocation goes through `git_exec`, which never raises on process
    failures. A configured path that fails is retried once with plain "git"
    before the failure is reported and an empty result is returned.
    """

    def __init__(
        self,
        git_path: str = DEFAULT_GIT_PATH,
        working_directory: Path | None = None,
        diagnostics: Diagnostics | None = None,
        runner: Runner = run_process,
    ) -> None:
        self.git_path = git_path
        self.working_directory = working_directory
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        self._runner = runner
        self.fallback_count = 0

    @staticmethod
    def validate_path(
        git_path: str,
        working_directory: Path | None = None,
        runner: Runner = run_process,
    ) -> bool:
        """Check that a git executable path is usable.

        Args:
            git_path: Path to test.
            working_directory: Directory to run in.
            runner: Process runner (for testing).

        Returns:
            True if `<path> --version` succeeds and prints "git version".
        """
        if not git_path or not git_path.strip():
            return False
        try:
            result = runner(git_path, "--version", working_directory)
        except Exception:
            return False
        return "git version" in result.stdout

    def git_version(self) -> str | None:
        """Get the installed git version (e.g. "2.43.0"), or None if git is unavailable."""
        output = self.git_exec("--version").strip()
        if "git version" not in output:
            self.diagnostics.error("Git not found. Please install Git and set the path.")
            return None
        return output.replace("git version ", "", 1)

    def count_all_commits(self) -> int:
        """Count commits reachable from HEAD.

        Returns:
            Commit count, or 0 if git produced no usable output (e.g. empty repository).
        """
        output = self.git_exec("rev-list --count HEAD").strip()
        try:
            return int(output)
        except ValueError:
            return 0

    def count_commits_from_tag(self, tag_pattern: str) -> int:
        """Count commits since the nearest tag matching a pattern.

        Falls back to the total commit count when no tag matches.

        Args:
            tag_pattern: Glob pattern for version tags (e.g. "v[0-9]*").

        Returns:
            Number of commits between the matching tag and HEAD.

        Raises:
            MalformedGitOutputError: If the describe output has no distance marker.
        """
        has_pattern = bool(tag_pattern and tag_pattern.strip())
        list_args = f'tag --list "{tag_pattern}"' if has_pattern else "tag --list"
        if not self.git_exec(list_args).strip():
            return self.count_all_commits()

        match_option = f' --match "{tag_pattern}"' if has_pattern else ""
        output = self.git_exec(f"describe --tags --long{match_option}")
        matches = _DISTANCE_PATTERN.findall(output)
        if not matches:
            raise MalformedGitOutputError(
                f"No commit distance found in git describe output: {output.strip()!r}"
            )
        # Tag names may contain the marker too; git appends the real one last
        return int(matches[-1])

    def get_commit_hash(self, length: int = 7, commit: str = "HEAD") -> str:
        """Get the hash of a commit.

        Args:
            length: Number of characters to return. 0-40 is valid; 7 matches
                git's abbreviated `%h` format.
            commit: Commit to look up.

        Returns:
            The first `length` characters of the full hash.

        Raises:
            MalformedGitOutputError: If git returned no hash.
            ArgumentRangeError: If `length` is outside [0, full hash length].
        """
        full_hash = self.git_exec(f'show "{commit}" --format=%H -s').strip()
        if not full_hash:
            raise MalformedGitOutputError(f"No commit hash returned for '{commit}'")
        if length < 0 or length > len(full_hash):
            raise ArgumentRangeError(
                "length",
                length,
                f"The hash length (raw: {len(full_hash)}, arg: {length}) is wrong.",
            )
        return full_hash[:length]

    def git_exec(self, arguments: str) -> str:
        """Run a git command, retrying once with the default path.

        Args:
            arguments: git subcommand and options as one string.

        Returns:
            Standard output, or an empty string if git could not be run.
        """
        try:
            return self._runner(self.git_path, arguments, self.working_directory).stdout
        except ProcessError as e:
            if self.git_path == DEFAULT_GIT_PATH:
                self._report_failure(arguments, e)
                return ""
            first_error = e

        self.fallback_count += 1
        self.diagnostics.warning(
            f"git failed using '{self.git_path}', retrying with '{DEFAULT_GIT_PATH}'",
            first_error,
        )
        try:
            return self._runner(DEFAULT_GIT_PATH, arguments, self.working_directory).stdout
        except ProcessError as e:
            self._report_failure(arguments, e)
            return ""

    def _report_failure(self, arguments: str, error: ProcessError) -> None:
        self.diagnostics.error(f"git command failed: git {arguments}", error)
