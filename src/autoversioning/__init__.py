"""Derive build and version numbers from git."""

from autoversioning.diagnostics import Diagnostics
from autoversioning.exceptions import (
    ArgumentRangeError,
    AutoVersioningError,
    ConfigError,
    GitError,
    MalformedGitOutputError,
    ProcessError,
    ProcessExitError,
    ProcessLaunchError,
    UnsupportedMethodError,
)
from autoversioning.git import DEFAULT_GIT_PATH, GitClient
from autoversioning.models import FieldResult, ResolutionReport, VersionRecord
from autoversioning.process import ProcessResult, run_process
from autoversioning.resolver import NumberingMethod, VersionResolver, parse_bundle_version
from autoversioning.store import VersionStore

__version__ = "1.0.0"

__all__ = [
    "ArgumentRangeError",
    "AutoVersioningError",
    "ConfigError",
    "DEFAULT_GIT_PATH",
    "Diagnostics",
    "FieldResult",
    "GitClient",
    "GitError",
    "MalformedGitOutputError",
    "NumberingMethod",
    "ProcessError",
    "ProcessExitError",
    "ProcessLaunchError",
    "ProcessResult",
    "ResolutionReport",
    "UnsupportedMethodError",
    "VersionRecord",
    "VersionResolver",
    "VersionStore",
    "parse_bundle_version",
    "run_process",
    "__version__",
]
