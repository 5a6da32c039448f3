"""Numbering methods and per-field version resolution."""

from __future__ import annotations

from enum import StrEnum

from autoversioning.exceptions import UnsupportedMethodError
from autoversioning.git import GitClient


class NumberingMethod(StrEnum):
    """How a version or build number is computed."""

    NONE = "none"  # Keep the manually set value
    COUNT_ALL_COMMITS = "count_all_commits"
    COUNT_COMMITS_FROM_TAG = "count_commits_from_tag"  # Commits since the last version tag (e.g. v1.0)


class VersionResolver:
    """Computes field values using a numbering method."""

    def __init__(self, git: GitClient) -> None:
        self.git = git

    def resolve_field(
        self,
        method: NumberingMethod,
        previous_value: int,
        tag_pattern: str,
    ) -> int:
        """Resolve a single number.

        Args:
            method: Numbering method for the field.
            previous_value: Value to keep when the method is NONE.
            tag_pattern: Tag glob used by COUNT_COMMITS_FROM_TAG.

        Returns:
            The resolved number.

        Raises:
            UnsupportedMethodError: If the method is not recognized.
        """
        if method == NumberingMethod.NONE:
            return previous_value
        if method == NumberingMethod.COUNT_ALL_COMMITS:
            return self.git.count_all_commits()
        if method == NumberingMethod.COUNT_COMMITS_FROM_TAG:
            return self.git.count_commits_from_tag(tag_pattern)
        raise UnsupportedMethodError(f"Unsupported numbering method: {method!r}")


def parse_bundle_version(version: str) -> tuple[int, int, int]:
    """Parse a dotted "major.minor.patch" string.

    Components beyond the third are ignored and missing ones default to 0.

    Raises:
        ValueError: If a component is not a number.
    """
    parts = [int(part) for part in version.strip().split(".")]
    while len(parts) < 3:
        parts.append(0)
    return parts[0], parts[1], parts[2]
