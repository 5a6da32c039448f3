"""Configuration management for autoversioning."""

from __future__ import annotations

import configparser
import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from autoversioning.exceptions import ConfigError
from autoversioning.git import DEFAULT_GIT_PATH
from autoversioning.models import VersionRecord
from autoversioning.resolver import NumberingMethod, parse_bundle_version

CONFIG_FILE_NAME = "autoversioning.ini"
DEFAULT_TAG_PATTERN = "*[0-9].[0-9]*"
DEFAULT_VERSION_DATA_PATH = "AutoVersioning/Runtime/Resources/VersionData.json"


class NumberingConfig(BaseModel):
    """Numbering method per field."""

    patch: NumberingMethod = NumberingMethod.NONE
    ios_build: NumberingMethod = NumberingMethod.COUNT_ALL_COMMITS
    android_build: NumberingMethod = NumberingMethod.COUNT_ALL_COMMITS
    tag_pattern: str = DEFAULT_TAG_PATTERN  # Tags counted by count_commits_from_tag


class GitConfig(BaseModel):
    """Git executable configuration."""

    path: str = DEFAULT_GIT_PATH  # Just "git" if it's already on PATH


class VersionConfig(BaseModel):
    """Current project version, used as the previous value for each field."""

    bundle_version: str = "0.1.0"
    ios_build_number: int = Field(default=0, ge=0)
    android_bundle_version_code: int = Field(default=0, ge=0)


class OutputConfig(BaseModel):
    """Version record output configuration."""

    auto_save: bool = True
    path: str = DEFAULT_VERSION_DATA_PATH
    create_gitignore: bool = True
    save_commit_hash: bool = True
    hash_length: int = Field(default=7, ge=1, le=40)  # git abbreviates to 7


class VersioningConfig(BaseModel):
    """Application configuration."""

    numbering: NumberingConfig = Field(default_factory=NumberingConfig)
    git: GitConfig = Field(default_factory=GitConfig)
    version: VersionConfig = Field(default_factory=VersionConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    @property
    def auto_patch_numbering_enabled(self) -> bool:
        return self.numbering.patch != NumberingMethod.NONE

    @property
    def auto_ios_build_numbering_enabled(self) -> bool:
        return self.numbering.ios_build != NumberingMethod.NONE

    @property
    def auto_android_build_numbering_enabled(self) -> bool:
        return self.numbering.android_build != NumberingMethod.NONE

    def previous_record(self) -> VersionRecord:
        """Build a record from the configured version.

        Raises:
            ValueError: If bundle_version is not a dotted number.
        """
        major, minor, patch = parse_bundle_version(self.version.bundle_version)
        return VersionRecord(
            major=major,
            minor=minor,
            patch=patch,
            ios_build_number=self.version.ios_build_number,
            android_bundle_version_code=self.version.android_bundle_version_code,
        )


def field_states(config: VersioningConfig) -> list[tuple[str, bool]]:
    """List which version fields can be edited by hand.

    A field is editable when no numbering method computes it.

    Returns:
        List of (field name, enabled) pairs.
    """
    return [
        ("major", True),
        ("minor", True),
        ("patch", not config.auto_patch_numbering_enabled),
        ("ios_build_number", not config.auto_ios_build_numbering_enabled),
        ("android_bundle_version_code", not config.auto_android_build_numbering_enabled),
        ("tag_pattern", NumberingMethod.COUNT_COMMITS_FROM_TAG in (
            config.numbering.patch,
            config.numbering.ios_build,
            config.numbering.android_build,
        )),
        ("hash_length", config.output.auto_save and config.output.save_commit_hash),
    ]


def get_config_paths() -> list[Path]:
    """Get list of config file paths to search, in priority order.

    Search order:
    1. Current working directory (INI)
    2. User home directory (~/.autoversioning/) (INI)
    3. YAML files in the same locations

    Returns:
        List of paths to check for config files.
    """
    cwd = Path.cwd()
    home_dir = Path.home() / ".autoversioning"
    return [
        cwd / CONFIG_FILE_NAME,
        home_dir / CONFIG_FILE_NAME,
        cwd / "autoversioning.yaml",
        cwd / "autoversioning.yml",
        cwd / ".autoversioning.yaml",
        cwd / ".autoversioning.yml",
        home_dir / "config.yaml",
        home_dir / "config.yml",
    ]


def find_config_file() -> Path | None:
    """Find the first existing config file.

    Returns:
        Path to config file if found, None otherwise.
    """
    for path in get_config_paths():
        if path.exists():
            return path
    return None


def _expand_env_vars(value: Any) -> Any:
    """Recursively expand environment variables in config values.

    Supports ${VAR} and $VAR syntax.
    """
    if isinstance(value, str):
        pattern = re.compile(r"\$\{([^}]+)\}|\$([A-Za-z_][A-Za-z0-9_]*)")

        def replace(match: re.Match[str]) -> str:
            var_name = match.group(1) or match.group(2)
            return os.environ.get(var_name, "")

        return pattern.sub(replace, value)
    elif isinstance(value, dict):
        return {k: _expand_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [_expand_env_vars(item) for item in value]
    return value


def _parse_bool(value: str) -> bool:
    """Parse a boolean value from a string (true/false/yes/no/1/0/on/off)."""
    return value.strip().lower() in ("true", "yes", "1", "on")


_INI_SCHEMA: dict[str, dict[str, str]] = {
    "numbering": {
        "patch": "str",
        "ios_build": "str",
        "android_build": "str",
        "tag_pattern": "raw",
    },
    "git": {"path": "str"},
    "version": {
        "bundle_version": "str",
        "ios_build_number": "str",
        "android_bundle_version_code": "str",
    },
    "output": {
        "auto_save": "bool",
        "path": "str",
        "create_gitignore": "bool",
        "save_commit_hash": "bool",
        "hash_length": "str",
    },
}


def _load_ini_config(path: Path) -> dict[str, Any]:
    """Load configuration from INI file.

    Returns:
        Dictionary structure matching VersioningConfig schema.
    """
    # No interpolation: tag patterns and paths may contain '%'
    parser = configparser.ConfigParser(interpolation=None)
    parser.read(path, encoding="utf-8")

    config: dict[str, Any] = {}
    for section, keys in _INI_SCHEMA.items():
        if not parser.has_section(section):
            continue
        values: dict[str, Any] = {}
        for key, kind in keys.items():
            if not parser.has_option(section, key):
                continue
            raw = parser.get(section, key)
            if kind == "bool":
                values[key] = _parse_bool(raw)
            elif kind == "raw":
                # Keep the pattern as written, even if blank
                values[key] = raw.strip()
            elif raw.strip():
                values[key] = raw.strip()
        if values:
            config[section] = values
    return config


def _load_yaml_config(path: Path) -> dict[str, Any]:
    """Load configuration from YAML file."""
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_config(path: Path | None = None) -> VersioningConfig:
    """Load configuration from file.

    Supports both INI (.ini/.cfg) and YAML (.yaml/.yml) formats.
    Environment variables are expanded in all values using ${VAR} syntax.

    Args:
        path: Explicit path to config file. If None, searches default locations.

    Returns:
        Loaded configuration, or defaults if no config file exists.

    Raises:
        ConfigError: If the file contains invalid values.
    """
    if path is None:
        path = find_config_file()

    if path is None or not path.exists():
        return VersioningConfig()

    if path.suffix in (".ini", ".cfg"):
        raw_config = _load_ini_config(path)
    else:
        raw_config = _load_yaml_config(path)

    expanded_config = _expand_env_vars(raw_config)

    try:
        return VersioningConfig.model_validate(expanded_config)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}:\n{e}") from e


def get_config_dir() -> Path:
    """Get the user config directory, creating it if needed."""
    config_dir = Path.home() / ".autoversioning"
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def save_default_config(path: Path | None = None) -> Path:
    """Save a default INI config file.

    Args:
        path: Where to save. Defaults to ./autoversioning.ini.

    Returns:
        Path to saved config file.
    """
    if path is None:
        path = Path.cwd() / CONFIG_FILE_NAME

    default_config = f"""\
# autoversioning configuration
# You can use environment variables with ${{VAR}} syntax

[numbering]
# Numbering method per field: none, count_all_commits, count_commits_from_tag
patch = none
ios_build = count_all_commits
android_build = count_all_commits
# Tags counted by count_commits_from_tag
tag_pattern = {DEFAULT_TAG_PATTERN}

[git]
# Path to the git executable, just "git" if it's on PATH
path = {DEFAULT_GIT_PATH}

[version]
# Current version (written back by "autoversioning apply")
bundle_version = 0.1.0
ios_build_number = 0
android_bundle_version_code = 0

[output]
# Save the version record for the application to read at runtime
auto_save = true
path = {DEFAULT_VERSION_DATA_PATH}
# Create a .gitignore that ignores the version record
create_gitignore = true
# Save the commit hash and how many characters to keep (1-40)
save_commit_hash = true
hash_length = 7
"""

    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        f.write(default_config)

    return path


def save_version_settings(
    path: Path,
    record: VersionRecord,
    config: VersioningConfig,
    write_bundle_version: bool = True,
) -> bool:
    """Write the resolved version back into the [version] section.

    Build numbers are only written for fields with automatic numbering,
    leaving manual values untouched.

    Args:
        path: INI config file to update.
        record: Resolved version.
        config: Configuration that produced the record.
        write_bundle_version: Also write the bundle version. Off when the
            configured one could not be parsed, so it is left as the user wrote it.

    Returns:
        True if saved, False if the file is missing or not an INI file.
    """
    if not path.exists() or path.suffix not in (".ini", ".cfg"):
        return False

    parser = configparser.ConfigParser(interpolation=None)
    parser.read(path, encoding="utf-8")

    if not parser.has_section("version"):
        parser.add_section("version")
    if write_bundle_version:
        parser.set("version", "bundle_version", record.bundle_version)
    if config.auto_ios_build_numbering_enabled:
        parser.set("version", "ios_build_number", str(record.ios_build_number))
    if config.auto_android_build_numbering_enabled:
        parser.set(
            "version", "android_bundle_version_code", str(record.android_bundle_version_code)
        )

    with open(path, "w", encoding="utf-8") as f:
        parser.write(f)

    return True
