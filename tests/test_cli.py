"""Tests for the CLI module."""

import json
import re
from pathlib import Path

import pytest
from click.testing import CliRunner

from autoversioning import __version__
from autoversioning.cli import main

MANUAL_CONFIG = """\
[numbering]
patch = none
ios_build = none
android_build = none

[version]
bundle_version = 3.1.4
ios_build_number = 15
android_bundle_version_code = 9

[output]
path = out/VersionData.json
save_commit_hash = false
"""


def test_main_help() -> None:
    """Test that --help works."""
    runner = CliRunner()
    result = runner.invoke(main, ["--help"])
    assert result.exit_code == 0
    assert "autoversioning" in result.output


def test_version() -> None:
    """Test that --version works."""
    runner = CliRunner()
    result = runner.invoke(main, ["--version"])
    assert result.exit_code == 0
    assert re.search(r"\d+\.\d+\.\d+", result.output)
    assert __version__ in result.output


def test_commands_exist() -> None:
    """Test that the main commands exist."""
    runner = CliRunner()
    for command in ["resolve", "apply", "show", "git", "config"]:
        result = runner.invoke(main, [command, "--help"])
        assert result.exit_code == 0, command


def test_config_path() -> None:
    """Test the config path command."""
    runner = CliRunner()
    result = runner.invoke(main, ["config", "path"])
    assert result.exit_code == 0
    assert "autoversioning.ini" in result.output


def test_config_init() -> None:
    """Test config init creates a file and refuses to overwrite it."""
    runner = CliRunner()
    with runner.isolated_filesystem():
        result = runner.invoke(main, ["config", "init"])
        assert result.exit_code == 0
        assert Path("autoversioning.ini").exists()

        result = runner.invoke(main, ["config", "init"])
        assert result.exit_code == 1
        assert "already exists" in result.output

        result = runner.invoke(main, ["config", "init", "--force"])
        assert result.exit_code == 0


def test_config_show() -> None:
    runner = CliRunner()
    with runner.isolated_filesystem():
        Path("autoversioning.ini").write_text(MANUAL_CONFIG, encoding="utf-8")
        result = runner.invoke(main, ["--config", "autoversioning.ini", "config", "show"])
        assert result.exit_code == 0
        assert "3.1.4" in result.output


def test_resolve_json() -> None:
    """Test resolve with manual numbering needs no git and prints JSON."""
    runner = CliRunner()
    with runner.isolated_filesystem():
        Path("autoversioning.ini").write_text(MANUAL_CONFIG, encoding="utf-8")
        result = runner.invoke(main, ["--config", "autoversioning.ini", "resolve", "-f", "json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["bundle_version"] == "3.1.4"
        assert data["record"]["ios_build_number"] == 15
        assert data["failed_fields"] == []
        assert not Path("out").exists()


def test_apply_and_show() -> None:
    """Test apply saves the record and show reads it back."""
    runner = CliRunner()
    with runner.isolated_filesystem():
        Path("autoversioning.ini").write_text(MANUAL_CONFIG, encoding="utf-8")
        result = runner.invoke(main, ["--config", "autoversioning.ini", "apply"])
        assert result.exit_code == 0
        assert Path("out/VersionData.json").exists()
        assert Path("out/.gitignore").exists()

        result = runner.invoke(main, ["--config", "autoversioning.ini", "show"])
        assert result.exit_code == 0
        assert "3.1.4" in result.output


def test_show_missing_record() -> None:
    runner = CliRunner()
    with runner.isolated_filesystem():
        result = runner.invoke(main, ["show", "--path", "missing.json"])
        assert result.exit_code == 1
        assert "No version record found" in result.output


def test_invalid_config() -> None:
    """Test an invalid config exits with an error."""
    runner = CliRunner()
    with runner.isolated_filesystem():
        Path("bad.ini").write_text("[numbering]\npatch = sometimes\n", encoding="utf-8")
        result = runner.invoke(main, ["--config", "bad.ini", "resolve"])
        assert result.exit_code == 1
        assert "Config error" in result.output


def test_git_missing_executable() -> None:
    runner = CliRunner()
    with runner.isolated_filesystem():
        result = runner.invoke(main, ["git", "--path", "./definitely-not-git"])
        assert result.exit_code == 1
        assert "Git not found" in result.output


def test_apply_corrupt_record(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Test apply reports an unreadable record file and exits without a traceback."""
    monkeypatch.setattr(Path, "home", lambda: tmp_path)
    runner = CliRunner()
    with runner.isolated_filesystem():
        Path("autoversioning.ini").write_text(MANUAL_CONFIG, encoding="utf-8")
        Path("out").mkdir()
        Path("out/VersionData.json").write_text("{not json", encoding="utf-8")

        result = runner.invoke(main, ["--config", "autoversioning.ini", "apply"])

        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert "Version record not saved" in result.output
        assert not Path("autoversioning_errors.log").exists()
    assert (tmp_path / ".autoversioning" / "autoversioning_errors.log").exists()
