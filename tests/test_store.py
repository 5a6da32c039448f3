"""Tests for version record persistence."""

import io
import json
from pathlib import Path

from rich.console import Console

from autoversioning.diagnostics import Diagnostics
from autoversioning.models import VersionRecord
from autoversioning.store import (
    VersionStore,
    create_gitignore_file,
    gitignore_entries,
    meta_path_for,
)


def _store(create_gitignore: bool = True) -> VersionStore:
    return VersionStore(
        create_gitignore=create_gitignore,
        diagnostics=Diagnostics(console=Console(file=io.StringIO())),
    )


class TestGitignoreEntries:
    """Tests for working out .gitignore placement."""

    def test_resources_path(self) -> None:
        """Test records under Resources get the ignore file next to Resources."""
        location = Path("AutoVersioning/Runtime/Resources/VersionData.json")
        ignore_path, entries = gitignore_entries(location)
        assert ignore_path == Path("AutoVersioning/Runtime/.gitignore")
        assert entries == [
            "Resources/VersionData.json",
            "Resources/VersionData.json.meta",
        ]

    def test_nested_resources_path(self) -> None:
        """Test deeper paths under Resources are kept in the entries."""
        ignore_path, entries = gitignore_entries(Path("Game/Resources/Data/Version.json"))
        assert ignore_path == Path("Game/.gitignore")
        assert entries[0] == "Resources/Data/Version.json"

    def test_plain_path(self) -> None:
        """Test other records get the ignore file in their own directory."""
        ignore_path, entries = gitignore_entries(Path("build/info/version.json"))
        assert ignore_path == Path("build/info/.gitignore")
        assert entries == ["version.json", "version.json.meta"]

    def test_segment_must_match_exactly(self) -> None:
        """Test a directory merely containing 'Resources' is not special."""
        ignore_path, _ = gitignore_entries(Path("MyResources/version.json"))
        assert ignore_path == Path("MyResources/.gitignore")

    def test_create_file(self, tmp_path: Path) -> None:
        """Test the ignore file lists each entry on its own line."""
        location = tmp_path / "Runtime" / "Resources" / "VersionData.json"
        ignore_path = create_gitignore_file(location)
        assert ignore_path == tmp_path / "Runtime" / ".gitignore"
        assert ignore_path.read_text(encoding="utf-8").splitlines() == [
            "Resources/VersionData.json",
            "Resources/VersionData.json.meta",
        ]


class TestVersionStoreLoad:
    """Tests for loading records."""

    def test_load_missing(self, tmp_path: Path) -> None:
        """Test loading a missing record returns None."""
        assert _store().load(tmp_path / "missing.json") is None

    def test_load_or_create_new(self, tmp_path: Path) -> None:
        """Test load_or_create makes and persists an empty record."""
        location = tmp_path / "out" / "VersionData.json"
        record = _store().load_or_create(location)
        assert record == VersionRecord()
        assert location.exists()
        assert meta_path_for(location).exists()

    def test_load_or_create_existing(self, tmp_path: Path) -> None:
        """Test load_or_create returns an existing record from disk."""
        location = tmp_path / "VersionData.json"
        _store().save(VersionRecord(major=1, minor=4, patch=2, hash="abc1234"), location)

        record = _store().load_or_create(location)
        assert record == VersionRecord(major=1, minor=4, patch=2, hash="abc1234")

    def test_file_format(self, tmp_path: Path) -> None:
        """Test the record file includes display strings for runtime use."""
        location = tmp_path / "VersionData.json"
        _store().save(VersionRecord(major=1, minor=2, patch=3, hash="abc1234"), location)
        data = json.loads(location.read_text(encoding="utf-8"))
        assert data["record"]["patch"] == 3
        assert data["bundle_version"] == "1.2.3"
        assert data["bundle_version_with_hash"] == "1.2.3 (abc1234)"


class TestVersionStoreSave:
    """Tests for saving records."""

    def test_create_makes_directories(self, tmp_path: Path) -> None:
        """Test saving a new record creates parent directories."""
        location = tmp_path / "a" / "b" / "VersionData.json"
        created = _store().save(VersionRecord(patch=5), location)
        assert created is True
        assert location.exists()

    def test_update_keeps_identity(self, tmp_path: Path) -> None:
        """Test saving into an existing slot mutates the loaded object."""
        location = tmp_path / "VersionData.json"
        store = _store()
        original = store.load_or_create(location)

        created = store.save(VersionRecord(major=2, patch=7, hash="1234567"), location)

        assert created is False
        assert store.load(location) is original
        assert original.major == 2
        assert original.patch == 7
        assert original.hash == "1234567"

    def test_update_overwrites_all_fields(self, tmp_path: Path) -> None:
        """Test an update replaces every field, not just changed ones."""
        location = tmp_path / "VersionData.json"
        store = _store()
        store.save(VersionRecord(major=1, ios_build_number=9, hash="abc1234"), location)
        store.save(VersionRecord(minor=3), location)

        reloaded = _store().load(location)
        assert reloaded == VersionRecord(minor=3)

    def test_save_twice_is_idempotent(self, tmp_path: Path) -> None:
        """Test re-saving an unchanged record rewrites nothing and skips .gitignore."""
        location = tmp_path / "Resources" / "VersionData.json"
        ignore_path = tmp_path / ".gitignore"
        store = _store()
        record = VersionRecord(major=1, minor=2, patch=3)

        assert store.save(record, location) is True
        assert ignore_path.exists()
        content = location.read_text(encoding="utf-8")
        meta = meta_path_for(location).read_text(encoding="utf-8")
        ignore_path.unlink()

        assert store.save(record, location) is False
        assert not ignore_path.exists()
        assert location.read_text(encoding="utf-8") == content
        assert meta_path_for(location).read_text(encoding="utf-8") == meta
        assert store.is_dirty(location) is False

    def test_gitignore_disabled(self, tmp_path: Path) -> None:
        """Test no .gitignore is written when disabled."""
        location = tmp_path / "VersionData.json"
        _store(create_gitignore=False).save(VersionRecord(), location)
        assert not (tmp_path / ".gitignore").exists()

    def test_gitignore_failure_does_not_abort_save(self, tmp_path: Path) -> None:
        """Test a failing .gitignore write is reported but the record is saved."""
        location = tmp_path / "VersionData.json"
        (tmp_path / ".gitignore").mkdir()
        store = _store()

        assert store.save(VersionRecord(patch=1), location) is True
        assert location.exists()
        assert len(store.diagnostics.errors) == 1
