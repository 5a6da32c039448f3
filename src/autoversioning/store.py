"""Persistence for version records.

Each record is a JSON file with a companion `.meta` file written when the
record is first created:

    AutoVersioning/Runtime/Resources/VersionData.json
    AutoVersioning/Runtime/Resources/VersionData.json.meta

The first time a record is created, a `.gitignore` can be generated so the
record stays out of version control. Records under a `Resources` directory
get the ignore file next to `Resources` rather than inside it.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from autoversioning.diagnostics import Diagnostics
from autoversioning.models import VersionRecord

RESOURCES_DIR_NAME = "Resources"
META_SUFFIX = ".meta"
GITIGNORE_NAME = ".gitignore"

# Record file version for future migrations
RECORD_VERSION = 1


def meta_path_for(location: Path) -> Path:
    """Get the companion metadata path for a record file."""
    return location.with_name(location.name + META_SUFFIX)


def gitignore_entries(location: Path, resources_dir: str = RESOURCES_DIR_NAME) -> tuple[Path, list[str]]:
    """Work out where the ignore file goes and what it lists.

    Args:
        location: Record file path.
        resources_dir: Directory name reserved for bundled runtime resources.

    Returns:
        Tuple of (ignore file path, entries relative to it).
    """
    parts = location.parts
    if resources_dir in parts:
        index = parts.index(resources_dir)
        base = Path(*parts[:index]) if index > 0 else Path()
        relative = "/".join(parts[index:])
    else:
        base = location.parent
        relative = location.name
    return base / GITIGNORE_NAME, [relative, relative + META_SUFFIX]


def create_gitignore_file(location: Path, resources_dir: str = RESOURCES_DIR_NAME) -> Path:
    """Write a .gitignore that ignores a record file and its metadata file.

    Returns:
        Path of the written ignore file.
    """
    ignore_path, entries = gitignore_entries(location, resources_dir)
    ignore_path.parent.mkdir(parents=True, exist_ok=True)
    with open(ignore_path, "w", encoding="utf-8") as f:
        for entry in entries:
            f.write(entry + "\n")
    return ignore_path


class VersionStore:
    """Loads and saves version records on the local file system.

    Loaded records are kept per location, so saving into an existing slot
    mutates the same VersionRecord object that `load` returned.
    """

    def __init__(
        self,
        create_gitignore: bool = True,
        diagnostics: Diagnostics | None = None,
        generator: str = "autoversioning",
    ) -> None:
        """Initialize the store.

        Args:
            create_gitignore: Generate a .gitignore when a record is first created.
            diagnostics: Sink for store messages.
            generator: Name written into the companion metadata file.
        """
        self.create_gitignore = create_gitignore
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        self.generator = generator
        self._slots: dict[Path, VersionRecord] = {}
        self._dirty: set[Path] = set()

    def _key(self, location: Path) -> Path:
        return Path(location).absolute()

    def load(self, location: Path) -> VersionRecord | None:
        """Load the record at a location.

        Returns:
            The record, or None if no record exists there.
        """
        key = self._key(location)
        if not key.exists():
            self._slots.pop(key, None)
            return None
        if key in self._slots:
            return self._slots[key]

        with open(key, encoding="utf-8") as f:
            data = json.load(f)
        record = VersionRecord.model_validate(data.get("record", data))
        self._slots[key] = record
        return record

    def load_or_create(self, location: Path) -> VersionRecord:
        """Load the record at a location, creating an empty one if missing."""
        record = self.load(location)
        if record is not None:
            return record
        self.save(VersionRecord(), location)
        return self._slots[self._key(location)]

    def save(self, record: VersionRecord, location: Path) -> bool:
        """Save a record, updating the existing slot in place if there is one.

        Args:
            record: Values to save.
            location: Record file path.

        Returns:
            True if a new record was created, False if an existing one was updated.
        """
        existing = self.load(location)
        if existing is not None:
            if existing is not record:
                existing.copy_from(record)
            self.mark_dirty(location)
            self.flush(location)
            return False

        self._create(record, location)
        return True

    def mark_dirty(self, location: Path) -> None:
        """Mark a loaded record as needing to be written."""
        self._dirty.add(self._key(location))

    def is_dirty(self, location: Path) -> bool:
        return self._key(location) in self._dirty

    def flush(self, location: Path) -> bool:
        """Write a dirty record to disk if its content changed.

        Returns:
            True if the file was rewritten.
        """
        key = self._key(location)
        if key not in self._dirty:
            return False
        self._dirty.discard(key)

        content = self._serialize(self._slots[key])
        try:
            current = key.read_text(encoding="utf-8")
        except OSError:
            current = None
        if current == content:
            return False
        key.write_text(content, encoding="utf-8")
        return True

    def maybe_generate_ignore_file(self, location: Path) -> Path | None:
        """Generate the .gitignore for a record if enabled.

        Failures are reported but never raised.

        Returns:
            Path of the ignore file, or None if none was written.
        """
        if not self.create_gitignore:
            return None
        try:
            return create_gitignore_file(Path(location))
        except OSError as e:
            self.diagnostics.error(f"Failed to create .gitignore for '{location}'", e)
            return None

    def _create(self, record: VersionRecord, location: Path) -> None:
        key = self._key(location)
        key.parent.mkdir(parents=True, exist_ok=True)
        slot = record.model_copy()
        key.write_text(self._serialize(slot), encoding="utf-8")
        meta_path_for(key).write_text(self._serialize_meta(), encoding="utf-8")
        self._slots[key] = slot
        self.diagnostics.info(f"Create a new version record since it did not exist: '{location}'")
        self.maybe_generate_ignore_file(Path(location))

    def _serialize(self, record: VersionRecord) -> str:
        data: dict[str, Any] = {
            "_meta": {"version": RECORD_VERSION},
            "record": record.model_dump(),
            "bundle_version": record.bundle_version,
            "bundle_version_with_hash": record.bundle_version_with_hash,
        }
        return json.dumps(data, indent=2) + "\n"

    def _serialize_meta(self) -> str:
        data = {
            "version": RECORD_VERSION,
            "generator": self.generator,
            "created_at": datetime.now(UTC).isoformat(),
        }
        return json.dumps(data, indent=2) + "\n"
