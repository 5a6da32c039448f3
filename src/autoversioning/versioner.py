"""Resolution pass: compute every version field and save the results."""

from __future__ import annotations

from pathlib import Path

from autoversioning.config import VersioningConfig, save_version_settings
from autoversioning.diagnostics import Diagnostics
from autoversioning.exceptions import AutoVersioningError
from autoversioning.git import DEFAULT_GIT_PATH, GitClient
from autoversioning.models import FieldResult, ResolutionReport, VersionRecord
from autoversioning.resolver import NumberingMethod, VersionResolver
from autoversioning.store import VersionStore

# Field name, human label, numbering setting used in the remedy hint
_NUMBERED_FIELDS: list[tuple[str, str, str]] = [
    ("patch", "patch number", "numbering.patch"),
    ("ios_build_number", "iOS build number", "numbering.ios_build"),
    ("android_bundle_version_code", "Android bundle version code", "numbering.android_build"),
]


def find_decreases(previous: VersionRecord, resolved: VersionRecord) -> list[str]:
    """List numbered fields whose resolved value is smaller than before.

    Returns:
        One human-readable warning per decreased field.
    """
    warnings = []
    for name, label, _ in _NUMBERED_FIELDS:
        old = getattr(previous, name)
        new = getattr(resolved, name)
        if new < old:
            warnings.append(f"The {label} is smaller than the last number ({new} < {old}).")
    return warnings


class Versioner:
    """Resolves a version record from configuration and git, and saves it."""

    def __init__(
        self,
        config: VersioningConfig,
        git: GitClient | None = None,
        store: VersionStore | None = None,
        diagnostics: Diagnostics | None = None,
        working_directory: Path | None = None,
    ) -> None:
        self.config = config
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        self.working_directory = working_directory
        self.git = git if git is not None else GitClient(
            git_path=config.git.path or DEFAULT_GIT_PATH,
            working_directory=working_directory,
            diagnostics=self.diagnostics,
        )
        self.store = store if store is not None else VersionStore(
            create_gitignore=config.output.create_gitignore,
            diagnostics=self.diagnostics,
        )
        self.resolver = VersionResolver(self.git)

    @property
    def record_path(self) -> Path:
        """Location of the version record, relative to the working directory."""
        path = Path(self.config.output.path)
        if self.working_directory is not None and not path.is_absolute():
            return self.working_directory / path
        return path

    def previous_record(self) -> tuple[VersionRecord, FieldResult | None]:
        """Read the configured version, falling back to 0.0.0 if it can't be parsed."""
        try:
            return self.config.previous_record(), None
        except ValueError as e:
            self.diagnostics.error(
                "Could not interpret the version number from bundle_version.", e
            )
            fallback = VersionRecord(
                ios_build_number=self.config.version.ios_build_number,
                android_bundle_version_code=self.config.version.android_bundle_version_code,
            )
            return fallback, FieldResult(name="bundle_version", error=str(e))

    def resolve(self, previous: VersionRecord | None = None) -> ResolutionReport:
        """Resolve every field.

        Each field is resolved independently. A field that fails keeps its
        previous value and the failure is reported with a suggested fix.

        Args:
            previous: Previous values. Defaults to the configured version.

        Returns:
            Report with the resolved record and per-field results.
        """
        results: list[FieldResult] = []
        if previous is None:
            previous, parse_failure = self.previous_record()
            if parse_failure is not None:
                results.append(parse_failure)

        record = previous.model_copy()
        numbering = self.config.numbering
        methods: dict[str, NumberingMethod] = {
            "patch": numbering.patch,
            "ios_build_number": numbering.ios_build,
            "android_bundle_version_code": numbering.android_build,
        }

        for name, label, setting in _NUMBERED_FIELDS:
            try:
                value = self.resolver.resolve_field(
                    methods[name], getattr(previous, name), numbering.tag_pattern
                )
            except AutoVersioningError as e:
                self.diagnostics.error(
                    f"Failed to get {label}.\n"
                    f"Try creating a git repository or changing {setting} to none.",
                    e,
                )
                results.append(FieldResult(name=name, value=getattr(previous, name), error=str(e)))
                continue
            setattr(record, name, value)
            results.append(FieldResult(name=name, value=value))

        if self.config.output.save_commit_hash:
            try:
                record.hash = self.git.get_commit_hash(self.config.output.hash_length)
                results.append(FieldResult(name="hash", value=record.hash))
            except (AutoVersioningError, ValueError) as e:
                self.diagnostics.error(
                    "Failed to get commit hash.\n"
                    "Try creating a git repository or setting output.save_commit_hash to false.",
                    e,
                )
                results.append(FieldResult(name="hash", value=previous.hash, error=str(e)))
        else:
            record.hash = None

        for warning in find_decreases(previous, record):
            self.diagnostics.warning(warning)

        return ResolutionReport(record=record, fields=results)

    def save_record(self, record: VersionRecord) -> bool:
        """Save the record to the configured output path.

        Returns:
            True if a new record file was created.
        """
        return self.store.save(record, self.record_path)

    def run(self, config_path: Path | None = None, write_settings: bool = True) -> ResolutionReport:
        """Resolve all fields, write back settings and save the record.

        When the configured bundle version can't be parsed it is left as
        written and no record is saved, since the record would carry 0.0.x.

        Args:
            config_path: INI file to write the resolved version into.
            write_settings: Write the resolved version back to `config_path`.

        Returns:
            The resolution report. A record that could not be saved is
            reported as a failed "record" field.
        """
        report = self.resolve()
        version_ok = "bundle_version" not in [f.name for f in report.failed_fields]
        if write_settings and config_path is not None:
            if save_version_settings(
                config_path, report.record, self.config, write_bundle_version=version_ok
            ):
                self.diagnostics.info(f"Saved version settings: '{config_path}'")

        if not self.config.output.auto_save:
            return report
        if not version_ok:
            self.diagnostics.error(
                "Version record not saved.\nFix version.bundle_version to be like 1.2.3."
            )
            report.fields.append(FieldResult(name="record", error="Invalid bundle version"))
            return report
        try:
            self.save_record(report.record)
        except (OSError, ValueError) as e:
            self.diagnostics.error(
                f"Could not save version record: '{self.record_path}'\n"
                "Delete or fix the record file and try again.",
                e,
            )
            report.fields.append(FieldResult(name="record", error=str(e)))
        return report
