"""Data models for version records and resolution results."""

from pydantic import BaseModel, ConfigDict, Field


class VersionRecord(BaseModel):
    """Version information saved for the built application to read at runtime."""

    model_config = ConfigDict(validate_assignment=True)

    major: int = Field(default=0, ge=0)
    minor: int = Field(default=0, ge=0)
    patch: int = Field(default=0, ge=0)
    ios_build_number: int = Field(default=0, ge=0)
    android_bundle_version_code: int = Field(default=0, ge=0)
    hash: str | None = Field(default=None, max_length=40)

    @property
    def bundle_version(self) -> str:
        """Get the version as "major.minor.patch"."""
        return f"{self.major}.{self.minor}.{self.patch}"

    @property
    def bundle_version_with_hash(self) -> str:
        """Get the bundle version with the commit hash appended, if any."""
        if not self.hash:
            return self.bundle_version
        return f"{self.bundle_version} ({self.hash})"

    def copy_from(self, other: "VersionRecord") -> None:
        """Overwrite every field with the values of another record."""
        for name in type(self).model_fields:
            setattr(self, name, getattr(other, name))


class FieldResult(BaseModel):
    """Outcome of resolving a single field."""

    name: str
    value: int | str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ResolutionReport(BaseModel):
    """Result of a full resolution pass."""

    record: VersionRecord
    fields: list[FieldResult] = Field(default_factory=list)

    @property
    def failed_fields(self) -> list[FieldResult]:
        """Fields that kept their previous value because resolution failed."""
        return [f for f in self.fields if not f.ok]

    @property
    def ok(self) -> bool:
        return not self.failed_fields
