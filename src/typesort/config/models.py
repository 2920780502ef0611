"""Configuration models describing typesort settings."""

from __future__ import annotations

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_ALLOWED_EXTENSIONS: List[str] = [
    "jpeg",
    "jpg",
    "png",
    "eps",
    "ai",
    "psd",
    "pdf",
    "crw",
    "zip",
    "rar",
    "svg",
    "cdr",
]


def _normalize_extensions(values: List[str]) -> List[str]:
    normalized: List[str] = []
    for value in values:
        cleaned = str(value).strip().lower().lstrip(".")
        if cleaned and cleaned not in normalized:
            normalized.append(cleaned)
    return normalized


class TypesortBaseModel(BaseModel):
    """Shared configuration for typesort Pydantic models."""

    model_config = ConfigDict(extra="forbid")


class OrganizationOptions(TypesortBaseModel):
    """Settings that govern how files are classified and placed.

    Attributes:
        mode: Classification policy applied for the whole run.
        allowed_extensions: Extensions organized in allow-list mode.
        folder_names: Optional folder overrides keyed by extension (allow-list mode).
        detect_types: Whether to sniff content signatures before trusting extensions.
        correct_extensions: Whether sniffed types may rewrite destination extensions.
        dry_run: Whether runs default to preview mode.
    """

    mode: Literal["allow_list", "category_table"] = "category_table"
    allowed_extensions: List[str] = Field(
        default_factory=lambda: list(DEFAULT_ALLOWED_EXTENSIONS)
    )
    folder_names: Dict[str, str] = Field(default_factory=dict)
    detect_types: bool = True
    correct_extensions: bool = True
    dry_run: bool = False

    @field_validator("allowed_extensions")
    @classmethod
    def _clean_allowed(cls, value: List[str]) -> List[str]:
        return _normalize_extensions(value)

    @field_validator("folder_names")
    @classmethod
    def _clean_folder_names(cls, value: Dict[str, str]) -> Dict[str, str]:
        return {key.strip().lower().lstrip("."): name for key, name in value.items()}


class ArchiveOptions(TypesortBaseModel):
    """Archive expansion settings.

    Attributes:
        extract: Whether supported archives are expanded and their contents organized.
        keep_scratch: Whether scratch directories survive after their contents are placed.
        max_depth: Maximum nesting depth for archives found inside archives.
        max_entries: Maximum number of entries expanded from a single archive.
        max_uncompressed_mb: Maximum uncompressed payload of a single archive.
        scratch_dirname: Name of the scratch folder created under the destination root.
    """

    extract: bool = True
    keep_scratch: bool = False
    max_depth: int = Field(default=5, ge=0)
    max_entries: int = Field(default=10_000, ge=1)
    max_uncompressed_mb: int = Field(default=2_048, ge=1)
    scratch_dirname: str = ".typesort-extract"


class FilterOptions(TypesortBaseModel):
    """Filters applied while enumerating source directories.

    Attributes:
        exclude_hidden: Skip dot-prefixed files and directories.
        exclude_system: Skip well-known system and tooling directories.
        min_file_size: Minimum size in bytes; smaller files are filtered out.
        max_file_size: Maximum size in bytes; 0 disables the limit.
        include_extensions: When non-empty, only these extensions are considered.
        exclude_extensions: Extensions that are never considered.
    """

    exclude_hidden: bool = True
    exclude_system: bool = True
    min_file_size: int = Field(default=0, ge=0)
    max_file_size: int = Field(default=0, ge=0)
    include_extensions: List[str] = Field(default_factory=list)
    exclude_extensions: List[str] = Field(default_factory=list)

    @field_validator("include_extensions", "exclude_extensions")
    @classmethod
    def _clean_extensions(cls, value: List[str]) -> List[str]:
        return _normalize_extensions(value)


class PerformanceOptions(TypesortBaseModel):
    """Throughput settings.

    Attributes:
        max_concurrent_files: Size of each parallel placement batch.
    """

    max_concurrent_files: int = Field(default=10, ge=1)


class LoggingSettings(TypesortBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
        file: Optional path of a rotating log file.
        max_size_mb: Maximum log size before rotation.
        backup_count: Number of historical log files to retain.
    """

    level: str = "WARNING"
    file: Optional[str] = None
    max_size_mb: int = 100
    backup_count: int = 5


class CLIOptions(TypesortBaseModel):
    """CLI behavior defaults and presentation preferences.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
        summary_default: Whether commands only print summary lines by default.
    """

    quiet_default: bool = False
    summary_default: bool = False


class TypesortConfig(TypesortBaseModel):
    """Top-level configuration struct for typesort.

    Attributes:
        organization: Classification and placement settings.
        archives: Archive expansion settings.
        filters: Source enumeration filters.
        performance: Batch sizing.
        logging: Logging configuration.
        cli: CLI presentation defaults.
    """

    organization: OrganizationOptions = Field(default_factory=OrganizationOptions)
    archives: ArchiveOptions = Field(default_factory=ArchiveOptions)
    filters: FilterOptions = Field(default_factory=FilterOptions)
    performance: PerformanceOptions = Field(default_factory=PerformanceOptions)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "DEFAULT_ALLOWED_EXTENSIONS",
    "TypesortBaseModel",
    "OrganizationOptions",
    "ArchiveOptions",
    "FilterOptions",
    "PerformanceOptions",
    "LoggingSettings",
    "CLIOptions",
    "TypesortConfig",
]
