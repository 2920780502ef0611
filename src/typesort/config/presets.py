"""Named override bundles layered between the config file and the environment."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping


@dataclass(frozen=True)
class Preset:
    """A reusable set of dotted-key configuration overrides.

    Attributes:
        name: Identifier used on the command line.
        description: One-line summary shown by ``typesort config presets``.
        overrides: Dotted keys mapped to values, e.g. ``{"archives.extract": False}``.
        builtin: Whether the preset ships with typesort.
    """

    name: str
    description: str
    overrides: Mapping[str, Any] = field(default_factory=dict)
    builtin: bool = True


BUILTIN_PRESETS: Mapping[str, Preset] = MappingProxyType(
    {
        preset.name: preset
        for preset in (
            Preset("default", "Category table with archive expansion."),
            Preset(
                "media",
                "Photos, video, and audio only; archives are placed unexpanded.",
                {
                    "archives.extract": False,
                    "filters.include_extensions": [
                        "jpg",
                        "jpeg",
                        "png",
                        "gif",
                        "mp4",
                        "avi",
                        "mp3",
                        "wav",
                    ],
                },
            ),
            Preset(
                "documents",
                "Office documents, PDFs, and plain text only.",
                {
                    "filters.include_extensions": [
                        "pdf",
                        "doc",
                        "docx",
                        "txt",
                        "rtf",
                        "odt",
                        "xls",
                        "xlsx",
                        "ppt",
                        "pptx",
                    ],
                },
            ),
            Preset(
                "developer",
                "Source and data files, dot-files included.",
                {
                    "filters.exclude_hidden": False,
                    "filters.include_extensions": [
                        "js",
                        "html",
                        "css",
                        "py",
                        "java",
                        "cpp",
                        "c",
                        "h",
                        "json",
                        "xml",
                        "md",
                    ],
                },
            ),
            Preset(
                "minimal",
                "Trust file extensions and leave archives packed.",
                {"organization.detect_types": False, "archives.extract": False},
            ),
            Preset(
                "design",
                "The fixed design-asset allow-list, one folder per extension.",
                {"organization.mode": "allow_list"},
            ),
        )
    }
)


__all__ = ["BUILTIN_PRESETS", "Preset"]
