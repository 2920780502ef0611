"""Classification data models and policy tables."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import PurePath
from typing import Mapping, Optional, Pattern, Tuple

from pydantic import BaseModel


class Classification(BaseModel):
    """Where a single file belongs.

    Attributes:
        category: Top-level destination folder.
        subcategory: Optional folder nested below ``category``.
        is_archive: Whether the resolved extension denotes an expandable archive.
        is_special: Whether a filename pattern, not the extension, decided the category.
        skip: Whether the file is left out of the destination tree.
        extension: Resolved extension (after signature sniffing).
        file_name: Destination file name, with a corrected extension if applicable.
        corrected_from: Nominal extension replaced by the sniffed one.
    """

    category: str
    subcategory: Optional[str] = None
    is_archive: bool = False
    is_special: bool = False
    skip: bool = False
    extension: str = ""
    file_name: str = ""
    corrected_from: Optional[str] = None

    @property
    def relative_dir(self) -> PurePath:
        """Return ``category[/subcategory]`` relative to the destination root."""
        if self.subcategory:
            return PurePath(self.category, self.subcategory)
        return PurePath(self.category)


@dataclass(frozen=True)
class CategorySpec:
    """A named group of extensions in the category table."""

    name: str
    extensions: frozenset[str]
    icon: str = ""
    description: str = ""


@dataclass(frozen=True)
class SpecialPattern:
    """Filename rule that overrides extension-based classification.

    When ``parent`` is set, matching files land in ``parent/name``.
    """

    name: str
    patterns: Tuple[Pattern[str], ...]
    parent: Optional[str] = None
    icon: str = ""
    description: str = ""

    def matches(self, file_name: str) -> bool:
        return any(pattern.search(file_name) for pattern in self.patterns)


@dataclass(frozen=True)
class CategoryTable:
    """Ordered category specs plus the special patterns that take priority over them."""

    categories: Tuple[CategorySpec, ...]
    special_patterns: Tuple[SpecialPattern, ...] = ()
    other_category: str = "Other"

    @property
    def extensions(self) -> frozenset[str]:
        known: set[str] = set()
        for spec in self.categories:
            known.update(spec.extensions)
        return frozenset(known)


@dataclass(frozen=True)
class AllowListPolicy:
    """Fixed extension set organized one folder per extension."""

    extensions: frozenset[str]
    folder_names: Mapping[str, str] = field(default_factory=dict)

    def folder_for(self, extension: str) -> str:
        return self.folder_names.get(extension, extension)


def compile_patterns(*expressions: str) -> Tuple[Pattern[str], ...]:
    """Compile case-insensitive filename expressions."""
    return tuple(re.compile(expression, re.IGNORECASE) for expression in expressions)


__all__ = [
    "Classification",
    "CategorySpec",
    "SpecialPattern",
    "CategoryTable",
    "AllowListPolicy",
    "compile_patterns",
]
