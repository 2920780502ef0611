"""Directory enumeration with filtering."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import AbstractSet, List, Tuple

from .detectors import extension_of
from .models import SourceEntry

SYSTEM_DIRECTORIES: frozenset[str] = frozenset(
    {
        "System Volume Information",
        "$RECYCLE.BIN",
        "node_modules",
        ".git",
        "__MACOSX",
    }
)


@dataclass(slots=True)
class DirectoryListing:
    """Non-recursive view of one directory after filters were applied.

    Attributes:
        files: Files eligible for classification.
        directories: Subdirectories eligible for descent.
        filtered: Number of files dropped by size or extension filters.
        failures: Entries that could not be inspected, with the error raised.
    """

    files: List[SourceEntry] = field(default_factory=list)
    directories: List[Path] = field(default_factory=list)
    filtered: int = 0
    failures: List[Tuple[Path, OSError]] = field(default_factory=list)


class DirectoryScanner:
    """List directories one level at a time subject to configuration filters."""

    def __init__(
        self,
        *,
        exclude_hidden: bool = True,
        exclude_system: bool = True,
        min_size_bytes: int = 0,
        max_size_bytes: int | None = None,
        include_extensions: AbstractSet[str] = frozenset(),
        exclude_extensions: AbstractSet[str] = frozenset(),
    ) -> None:
        self.exclude_hidden = exclude_hidden
        self.exclude_system = exclude_system
        self.min_size_bytes = min_size_bytes
        self.max_size_bytes = max_size_bytes
        self.include_extensions = frozenset(include_extensions)
        self.exclude_extensions = frozenset(exclude_extensions)

    def list_directory(self, directory: Path) -> DirectoryListing:
        """Return the files and subdirectories directly inside ``directory``.

        Raises:
            OSError: If the directory itself cannot be listed.
        """
        listing = DirectoryListing()
        with os.scandir(directory) as iterator:
            entries = sorted(iterator, key=lambda item: item.name)

        for item in entries:
            path = Path(item.path)
            if self.exclude_hidden and item.name.startswith("."):
                continue
            try:
                if item.is_dir(follow_symlinks=False):
                    if self.exclude_system and item.name in SYSTEM_DIRECTORIES:
                        continue
                    listing.directories.append(path)
                    continue
                if not item.is_file(follow_symlinks=False):
                    continue
                stat = item.stat(follow_symlinks=False)
            except OSError as exc:
                listing.failures.append((path, exc))
                continue

            if not self._accepts(path, stat.st_size):
                listing.filtered += 1
                continue

            listing.files.append(
                SourceEntry(
                    path=path,
                    size_bytes=stat.st_size,
                    modified_at=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
                )
            )
        return listing

    def _accepts(self, path: Path, size: int) -> bool:
        if size < self.min_size_bytes:
            return False
        if self.max_size_bytes is not None and size > self.max_size_bytes:
            return False
        extension = extension_of(path)
        if extension in self.exclude_extensions:
            return False
        if self.include_extensions and extension not in self.include_extensions:
            return False
        return True


__all__ = ["DirectoryListing", "DirectoryScanner", "SYSTEM_DIRECTORIES"]
