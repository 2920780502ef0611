"""Collision-free destination path resolution."""

from __future__ import annotations

import re
import threading
from pathlib import Path

from typesort.classification.models import Classification

_ILLEGAL_CHARACTERS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


def sanitize_filename(name: str) -> str:
    """Replace characters that are illegal in file names with underscores."""
    sanitized = _ILLEGAL_CHARACTERS.sub("_", name).strip()
    if sanitized in {"", ".", ".."}:
        return "unnamed"
    return sanitized


class PlacementResolver:
    """Assign each classified file a destination path nobody else holds.

    A path is free when it neither exists on disk nor was handed out earlier in
    the same run. The second condition keeps dry runs and concurrent batches
    unique even though nothing is written while resolving.
    """

    def __init__(self) -> None:
        self._claimed: set[Path] = set()
        self._lock = threading.Lock()

    def resolve(
        self, destination_root: Path, classification: Classification, file_name: str
    ) -> Path:
        """Return a free path under ``destination_root/category[/subcategory]``.

        Args:
            destination_root: Root of the organized tree.
            classification: Classification of the file being placed.
            file_name: Desired file name; sanitized before use.

        Returns:
            Path: Destination path, suffixed with ``_1``, ``_2`` … on collision.
        """
        target_dir = destination_root / classification.relative_dir
        candidate = target_dir / sanitize_filename(file_name)
        stem, suffix = candidate.stem, candidate.suffix

        with self._lock:
            counter = 1
            while candidate in self._claimed or candidate.exists():
                candidate = target_dir / f"{stem}_{counter}{suffix}"
                counter += 1
            self._claimed.add(candidate)
        return candidate

    @property
    def claimed(self) -> frozenset[Path]:
        with self._lock:
            return frozenset(self._claimed)


__all__ = ["PlacementResolver", "sanitize_filename"]
