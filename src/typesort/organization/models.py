"""Placement data models."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import BaseModel


class PlacementRecord(BaseModel):
    """Describes one file copied (or previewed) into the destination tree.

    Attributes:
        source: Path the bytes were read from.
        destination: Collision-free path the file was assigned.
        category: Top-level destination folder.
        subcategory: Optional nested folder below the category.
        corrected_from: Nominal extension replaced by a sniffed type, if any.
        from_archive: Archive the file was extracted from, if any.
        dry_run: Whether the copy was only simulated.
    """

    source: Path
    destination: Path
    category: str
    subcategory: Optional[str] = None
    corrected_from: Optional[str] = None
    from_archive: Optional[Path] = None
    dry_run: bool = False


__all__ = ["PlacementRecord"]
