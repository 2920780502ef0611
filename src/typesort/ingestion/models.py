"""Data models shared by the discovery, walking, and placement stages."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from typesort.organization.models import PlacementRecord


class SourceEntry(BaseModel):
    """A single item produced by directory enumeration.

    Attributes:
        path: Absolute path of the entry.
        is_directory: Whether the entry is a directory.
        size_bytes: Size reported by ``stat``.
        modified_at: Last modification time in UTC.
    """

    model_config = ConfigDict(frozen=True)

    path: Path
    is_directory: bool = False
    size_bytes: int = 0
    modified_at: Optional[datetime] = None


@dataclass(slots=True)
class CategoryCount:
    """Running totals for one destination category."""

    count: int = 0
    size_bytes: int = 0


@dataclass
class RunStats:
    """Thread-safe accumulator for a single organization run."""

    files_processed: int = 0
    skipped_files: int = 0
    filtered_files: int = 0
    archives_expanded: int = 0
    errors: int = 0
    total_bytes: int = 0
    error_messages: List[str] = field(default_factory=list)
    categories: Dict[str, CategoryCount] = field(default_factory=dict)
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: Optional[datetime] = None
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def record_processed(self, category: str, size_bytes: int) -> None:
        with self._lock:
            self.files_processed += 1
            self.total_bytes += size_bytes
            bucket = self.categories.setdefault(category, CategoryCount())
            bucket.count += 1
            bucket.size_bytes += size_bytes

    def record_skipped(self) -> None:
        with self._lock:
            self.skipped_files += 1

    def record_filtered(self, count: int = 1) -> None:
        with self._lock:
            self.filtered_files += count

    def record_archive(self) -> None:
        with self._lock:
            self.archives_expanded += 1

    def record_error(self, message: str) -> None:
        with self._lock:
            self.errors += 1
            self.error_messages.append(message)

    def finish(self) -> None:
        self.finished_at = datetime.now(timezone.utc)

    @property
    def duration_seconds(self) -> float:
        end = self.finished_at or datetime.now(timezone.utc)
        return (end - self.started_at).total_seconds()

    def snapshot(self) -> Dict[str, int]:
        """Return the counters only, omitting timings and messages."""
        with self._lock:
            return {
                "files_processed": self.files_processed,
                "skipped_files": self.skipped_files,
                "filtered_files": self.filtered_files,
                "archives_expanded": self.archives_expanded,
                "errors": self.errors,
                "total_bytes": self.total_bytes,
            }

    def category_snapshot(self) -> Dict[str, Dict[str, int]]:
        with self._lock:
            return {
                name: {"count": bucket.count, "size_bytes": bucket.size_bytes}
                for name, bucket in sorted(self.categories.items())
            }


@dataclass(slots=True)
class RunResult:
    """Outcome of an organization run.

    Attributes:
        destination_root: Resolved destination root.
        dry_run: Whether the run only previewed placements.
        stats: Counters accumulated during the run.
        placements: One record per placed (or previewed) file.
    """

    destination_root: Path
    dry_run: bool = False
    stats: RunStats = field(default_factory=RunStats)
    placements: List[PlacementRecord] = field(default_factory=list)

    def to_payload(self) -> Dict[str, Any]:
        """Return a JSON-ready representation of the run."""
        return {
            "destination_root": self.destination_root.as_posix(),
            "dry_run": self.dry_run,
            "counts": self.stats.snapshot(),
            "categories": self.stats.category_snapshot(),
            "duration_seconds": round(self.stats.duration_seconds, 3),
            "errors": list(self.stats.error_messages),
            "placements": [record.model_dump(mode="json") for record in self.placements],
        }


__all__ = ["SourceEntry", "CategoryCount", "RunStats", "RunResult"]
