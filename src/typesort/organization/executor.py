"""Executor that copies classified files into the destination tree."""

from __future__ import annotations

import logging
import shutil
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence, TypeVar

from typesort.classification.models import Classification
from typesort.errors import PlacementError
from typesort.ingestion.models import RunStats, SourceEntry

from .models import PlacementRecord
from .planner import PlacementResolver

LOGGER = logging.getLogger(__name__)

_COPY_CHUNK = 1024 * 1024
T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class PlannedFile:
    """A classified file waiting for placement."""

    entry: SourceEntry
    classification: Classification
    from_archive: Optional[Path] = None


def chunked(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    """Yield consecutive slices of ``items`` holding at most ``size`` elements."""
    for start in range(0, len(items), size):
        yield items[start : start + size]


class PlacementExecutor:
    """Resolve and copy planned files in bounded parallel batches.

    Args:
        resolver: Resolver shared by every placement of the run.
        stats: Run statistics updated for every file.
        dry_run: When true, paths are resolved and counted but nothing is written.
        max_concurrent_files: Batch size; one batch finishes before the next starts.
    """

    def __init__(
        self,
        resolver: PlacementResolver,
        stats: RunStats,
        *,
        dry_run: bool = False,
        max_concurrent_files: int = 10,
    ) -> None:
        self.resolver = resolver
        self.stats = stats
        self.dry_run = dry_run
        self.max_concurrent_files = max(1, max_concurrent_files)
        self._records: List[PlacementRecord] = []
        self._records_lock = threading.Lock()

    @property
    def records(self) -> List[PlacementRecord]:
        with self._records_lock:
            return list(self._records)

    def place_all(
        self, planned: Iterable[PlannedFile], destination_root: Path
    ) -> List[Optional[PlacementRecord]]:
        """Place every planned file under ``destination_root``, one batch at a time.

        Returns:
            list: Placement records aligned with ``planned``; ``None`` marks failures.
        """
        items = list(planned)
        if not items:
            return []
        results: List[Optional[PlacementRecord]] = []
        workers = min(self.max_concurrent_files, len(items))
        place = partial(self.place, destination_root=destination_root)
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="typesort-place") as pool:
            for batch in chunked(items, self.max_concurrent_files):
                results.extend(pool.map(place, batch))
        return results

    def place(self, planned: PlannedFile, destination_root: Path) -> Optional[PlacementRecord]:
        """Resolve a destination for ``planned`` below ``destination_root`` and copy it there.

        Failures are logged and counted; they never propagate.
        """
        source = planned.entry.path
        classification = planned.classification
        try:
            destination = self.resolver.resolve(
                destination_root, classification, classification.file_name or source.name
            )
            if not self.dry_run:
                destination.parent.mkdir(parents=True, exist_ok=True)
                self._copy(source, destination)
        except (OSError, PlacementError) as exc:
            LOGGER.error("Failed to place %s: %s", source, exc)
            self.stats.record_error(f"{source}: placement failed ({exc})")
            return None

        self.stats.record_processed(classification.category, planned.entry.size_bytes)
        prefix = "[DRY RUN] " if self.dry_run else ""
        LOGGER.info("%sOrganized: %s -> %s", prefix, source, destination)

        record = PlacementRecord(
            source=source,
            destination=destination,
            category=classification.category,
            subcategory=classification.subcategory,
            corrected_from=classification.corrected_from,
            from_archive=planned.from_archive,
            dry_run=self.dry_run,
        )
        with self._records_lock:
            self._records.append(record)
        return record

    def _copy(self, source: Path, destination: Path) -> None:
        with source.open("rb") as reader:
            try:
                writer = destination.open("xb")
            except FileExistsError as exc:
                raise PlacementError(f"refusing to overwrite {destination}") from exc
            try:
                with writer:
                    shutil.copyfileobj(reader, writer, _COPY_CHUNK)
            except OSError:
                destination.unlink(missing_ok=True)
                raise
        try:
            shutil.copystat(source, destination)
        except OSError as exc:  # pragma: no cover - filesystem specific
            LOGGER.debug("Could not preserve timestamps for %s: %s", destination, exc)


__all__ = ["PlannedFile", "PlacementExecutor", "chunked"]
