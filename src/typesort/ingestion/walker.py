"""Recursive traversal of source trees, archives included."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import AbstractSet, List, Optional

from typesort.classification.engine import Classifier
from typesort.organization.executor import PlacementExecutor, PlannedFile

from .archives import ArchiveExpander
from .discovery import DirectoryScanner
from .models import RunStats, SourceEntry

LOGGER = logging.getLogger(__name__)

DEFAULT_SCRATCH_DIRNAME = ".typesort-extract"


class TreeWalker:
    """Walk a source tree depth-first and hand every file to the executor.

    Files found directly in a directory are classified before its subdirectories
    are visited. Archives are expanded into a scratch directory, their contents
    are walked and placed like any other subtree, and the scratch directory is
    discarded afterwards. The archive file itself is placed as well.

    Args:
        scanner: Lists directories and applies configured filters.
        classifier: Assigns categories to discovered files.
        expander: Extracts archives.
        executor: Copies planned files into the destination.
        stats: Counters shared with the executor.
        extract_archives: Whether archives are expanded at all.
        keep_scratch: Keep per-archive scratch directories after placement.
        max_archive_depth: Deepest archive nesting level that is still expanded.
        scratch_root: Directory receiving scratch folders; defaults to a hidden
            folder inside the destination root.
    """

    def __init__(
        self,
        scanner: DirectoryScanner,
        classifier: Classifier,
        expander: ArchiveExpander,
        executor: PlacementExecutor,
        stats: RunStats,
        *,
        extract_archives: bool = True,
        keep_scratch: bool = False,
        max_archive_depth: int = 5,
        scratch_root: Optional[Path] = None,
    ) -> None:
        self.scanner = scanner
        self.classifier = classifier
        self.expander = expander
        self.executor = executor
        self.stats = stats
        self.extract_archives = extract_archives
        self.keep_scratch = keep_scratch and not executor.dry_run
        self.max_archive_depth = max_archive_depth
        self.scratch_root = scratch_root

    def scratch_root_for(self, destination_root: Path) -> Path:
        """Return the scratch directory used for ``destination_root``."""
        if self.scratch_root is not None:
            return self.scratch_root
        return destination_root / DEFAULT_SCRATCH_DIRNAME

    def walk(self, source_root: Path, destination_root: Path) -> None:
        """Organize every file below ``source_root`` into ``destination_root``.

        Failures on individual directories, files, or archives are logged and
        counted in :attr:`stats`; they never abort the walk.
        """
        source = source_root.resolve()
        destination = destination_root.resolve()
        scratch = self.scratch_root_for(destination).resolve()
        if source == destination:
            LOGGER.error("Source %s is the destination root; skipping", source)
            self.stats.record_error(f"{source}: source is the destination root")
            return

        excluded = frozenset({destination, scratch})
        planned = self._collect(source, destination, scratch, excluded, None, 0)
        self.executor.place_all(planned, destination)

    def _collect(
        self,
        directory: Path,
        destination: Path,
        scratch: Path,
        excluded: AbstractSet[Path],
        from_archive: Optional[Path],
        depth: int,
    ) -> List[PlannedFile]:
        planned: List[PlannedFile] = []
        try:
            listing = self.scanner.list_directory(directory)
        except OSError as exc:
            LOGGER.error("Cannot read directory %s: %s", directory, exc)
            self.stats.record_error(f"{directory}: unreadable directory ({exc})")
            return planned

        for path, exc in listing.failures:
            LOGGER.error("Cannot inspect %s: %s", path, exc)
            self.stats.record_error(f"{path}: {exc}")
        if listing.filtered:
            self.stats.record_filtered(listing.filtered)

        for entry in listing.files:
            classification = self.classifier.classify(entry.path)
            # Contents of a disallowed archive may still be allowed.
            if classification.is_archive and self.extract_archives:
                self._expand(entry, classification.extension, destination, scratch, excluded, depth)
            if classification.skip:
                LOGGER.debug("Skipping file with unsupported type: %s", entry.path)
                self.stats.record_skipped()
                continue
            planned.append(PlannedFile(entry, classification, from_archive))

        for subdirectory in listing.directories:
            if subdirectory.resolve() in excluded:
                LOGGER.debug("Skipping output directory %s", subdirectory)
                continue
            planned.extend(
                self._collect(subdirectory, destination, scratch, excluded, from_archive, depth)
            )
        return planned

    def _expand(
        self,
        entry: SourceEntry,
        extension: str,
        destination: Path,
        scratch: Path,
        excluded: AbstractSet[Path],
        depth: int,
    ) -> None:
        if depth >= self.max_archive_depth:
            LOGGER.warning(
                "Archive nesting limit (%d) reached; %s is placed without extraction",
                self.max_archive_depth,
                entry.path,
            )
            return

        outcome = self.expander.expand(entry.path, scratch, extension)
        for name in outcome.rejected:
            self.stats.record_error(f"{entry.path}: rejected archive entry {name!r}")
        if not outcome.ok or outcome.scratch_dir is None:
            LOGGER.warning("Archive extraction failed for %s: %s", entry.path, outcome.error)
            self.stats.record_error(f"{entry.path}: archive extraction failed ({outcome.error})")
            return

        self.stats.record_archive()
        try:
            inner = self._collect(
                outcome.scratch_dir, destination, scratch, excluded, entry.path, depth + 1
            )
            self.executor.place_all(inner, destination)
        finally:
            if self.keep_scratch:
                LOGGER.info(
                    "Kept extracted contents of %s in %s", entry.path.name, outcome.scratch_dir
                )
            else:
                shutil.rmtree(outcome.scratch_dir, ignore_errors=True)
                LOGGER.debug("Removed scratch directory %s", outcome.scratch_dir)


__all__ = ["DEFAULT_SCRATCH_DIRNAME", "TreeWalker"]
