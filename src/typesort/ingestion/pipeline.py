"""High-level orchestration of an organization run."""

from __future__ import annotations

import logging
import tempfile
from contextlib import ExitStack
from pathlib import Path
from typing import Iterable, Optional

from typesort.classification.engine import Classifier
from typesort.classification.tables import build_allow_list
from typesort.config.models import TypesortConfig
from typesort.errors import DestinationError
from typesort.organization.executor import PlacementExecutor
from typesort.organization.planner import PlacementResolver

from .archives import ArchiveCapabilities, ArchiveExpander
from .detectors import TypeSniffer
from .discovery import DirectoryScanner
from .models import RunResult, RunStats
from .walker import TreeWalker

LOGGER = logging.getLogger(__name__)


class OrganizationPipeline:
    """Wire the sniffer, classifier, walker, and executor together for one run.

    Args:
        config: Resolved configuration.
        capabilities: Archive tool availability; probed once per run when omitted.
    """

    def __init__(
        self,
        config: TypesortConfig,
        *,
        capabilities: Optional[ArchiveCapabilities] = None,
    ) -> None:
        self.config = config
        self.capabilities = capabilities

    def run(
        self,
        sources: Iterable[Path | str],
        destination: Path | str,
        *,
        dry_run: Optional[bool] = None,
    ) -> RunResult:
        """Organize every source directory into ``destination``.

        Args:
            sources: Source directories, walked in order.
            destination: Destination root; created unless this is a dry run.
            dry_run: Override for ``organization.dry_run``.

        Returns:
            RunResult: Counters and placement records for the run.

        Raises:
            DestinationError: If the destination cannot be used.
        """
        preview = self.config.organization.dry_run if dry_run is None else dry_run
        destination_root = self._prepare_destination(Path(destination), preview)

        stats = RunStats()
        executor = PlacementExecutor(
            PlacementResolver(),
            stats,
            dry_run=preview,
            max_concurrent_files=self.config.performance.max_concurrent_files,
        )
        archives = self.config.archives
        capabilities = self.capabilities or ArchiveCapabilities.detect()

        with ExitStack() as stack:
            if preview:
                scratch_root = Path(
                    stack.enter_context(tempfile.TemporaryDirectory(prefix="typesort-"))
                )
            else:
                scratch_root = destination_root / archives.scratch_dirname

            walker = TreeWalker(
                self._build_scanner(),
                self._build_classifier(),
                ArchiveExpander(
                    capabilities,
                    max_entries=archives.max_entries,
                    max_uncompressed_bytes=archives.max_uncompressed_mb * 1024 * 1024,
                ),
                executor,
                stats,
                extract_archives=archives.extract,
                keep_scratch=archives.keep_scratch,
                max_archive_depth=archives.max_depth,
                scratch_root=scratch_root,
            )

            for source in sources:
                source_root = Path(source).expanduser().resolve()
                if not source_root.is_dir():
                    LOGGER.error("Source directory not found: %s", source_root)
                    stats.record_error(f"{source_root}: source directory not found")
                    continue
                LOGGER.info("Processing directory: %s", source_root)
                walker.walk(source_root, destination_root)

            if not preview and not archives.keep_scratch:
                self._remove_empty(scratch_root)

        stats.finish()
        counts = stats.snapshot()
        LOGGER.info(
            "Run finished: %d processed, %d skipped, %d filtered, %d archive(s), %d error(s)",
            counts["files_processed"],
            counts["skipped_files"],
            counts["filtered_files"],
            counts["archives_expanded"],
            counts["errors"],
        )
        return RunResult(
            destination_root=destination_root,
            dry_run=preview,
            stats=stats,
            placements=executor.records,
        )

    def _prepare_destination(self, destination: Path, preview: bool) -> Path:
        root = destination.expanduser().resolve()
        if root.exists() and not root.is_dir():
            raise DestinationError(f"Destination {root} exists and is not a directory.")
        if preview:
            return root
        try:
            root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise DestinationError(f"Unable to create destination {root}: {exc}") from exc
        return root

    def _build_scanner(self) -> DirectoryScanner:
        filters = self.config.filters
        return DirectoryScanner(
            exclude_hidden=filters.exclude_hidden,
            exclude_system=filters.exclude_system,
            min_size_bytes=filters.min_file_size,
            max_size_bytes=filters.max_file_size or None,
            include_extensions=frozenset(filters.include_extensions),
            exclude_extensions=frozenset(filters.exclude_extensions),
        )

    def _build_classifier(self) -> Classifier:
        options = self.config.organization
        sniffer = TypeSniffer(
            enabled=options.detect_types,
            correct_extensions=options.correct_extensions,
        )
        if options.mode == "allow_list":
            policy = build_allow_list(options.allowed_extensions, options.folder_names)
            return Classifier(sniffer, allow_list=policy)
        return Classifier(sniffer)

    @staticmethod
    def _remove_empty(directory: Path) -> None:
        try:
            directory.rmdir()
        except FileNotFoundError:
            return
        except OSError as exc:
            LOGGER.debug("Leaving scratch directory %s in place: %s", directory, exc)


__all__ = ["OrganizationPipeline"]
