"""Archive expansion into isolated scratch directories."""

from __future__ import annotations

import logging
import os
import re
import shutil
import subprocess
import zipfile
import zlib
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from typesort.errors import (
    ArchiveError,
    ArchiveLimitError,
    UnsafeArchiveError,
    UnsupportedArchiveError,
)
from typesort.organization.planner import sanitize_filename

from .detectors import extension_of

LOGGER = logging.getLogger(__name__)

_CHUNK_SIZE = 1024 * 1024
_DRIVE_PREFIX = re.compile(r"^[A-Za-z]:")
_ZIP_FAILURES = (
    zipfile.BadZipFile,
    zlib.error,
    EOFError,
    RuntimeError,
    NotImplementedError,
    ValueError,
)


@dataclass(frozen=True, slots=True)
class ArchiveCapabilities:
    """Which archive formats can be expanded in this environment.

    Zip support is built in. Rar and 7z need an external tool; the probe runs once
    per run and the expander only consults the resulting booleans.
    """

    seven_zip: Optional[str] = None
    unrar: Optional[str] = None

    @classmethod
    def detect(cls) -> "ArchiveCapabilities":
        seven_zip = shutil.which("7z") or shutil.which("7zz") or shutil.which("7za")
        unrar = shutil.which("unrar")
        capabilities = cls(seven_zip=seven_zip, unrar=unrar)
        LOGGER.debug(
            "Archive capabilities: zip=True rar=%s 7z=%s",
            capabilities.rar,
            capabilities.sevenzip,
        )
        return capabilities

    @property
    def rar(self) -> bool:
        return bool(self.unrar or self.seven_zip)

    @property
    def sevenzip(self) -> bool:
        return self.seven_zip is not None

    def supports(self, extension: str) -> bool:
        if extension == "zip":
            return True
        if extension == "rar":
            return self.rar
        if extension == "7z":
            return self.sevenzip
        return False


@dataclass(slots=True)
class ExpansionOutcome:
    """Result of expanding one archive.

    Attributes:
        archive: Archive that was expanded.
        scratch_dir: Directory holding the extracted contents, or None on failure.
        error: Failure description when expansion did not succeed.
        entries: Number of files written into ``scratch_dir``.
        rejected: Entry names refused because they would escape ``scratch_dir``.
    """

    archive: Path
    scratch_dir: Optional[Path] = None
    error: Optional[str] = None
    entries: int = 0
    rejected: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.scratch_dir is not None


class ArchiveExpander:
    """Extract supported archives into per-archive scratch directories.

    Args:
        capabilities: Result of :meth:`ArchiveCapabilities.detect`.
        max_entries: Maximum number of entries accepted from one archive.
        max_uncompressed_bytes: Maximum number of bytes written for one archive.
    """

    def __init__(
        self,
        capabilities: ArchiveCapabilities | None = None,
        *,
        max_entries: int = 10_000,
        max_uncompressed_bytes: int = 2_048 * 1024 * 1024,
    ) -> None:
        self.capabilities = capabilities or ArchiveCapabilities()
        self.max_entries = max_entries
        self.max_uncompressed_bytes = max_uncompressed_bytes

    def expand(
        self, archive: Path, scratch_parent: Path, extension: str | None = None
    ) -> ExpansionOutcome:
        """Extract ``archive`` into a fresh directory under ``scratch_parent``.

        Args:
            archive: Archive file to expand.
            scratch_parent: Directory that receives the per-archive scratch folder.
            extension: Resolved archive extension; defaults to the file's own.

        Returns:
            ExpansionOutcome: Scratch directory on success, error description otherwise.
            Partially extracted scratch directories are removed before returning.
        """
        kind = extension or extension_of(archive)
        outcome = ExpansionOutcome(archive=archive)
        if not self.capabilities.supports(kind):
            outcome.error = str(
                UnsupportedArchiveError(f"no extraction tool available for .{kind} archives")
            )
            return outcome

        try:
            scratch = self._allocate_scratch(scratch_parent, archive)
        except OSError as exc:
            outcome.error = f"could not create scratch directory: {exc}"
            return outcome

        try:
            if kind == "zip":
                self._extract_zip(archive, scratch, outcome)
            else:
                self._extract_with_tool(archive, scratch, kind, outcome)
        except (ArchiveError, OSError, *_ZIP_FAILURES) as exc:
            shutil.rmtree(scratch, ignore_errors=True)
            outcome.error = str(exc) or type(exc).__name__
            outcome.entries = 0
            return outcome

        outcome.scratch_dir = scratch
        LOGGER.info("Extracted %d file(s) from %s", outcome.entries, archive.name)
        return outcome

    # ------------------------------------------------------------------ #
    # Backends                                                           #
    # ------------------------------------------------------------------ #

    def _extract_zip(self, archive: Path, scratch: Path, outcome: ExpansionOutcome) -> None:
        root = scratch.resolve()
        with zipfile.ZipFile(archive) as bundle:
            infos = bundle.infolist()
            if len(infos) > self.max_entries:
                raise ArchiveLimitError(
                    f"{len(infos)} entries exceed the limit of {self.max_entries}"
                )
            declared = sum(info.file_size for info in infos)
            if declared > self.max_uncompressed_bytes:
                raise ArchiveLimitError(
                    f"declared size {declared} bytes exceeds the limit of "
                    f"{self.max_uncompressed_bytes}"
                )

            written = 0
            for info in infos:
                try:
                    target = self._safe_target(root, info.filename, allow_root=info.is_dir())
                except UnsafeArchiveError as exc:
                    LOGGER.warning("Rejected entry in %s: %s", archive.name, exc)
                    outcome.rejected.append(info.filename)
                    continue

                if info.is_dir():
                    target.mkdir(parents=True, exist_ok=True)
                    continue

                target.parent.mkdir(parents=True, exist_ok=True)
                with bundle.open(info) as reader, target.open("wb") as writer:
                    while True:
                        chunk = reader.read(_CHUNK_SIZE)
                        if not chunk:
                            break
                        written += len(chunk)
                        if written > self.max_uncompressed_bytes:
                            raise ArchiveLimitError(
                                f"uncompressed data exceeds {self.max_uncompressed_bytes} bytes"
                            )
                        writer.write(chunk)
                outcome.entries += 1
                LOGGER.debug("Extracted: %s", info.filename)

    def _extract_with_tool(
        self, archive: Path, scratch: Path, kind: str, outcome: ExpansionOutcome
    ) -> None:
        if kind == "rar" and self.capabilities.unrar:
            command = [
                self.capabilities.unrar,
                "x",
                "-o+",
                "-y",
                "-idq",
                str(archive),
                f"{scratch}{os.sep}",
            ]
        elif self.capabilities.seven_zip:
            command = [self.capabilities.seven_zip, "x", "-y", "-bd", f"-o{scratch}", str(archive)]
        else:
            raise UnsupportedArchiveError(f"no extraction tool available for .{kind} archives")

        LOGGER.debug("Running %s", " ".join(command))
        completed = subprocess.run(command, capture_output=True, text=True, check=False)
        if completed.returncode != 0:
            detail = (completed.stderr or completed.stdout or "").strip().splitlines()
            message = detail[-1] if detail else "no output"
            raise ArchiveError(
                f"{Path(command[0]).name} exited with status {completed.returncode}: {message}"
            )

        root = scratch.resolve()
        written = 0
        for path in sorted(scratch.rglob("*"), reverse=True):
            if path.is_symlink():
                LOGGER.warning("Removed symlink extracted from %s: %s", archive.name, path)
                outcome.rejected.append(str(path.relative_to(scratch)))
                path.unlink()
                continue
            if not path.resolve().is_relative_to(root):
                raise UnsafeArchiveError(f"{path} resolves outside the scratch directory")
            if path.is_file():
                outcome.entries += 1
                written += path.stat().st_size

        if outcome.entries > self.max_entries:
            raise ArchiveLimitError(
                f"{outcome.entries} entries exceed the limit of {self.max_entries}"
            )
        if written > self.max_uncompressed_bytes:
            raise ArchiveLimitError(
                f"uncompressed data exceeds {self.max_uncompressed_bytes} bytes"
            )

    # ------------------------------------------------------------------ #
    # Helpers                                                            #
    # ------------------------------------------------------------------ #

    def _allocate_scratch(self, scratch_parent: Path, archive: Path) -> Path:
        scratch_parent.mkdir(parents=True, exist_ok=True)
        base = sanitize_filename(archive.stem)
        candidate = scratch_parent / base
        counter = 1
        while True:
            try:
                candidate.mkdir()
                return candidate
            except FileExistsError:
                candidate = scratch_parent / f"{base}-{counter}"
                counter += 1

    def _safe_target(self, root: Path, name: str, *, allow_root: bool = False) -> Path:
        normalized = name.replace("\\", "/")
        if normalized.startswith("/") or _DRIVE_PREFIX.match(normalized):
            raise UnsafeArchiveError(f"absolute entry path {name!r}")
        target = (root / normalized).resolve()
        if target == root and allow_root:
            return target
        if target == root or not target.is_relative_to(root):
            raise UnsafeArchiveError(f"entry {name!r} escapes the scratch directory")
        return target


__all__ = ["ArchiveCapabilities", "ArchiveExpander", "ExpansionOutcome"]
