"""Tests for archive expansion into scratch directories."""

import os
import zipfile
from pathlib import Path

import pytest

from typesort.ingestion.archives import ArchiveCapabilities, ArchiveExpander


def _zip(path: Path, entries: dict[str, bytes]) -> Path:
    with zipfile.ZipFile(path, "w") as bundle:
        for name, payload in entries.items():
            bundle.writestr(name, payload)
    return path


def test_capabilities_probe_external_tools(monkeypatch: pytest.MonkeyPatch) -> None:
    available = {"7za": "/usr/bin/7za"}
    monkeypatch.setattr(
        "typesort.ingestion.archives.shutil.which", lambda name: available.get(name)
    )

    capabilities = ArchiveCapabilities.detect()

    assert capabilities.seven_zip == "/usr/bin/7za"
    assert capabilities.unrar is None
    assert capabilities.supports("zip")
    assert capabilities.supports("rar")
    assert capabilities.supports("7z")
    assert not capabilities.supports("tar")


def test_zip_only_capabilities() -> None:
    capabilities = ArchiveCapabilities()

    assert capabilities.supports("zip")
    assert not capabilities.supports("rar")
    assert not capabilities.supports("7z")


def test_expand_zip_into_unique_scratch(tmp_path: Path) -> None:
    archive = _zip(
        tmp_path / "photos.zip",
        {"a.pdf": b"%PDF-1.4", "nested/b.png": b"\x89PNG\r\n", "nested/": b""},
    )
    scratch_parent = tmp_path / "scratch"
    (scratch_parent / "photos").mkdir(parents=True)

    outcome = ArchiveExpander().expand(archive, scratch_parent)

    assert outcome.ok
    assert outcome.scratch_dir == scratch_parent / "photos-1"
    assert outcome.entries == 2
    assert (outcome.scratch_dir / "a.pdf").read_bytes() == b"%PDF-1.4"
    assert (outcome.scratch_dir / "nested" / "b.png").exists()


def test_expand_rejects_traversal_entries(tmp_path: Path) -> None:
    archive = _zip(
        tmp_path / "evil.zip",
        {"../escape.pdf": b"x", "/abs.pdf": b"x", "inside.pdf": b"%PDF"},
    )
    scratch_parent = tmp_path / "work" / "scratch"

    outcome = ArchiveExpander().expand(archive, scratch_parent)

    assert outcome.ok
    assert outcome.entries == 1
    assert sorted(outcome.rejected) == ["../escape.pdf", "/abs.pdf"]
    assert not (tmp_path / "work" / "escape.pdf").exists()
    assert not (tmp_path / "escape.pdf").exists()
    assert [path.name for path in outcome.scratch_dir.iterdir()] == ["inside.pdf"]


def test_expand_enforces_entry_limit(tmp_path: Path) -> None:
    archive = _zip(tmp_path / "many.zip", {f"f{index}.pdf": b"x" for index in range(5)})
    scratch_parent = tmp_path / "scratch"

    outcome = ArchiveExpander(max_entries=3).expand(archive, scratch_parent)

    assert not outcome.ok
    assert "exceed the limit" in (outcome.error or "")
    assert list(scratch_parent.iterdir()) == []


def test_expand_enforces_size_limit(tmp_path: Path) -> None:
    archive = _zip(tmp_path / "big.zip", {"blob.bin": b"\x00" * 4096})

    outcome = ArchiveExpander(max_uncompressed_bytes=1024).expand(archive, tmp_path / "scratch")

    assert not outcome.ok
    assert "exceeds" in (outcome.error or "")


def test_expand_reports_corrupt_zip(tmp_path: Path) -> None:
    archive = tmp_path / "broken.zip"
    archive.write_bytes(b"PK\x03\x04 definitely not a zip")

    outcome = ArchiveExpander().expand(archive, tmp_path / "scratch")

    assert not outcome.ok
    assert outcome.error
    assert list((tmp_path / "scratch").iterdir()) == []


def test_expand_rar_without_tool_is_unsupported(tmp_path: Path) -> None:
    archive = tmp_path / "bundle.rar"
    archive.write_bytes(b"Rar!\x1a\x07\x00")

    outcome = ArchiveExpander(ArchiveCapabilities()).expand(archive, tmp_path / "scratch")

    assert not outcome.ok
    assert "no extraction tool" in (outcome.error or "")
    assert not (tmp_path / "scratch").exists()


def _fake_seven_zip(tmp_path: Path, body: str) -> ArchiveCapabilities:
    """Return capabilities pointing at a shell script that mimics ``7z x -o<dir>``."""
    script = tmp_path / "tools" / "7z"
    script.parent.mkdir()
    script.write_text(
        "#!/bin/sh\n"
        'for arg in "$@"; do case "$arg" in -o*) out="${arg#-o}";; esac; done\n' + body,
        encoding="utf-8",
    )
    script.chmod(0o755)
    return ArchiveCapabilities(seven_zip=str(script))


_WRITES_TWO_FILES_AND_LINKS = (
    'mkdir -p "$out/sub"\n'
    "printf 'one' > \"$out/a.txt\"\n"
    "printf 'two' > \"$out/sub/b.txt\"\n"
    'ln -s /etc "$out/etc-link"\n'
    'ln -s /etc/passwd "$out/sub/passwd-link"\n'
)

posix_only = pytest.mark.skipif(os.name == "nt", reason="needs a POSIX shell")


@posix_only
def test_expand_with_tool_counts_files_and_removes_symlinks(tmp_path: Path) -> None:
    archive = tmp_path / "bundle.7z"
    archive.write_bytes(b"7z\xbc\xaf\x27\x1c")
    capabilities = _fake_seven_zip(tmp_path, _WRITES_TWO_FILES_AND_LINKS)

    outcome = ArchiveExpander(capabilities).expand(archive, tmp_path / "scratch")

    assert outcome.ok
    assert outcome.scratch_dir is not None
    assert outcome.entries == 2
    assert sorted(outcome.rejected) == ["etc-link", "sub/passwd-link"]
    assert not any(path.is_symlink() for path in outcome.scratch_dir.rglob("*"))
    assert (outcome.scratch_dir / "sub" / "b.txt").read_text() == "two"


@posix_only
def test_expand_with_tool_enforces_limits_after_extraction(tmp_path: Path) -> None:
    archive = tmp_path / "bundle.7z"
    archive.write_bytes(b"7z\xbc\xaf\x27\x1c")
    capabilities = _fake_seven_zip(tmp_path, _WRITES_TWO_FILES_AND_LINKS)

    outcome = ArchiveExpander(capabilities, max_entries=1).expand(archive, tmp_path / "scratch")

    assert not outcome.ok
    assert "exceed the limit of 1" in (outcome.error or "")
    assert list((tmp_path / "scratch").iterdir()) == []


@posix_only
def test_expand_with_tool_reports_exit_status(tmp_path: Path) -> None:
    archive = tmp_path / "bundle.rar"
    archive.write_bytes(b"Rar!\x1a\x07\x00")
    capabilities = _fake_seven_zip(tmp_path, "echo 'Unexpected end of archive' >&2\nexit 2\n")

    outcome = ArchiveExpander(capabilities).expand(archive, tmp_path / "scratch")

    assert not outcome.ok
    assert outcome.error == "7z exited with status 2: Unexpected end of archive"
    assert list((tmp_path / "scratch").iterdir()) == []
