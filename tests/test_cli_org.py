"""CLI integration tests for `typesort org`."""

from __future__ import annotations

import json
import os
from pathlib import Path

from click.testing import CliRunner
from PIL import Image

from typesort.cli import cli


def _env_with_home(tmp_path: Path) -> dict[str, str]:
    """Return environment variables pointing HOME to a temp directory.

    Args:
        tmp_path: Temporary directory provided by pytest.

    Returns:
        dict[str, str]: Environment mapping with HOME set.
    """
    env = dict(os.environ)
    env["HOME"] = str(tmp_path / "home")
    return env


def _source_tree(tmp_path: Path) -> Path:
    source = tmp_path / "source"
    source.mkdir()
    Image.new("RGB", (10, 10), color="purple").save(source / "cover.png")
    (source / "manual.pdf").write_bytes(b"%PDF-1.4\n")
    (source / "clip.mp4").write_bytes(b"\x00\x00\x00\x18ftyp")
    return source


def test_cli_org_copies_files_and_prints_summary(tmp_path: Path) -> None:
    source = _source_tree(tmp_path)
    destination = tmp_path / "sorted"

    runner = CliRunner()
    result = runner.invoke(
        cli,
        ["org", str(destination), str(source), "--mode", "allow_list"],
        env=_env_with_home(tmp_path),
    )

    assert result.exit_code == 0, result.output
    assert (destination / "png" / "cover.png").exists()
    assert (destination / "pdf" / "manual.pdf").exists()
    assert (source / "cover.png").exists()
    assert "Organization summary for" in result.output
    assert "processed=2" in result.output
    assert "skipped=1" in result.output


def test_cli_org_json_output(tmp_path: Path) -> None:
    source = _source_tree(tmp_path)
    destination = tmp_path / "sorted"

    runner = CliRunner()
    result = runner.invoke(
        cli,
        ["org", str(destination), str(source), "--json"],
        env=_env_with_home(tmp_path),
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["dry_run"] is False
    assert payload["counts"]["files_processed"] == 3
    assert set(payload["categories"]) == {"Images", "Documents", "Videos"}
    assert len(payload["placements"]) == 3


def test_cli_org_dry_run_writes_nothing(tmp_path: Path) -> None:
    source = _source_tree(tmp_path)
    destination = tmp_path / "sorted"

    runner = CliRunner()
    result = runner.invoke(
        cli,
        ["org", str(destination), str(source), "--dry-run", "--summary"],
        env=_env_with_home(tmp_path),
    )

    assert result.exit_code == 0, result.output
    assert not destination.exists()
    assert "Dry run selected" in result.output
    assert "processed=3" in result.output


def test_cli_org_quiet_suppresses_output(tmp_path: Path) -> None:
    source = _source_tree(tmp_path)

    runner = CliRunner()
    result = runner.invoke(
        cli,
        ["org", str(tmp_path / "sorted"), str(source), "--quiet"],
        env=_env_with_home(tmp_path),
    )

    assert result.exit_code == 0
    assert result.output.strip() == ""


def test_cli_org_rejects_json_with_quiet(tmp_path: Path) -> None:
    source = _source_tree(tmp_path)

    runner = CliRunner()
    result = runner.invoke(
        cli,
        ["org", str(tmp_path / "sorted"), str(source), "--json", "--quiet"],
        env=_env_with_home(tmp_path),
    )

    assert result.exit_code == 1
    payload = json.loads(result.output)
    assert payload["error"]["code"] == "cli_error"


def test_cli_org_destination_file_fails(tmp_path: Path) -> None:
    source = _source_tree(tmp_path)
    occupied = tmp_path / "occupied"
    occupied.write_text("file", encoding="utf-8")

    runner = CliRunner()
    result = runner.invoke(
        cli,
        ["org", str(occupied), str(source)],
        env=_env_with_home(tmp_path),
    )

    assert result.exit_code != 0
    assert "not a directory" in result.output


def test_cli_org_reports_errors_but_succeeds(tmp_path: Path) -> None:
    source = _source_tree(tmp_path)
    missing = tmp_path / "missing"

    runner = CliRunner()
    result = runner.invoke(
        cli,
        ["org", str(tmp_path / "sorted"), str(source), str(missing)],
        env=_env_with_home(tmp_path),
    )

    assert result.exit_code == 0
    assert "Errors encountered" in result.output
    assert "errors=1" in result.output


def test_cli_org_applies_presets(tmp_path: Path) -> None:
    source = _source_tree(tmp_path)
    destination = tmp_path / "sorted"

    runner = CliRunner()
    result = runner.invoke(
        cli,
        ["org", str(destination), str(source), "--preset", "documents", "--json"],
        env=_env_with_home(tmp_path),
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["counts"]["files_processed"] == 1
    assert payload["counts"]["filtered_files"] == 2
    assert set(payload["categories"]) == {"Documents"}


def test_cli_org_unknown_preset_fails(tmp_path: Path) -> None:
    source = _source_tree(tmp_path)

    runner = CliRunner()
    result = runner.invoke(
        cli,
        ["org", str(tmp_path / "sorted"), str(source), "--preset", "nope"],
        env=_env_with_home(tmp_path),
    )

    assert result.exit_code != 0
    assert "Unknown preset" in result.output
