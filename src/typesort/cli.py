"""Command line interface for typesort."""

from __future__ import annotations

import difflib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import click
import yaml
from click.core import ParameterSource
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from typesort.config import ConfigError, ConfigManager, TypesortConfig, resolve_with_precedence
from typesort.config.resolver import assign_dotted
from typesort.errors import DestinationError
from typesort.ingestion import RunResult
from typesort.ingestion.pipeline import OrganizationPipeline
from typesort.log import configure_logging

console = Console()

# Output kinds that survive --summary.
_SUMMARY_KINDS = frozenset({"summary", "warning", "error"})


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    details: Any | None = None,
    original: Exception | None = None,
) -> None:
    """Report a failed command and exit.

    In JSON mode the error is printed as ``{"error": {"code", "message"[, "details"]}}``
    and the process exits with status 1. Otherwise a ``click.ClickException``
    carries the message to click's own error printer.

    Args:
        message: Text shown to the user.
        code: Stable identifier such as ``config_error``.
        json_output: Whether the command was asked for JSON.
        details: Extra structured context for the JSON payload.
        original: Exception being reported, chained onto the click error.

    Raises:
        SystemExit: In JSON mode.
        click.ClickException: In every other mode.
    """
    if json_output:
        error: dict[str, Any] = {"code": code, "message": message}
        if details is not None:
            error["details"] = details
        console.print_json(data={"error": error})
        raise SystemExit(1)

    if isinstance(original, click.ClickException):
        raise original
    raise click.ClickException(message) from original


@dataclass(slots=True)
class _Output:
    """Console verbosity chosen for one command invocation."""

    quiet: bool = False
    summary_only: bool = False

    def emit(self, message: Any, *, kind: str = "detail") -> None:
        if self.quiet and kind != "error":
            return
        if self.summary_only and kind not in _SUMMARY_KINDS:
            return
        console.print(message)


def _resolve_output(
    ctx: click.Context,
    config: TypesortConfig,
    *,
    quiet: bool,
    summary_mode: bool,
    json_output: bool,
) -> _Output:
    """Combine flags with ``cli`` config defaults; flags typed by the user win.

    Raises:
        click.ClickException: If the combination is contradictory.
    """
    quiet_given = ctx.get_parameter_source("quiet") == ParameterSource.COMMANDLINE
    summary_given = ctx.get_parameter_source("summary_mode") == ParameterSource.COMMANDLINE

    if json_output:
        if quiet_given and quiet:
            raise click.ClickException("--json cannot be combined with --quiet.")
        if summary_given and summary_mode:
            raise click.ClickException("--json cannot be combined with --summary.")
        return _Output()

    output = _Output(
        quiet=quiet if quiet_given else config.cli.quiet_default,
        summary_only=summary_mode if summary_given else config.cli.summary_default,
    )
    if output.quiet and output.summary_only:
        raise click.ClickException(
            "Quiet and summary modes cannot both be enabled; check the cli section "
            "of the configuration and the flags passed."
        )
    return output


def _summary_line(root: Path, counts: dict[str, int]) -> str:
    metrics = {
        "processed": counts["files_processed"],
        "skipped": counts["skipped_files"],
        "filtered": counts["filtered_files"],
        "archives": counts["archives_expanded"],
        "errors": counts["errors"],
        "bytes": counts["total_bytes"],
    }
    rendered = ", ".join(f"{name}={value}" for name, value in metrics.items())
    return f"[green]Organization summary for {root}: {rendered}.[/green]"


def _format_size(size_bytes: int) -> str:
    value = float(size_bytes)
    for unit in ("B", "KB", "MB"):
        if value < 1024:
            return f"{value:.0f} {unit}" if unit == "B" else f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} GB"


def _category_table(result: RunResult) -> Table:
    table = Table(title="Planned placements" if result.dry_run else "Organized files")
    table.add_column("Category", style="cyan")
    table.add_column("Files", justify="right")
    table.add_column("Size", justify="right")
    for name, bucket in result.stats.category_snapshot().items():
        table.add_row(name, str(bucket["count"]), _format_size(bucket["size_bytes"]))
    return table


def _report(result: RunResult, output: _Output) -> None:
    """Print the category table, collected errors, and the closing summary."""
    if result.stats.categories:
        output.emit(_category_table(result))
    else:
        output.emit("[yellow]No files were organized.[/yellow]", kind="warning")

    errors = list(result.stats.error_messages)
    if errors:
        output.emit("[red]Errors encountered:[/red]", kind="error")
        for message in errors:
            output.emit(f"  - {message}", kind="error")

    output.emit(_summary_line(result.destination_root, result.stats.snapshot()), kind="summary")
    if result.dry_run:
        output.emit("[yellow]Dry run selected; no files were written.[/yellow]", kind="warning")


def _org_overrides(
    *,
    mode: str | None,
    no_extract: bool,
    keep_scratch: bool,
    workers: int | None,
) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    if mode is not None:
        overrides["organization.mode"] = mode
    if no_extract:
        overrides["archives.extract"] = False
    if keep_scratch:
        overrides["archives.keep_scratch"] = True
    if workers is not None:
        overrides["performance.max_concurrent_files"] = workers
    return overrides


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="typesort")
def cli() -> None:
    """Typesort copies files into folders named after their real type."""


@cli.command()
@click.argument("destination", type=click.Path(path_type=Path))
@click.argument("sources", nargs=-1, required=True, type=click.Path(path_type=Path))
@click.option("--dry-run", is_flag=True, help="Preview placements without writing anything.")
@click.option(
    "--mode",
    type=click.Choice(["allow_list", "category_table"]),
    help="Classification policy for this run.",
)
@click.option("--preset", help="Apply a named configuration preset.")
@click.option("--no-extract", is_flag=True, help="Place archives without expanding them.")
@click.option("--keep-scratch", is_flag=True, help="Keep extracted archive contents.")
@click.option("--workers", type=click.IntRange(min=1), help="Files copied per parallel batch.")
@click.option("--json", "json_output", is_flag=True, help="Print the run result as JSON.")
@click.option("--summary", "summary_mode", is_flag=True, help="Print summary lines only.")
@click.option("--quiet", is_flag=True, help="Print errors only.")
@click.option("-v", "--verbose", is_flag=True, help="Log every decision at debug level.")
@click.pass_context
def org(
    ctx: click.Context,
    destination: Path,
    sources: tuple[Path, ...],
    dry_run: bool,
    mode: str | None,
    preset: str | None,
    no_extract: bool,
    keep_scratch: bool,
    workers: int | None,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
    verbose: bool,
) -> None:
    """Copy the files under each SOURCE into DESTINATION, grouped by type.

    Sources are never modified. Archives found along the way are expanded and
    their contents sorted alongside everything else; the archive itself is
    copied too. Per-file failures are reported but do not change the exit
    status.
    """
    try:
        config = ConfigManager().load(
            preset=preset,
            cli_overrides=_org_overrides(
                mode=mode,
                no_extract=no_extract,
                keep_scratch=keep_scratch,
                workers=workers,
            ),
        )
        output = _resolve_output(
            ctx, config, quiet=quiet, summary_mode=summary_mode, json_output=json_output
        )
        configure_logging(config.logging, verbose=verbose, quiet=output.quiet or json_output)

        result = OrganizationPipeline(config).run(
            list(sources), destination, dry_run=True if dry_run else None
        )
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
        return
    except DestinationError as exc:
        _handle_cli_error(
            str(exc),
            code="destination_error",
            json_output=json_output,
            details={"destination": str(destination)},
            original=exc,
        )
        return
    except click.ClickException as exc:
        _handle_cli_error(exc.message, code="cli_error", json_output=json_output, original=exc)
        return

    if json_output:
        console.print_json(data=result.to_payload())
    else:
        _report(result, output)


@cli.group()
def config() -> None:
    """Inspect and edit ~/.typesort/config.yaml."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Show the file and defaults only.")
def config_view(no_env: bool) -> None:
    """Print the configuration typesort would run with."""
    try:
        effective = ConfigManager().load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    rendered = yaml.safe_dump(effective.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(rendered, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="YAML literal stored at KEY.")
def config_set(key: str, value: str) -> None:
    """Store VALUE at the dotted KEY, e.g. ``archives.max_depth``.

    The new file is validated before it is written, and the change is shown as
    a unified diff.
    """
    path = [part.strip() for part in key.split(".") if part.strip()]
    if not path:
        raise click.ClickException("KEY must be a dotted path such as 'archives.max_depth'.")
    try:
        parsed = yaml.safe_load(value)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"VALUE is not valid YAML: {exc}") from exc

    manager = ConfigManager()
    try:
        manager.ensure_exists()
        stored = manager.load_file_overrides()
        assign_dotted(stored, path, parsed)
        resolve_with_precedence(defaults=TypesortConfig(), file_overrides=stored)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    previous = manager.read_text().splitlines()
    manager.save(stored)
    changes = difflib.unified_diff(
        previous,
        manager.read_text().splitlines(),
        fromfile=f"{manager.config_path.name} (old)",
        tofile=f"{manager.config_path.name} (new)",
        lineterm="",
    )
    console.print(Syntax("\n".join(changes), "diff", word_wrap=False))
    console.print(f"[green]Updated {'.'.join(path)}.[/green]")


@config.command("presets")
def config_presets() -> None:
    """List built-in and custom presets usable with `typesort org --preset`."""
    table = Table(title="Presets")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Source")
    table.add_column("Overrides")
    table.add_column("Description")
    for preset in ConfigManager().list_presets():
        table.add_row(
            preset.name,
            "built-in" if preset.builtin else "custom",
            ", ".join(sorted(preset.overrides)) or "-",
            preset.description,
        )
    console.print(table)


@config.command("reset")
@click.option("--yes", is_flag=True, help="Skip the confirmation prompt.")
def config_reset(yes: bool) -> None:
    """Overwrite the configuration file with default values."""
    manager = ConfigManager()
    if not yes:
        click.confirm(f"Reset {manager.config_path} to defaults?", abort=True)
    manager.reset()
    console.print("[green]Configuration reset to defaults.[/green]")


def main() -> None:
    """Console script entry point."""
    cli()


if __name__ == "__main__":
    main()
