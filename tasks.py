"""Invoke tasks for developing typesort.

Every task shells out to `uv` so local runs use the same environment as CI.
"""

from __future__ import annotations

import shlex
import shutil
from collections.abc import Sequence
from pathlib import Path

from invoke import Collection, Context, task

ROOT = Path(__file__).resolve().parent
DIST = ROOT / "dist"
CHECKED_PATHS = ("src", "tests", "tasks.py")


def _run_uv(ctx: Context, args: Sequence[str], *, echo: bool = True) -> None:
    """Run ``uv`` with ``args`` under a PTY so colours survive."""
    ctx.run(shlex.join(("uv", *args)), echo=echo, pty=True)


@task(help={"dev": "Install the dev extra as well (default: yes)."})
def sync(ctx: Context, dev: bool = True) -> None:
    """Create or update the project virtual environment."""
    _run_uv(ctx, ["sync", "--extra", "dev"] if dev else ["sync"])


@task(help={"clean": "Delete dist/ first."})
def build(ctx: Context, clean: bool = False) -> None:
    """Build the sdist and wheel into dist/."""
    if clean:
        shutil.rmtree(DIST, ignore_errors=True)
    _run_uv(ctx, ["build"])


@task(
    help={
        "k": "Only run tests matching this -k expression.",
        "path": "Test file or directory (default: tests).",
        "options": "Extra pytest flags, passed through unchanged.",
    }
)
def tests(ctx: Context, k: str = "", path: str = "tests", options: str = "") -> None:
    """Run pytest."""
    args = ["run", "pytest", *shlex.split(options)]
    if k:
        args += ["-k", k]
    _run_uv(ctx, [*args, path])


@task(
    help={
        "fix": "Let ruff rewrite fixable problems.",
        "check_format": "Also run ruff format --check.",
    }
)
def lint(ctx: Context, fix: bool = False, check_format: bool = False) -> None:
    """Lint with ruff."""
    if check_format:
        _run_uv(ctx, ["run", "ruff", "format", "--check", *CHECKED_PATHS])
    _run_uv(ctx, ["run", "ruff", "check", *CHECKED_PATHS, *(["--fix"] if fix else [])])


@task
def mypy(ctx: Context) -> None:
    """Type-check src/ with mypy."""
    _run_uv(ctx, ["run", "mypy", "src"])


@task(
    help={
        "source": "Directory to sort.",
        "destination": "Where the sorted tree would go (default: ./sorted-preview).",
    }
)
def preview(ctx: Context, source: str, destination: str = "sorted-preview") -> None:
    """Dry-run `typesort org` against a local directory and print the summary."""
    _run_uv(ctx, ["run", "typesort", "org", destination, source, "--dry-run"])


@task
def ci(ctx: Context) -> None:
    """Format check, lint, type-check, then test; the same order CI uses."""
    lint(ctx, check_format=True)
    mypy(ctx)
    tests(ctx)


namespace = Collection(sync, build, tests, lint, mypy, preview, ci)
