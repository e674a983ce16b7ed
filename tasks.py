"""Invoke tasks for local development of whisk.

Each task shells out to `uv` so the virtual environment used here matches CI.
"""

from __future__ import annotations

import shlex
import shutil
from collections.abc import Sequence
from pathlib import Path

from invoke import Collection, Context, task

PROJECT_ROOT = Path(__file__).parent
DIST_DIR = PROJECT_ROOT / "dist"
SOURCES = ("src", "tests")


def _uv(ctx: Context, args: Sequence[str], *, pty: bool = True) -> None:
    """Run `uv` with the given arguments, echoing the command line.

    Args:
        ctx: Invoke execution context.
        args: Arguments passed after `uv`.
        pty: Allocate a pseudo-terminal so colored output survives.
    """
    ctx.run(shlex.join(("uv", *args)), echo=True, pty=pty)


@task
def sync(ctx: Context) -> None:
    """Install the project and its dev extra into the uv environment."""
    _uv(ctx, ["sync", "--extra", "dev"])


@task(help={"k": "pytest -k expression.", "options": "Extra pytest arguments."})
def tests(ctx: Context, k: str = "", options: str = "") -> None:
    """Run the test suite.

    Args:
        ctx: Invoke execution context.
        k: Expression selecting tests by name.
        options: Additional arguments forwarded to pytest.
    """
    args = ["run", "pytest"]
    if k:
        args.extend(["-k", k])
    args.extend(shlex.split(options))
    _uv(ctx, args)


@task(help={"fix": "Let ruff apply fixes."})
def lint(ctx: Context, fix: bool = False) -> None:
    """Check formatting and lint rules with ruff."""
    _uv(ctx, ["run", "ruff", "format", "--check", *SOURCES])
    _uv(ctx, ["run", "ruff", "check", *SOURCES, *(["--fix"] if fix else [])])


@task
def typecheck(ctx: Context) -> None:
    """Run mypy over the package."""
    _uv(ctx, ["run", "mypy", "src"])


@task(help={"clean": "Empty dist/ first."})
def build(ctx: Context, clean: bool = False) -> None:
    """Build the sdist and wheel into dist/."""
    if clean and DIST_DIR.exists():
        shutil.rmtree(DIST_DIR)
    _uv(ctx, ["build"])


@task
def ci(ctx: Context) -> None:
    """Run lint, type checks and tests in CI order."""
    ctx.invoke(lint)
    ctx.invoke(typecheck)
    ctx.invoke(tests)


namespace = Collection(sync, tests, lint, typecheck, build, ci)
