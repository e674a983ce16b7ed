"""Command line interface for whisk."""

from __future__ import annotations

import difflib
import logging
import sys
from pathlib import Path
from typing import Any

import click
import yaml
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from whisk.app import WhiskApp
from whisk.config import (
    ConfigError,
    ConfigManager,
    WhiskConfig,
    flatten_for_env,
)
from whisk.events import SchedulerError
from whisk.log import configure_logging
from whisk.picker import PickerError, project_name_for
from whisk.store import (
    IndexOutOfRange,
    Project,
    ProjectStore,
    StorageFormatError,
    StorageReadError,
    StoreError,
)
from whisk.ui.render import format_timestamp

LOGGER = logging.getLogger(__name__)

console = Console()


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    details: Any | None = None,
    original: Exception | None = None,
) -> None:
    """Report a failed command and exit with status 1.

    With ``--json`` the error is printed as ``{"error": {"code", "message",
    "details"}}`` on stdout; otherwise click prints ``Error: <message>``.

    Args:
        message: Text shown to the user.
        code: Stable identifier such as ``index_out_of_range``.
        json_output: Whether the command runs in JSON mode.
        details: Extra fields for the JSON payload.
        original: Exception to chain from.

    Raises:
        SystemExit: In JSON mode.
        click.ClickException: Otherwise.
    """
    if json_output:
        payload: dict[str, Any] = {"error": {"code": code, "message": message}}
        if details is not None:
            payload["error"]["details"] = details
        console.print_json(data=payload)
        raise SystemExit(1)

    raise click.ClickException(message) from original


def _store_error_code(exc: StoreError) -> str:
    if isinstance(exc, IndexOutOfRange):
        return "index_out_of_range"
    if isinstance(exc, StorageFormatError):
        return "storage_format"
    if isinstance(exc, StorageReadError):
        return "storage_read"
    return "store_error"


def _load_config(ctx: click.Context) -> WhiskConfig:
    """Return the effective configuration for the current invocation.

    Raises:
        click.ClickException: If configuration cannot be loaded.
    """
    overrides: dict[str, Any] = {}
    db_path = ctx.find_root().params.get("db_path")
    if db_path:
        overrides["store.path"] = db_path
    try:
        config = ConfigManager().load(cli_overrides=overrides or None)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    configure_logging(config.logging)
    return config


def _project_payload(index: int, project: Project) -> dict[str, Any]:
    return {"index": index, **project.model_dump(mode="json")}


def _projects_table(projects: list[Project], timestamp_format: str) -> Table:
    table = Table(title="Projects", header_style="bold")
    table.add_column("#", justify="right")
    table.add_column("Name")
    table.add_column("Directory", overflow="fold")
    table.add_column("Created At")
    table.add_column("ID", style="dim")
    for index, project in enumerate(projects):
        table.add_row(
            str(index),
            project.name,
            project.directory,
            format_timestamp(project, timestamp_format),
            project.id,
        )
    return table


@click.group(
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.version_option(package_name="whisk")
@click.option(
    "--db",
    "db_path",
    type=click.Path(dir_okay=False, path_type=str),
    help="Use this project document instead of the configured one.",
)
@click.pass_context
def cli(ctx: click.Context, db_path: str | None) -> None:
    """whisk keeps a list of your project directories at hand.

    Run without a command to open the interactive browser.
    """
    if ctx.invoked_subcommand is None:
        ctx.invoke(ui)


@cli.command()
@click.pass_context
def ui(ctx: click.Context) -> None:
    """Open the interactive project browser."""
    if not sys.stdin.isatty():
        raise click.ClickException("The interactive browser needs a terminal on stdin.")

    config = _load_config(ctx)
    try:
        WhiskApp(config, console=console).run()
    except StoreError as exc:
        LOGGER.error("Project store failure: %s", exc)
        raise click.ClickException(str(exc)) from exc
    except PickerError as exc:
        LOGGER.error("Directory picker failure: %s", exc)
        message = str(exc)
        if message:
            click.echo(f"error: {message}", err=True)
        raise SystemExit(1) from exc
    except SchedulerError as exc:
        LOGGER.error("Input failure: %s", exc)
        raise click.ClickException(str(exc)) from exc


@cli.command("list")
@click.option("--json", "json_output", is_flag=True, help="Emit projects as JSON.")
@click.pass_context
def list_projects(ctx: click.Context, json_output: bool) -> None:
    """List stored projects in order."""
    config = _load_config(ctx)
    store = ProjectStore(Path(config.store.path))
    try:
        projects = store.load()
    except StoreError as exc:
        _handle_cli_error(
            str(exc), code=_store_error_code(exc), json_output=json_output, original=exc
        )
        return

    if json_output:
        console.print_json(
            data={"projects": [_project_payload(i, p) for i, p in enumerate(projects)]}
        )
        return

    if not projects:
        console.print("[yellow]No projects stored yet.[/yellow]")
        return
    console.print(_projects_table(projects, config.ui.timestamp_format))


@cli.command()
@click.argument("path", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--name", type=str, help="Display name (defaults to the directory name).")
@click.option("--json", "json_output", is_flag=True, help="Emit the new project as JSON.")
@click.pass_context
def add(ctx: click.Context, path: Path, name: str | None, json_output: bool) -> None:
    """Add the directory PATH as a project."""
    config = _load_config(ctx)
    store = ProjectStore(Path(config.store.path))
    directory = str(path.expanduser().resolve())
    try:
        projects = store.append(name or project_name_for(directory), directory)
    except StoreError as exc:
        _handle_cli_error(
            str(exc), code=_store_error_code(exc), json_output=json_output, original=exc
        )
        return

    project = projects[-1]
    if json_output:
        console.print_json(data={"project": _project_payload(len(projects) - 1, project)})
        return
    console.print(f"[green]Added {project.name} ({project.directory}).[/green]")


@cli.command()
@click.argument("index", type=int)
@click.option("--json", "json_output", is_flag=True, help="Emit the result as JSON.")
@click.pass_context
def rm(ctx: click.Context, index: int, json_output: bool) -> None:
    """Remove the project at zero-based position INDEX."""
    config = _load_config(ctx)
    store = ProjectStore(Path(config.store.path))
    try:
        store.remove_at(index)
    except StoreError as exc:
        details = None
        if isinstance(exc, IndexOutOfRange):
            details = {"index": exc.index, "length": exc.length}
        _handle_cli_error(
            str(exc),
            code=_store_error_code(exc),
            json_output=json_output,
            details=details,
            original=exc,
        )
        return

    if json_output:
        console.print_json(data={"removed": index})
        return
    console.print(f"[green]Removed project {index}.[/green]")


@cli.group()
def config() -> None:
    """Manage whisk configuration files and overrides."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
def config_view(no_env: bool) -> None:
    """Show the configuration whisk would run with, as YAML.

    Args:
        no_env: Skip WHISK__ environment variables.

    Raises:
        click.ClickException: If configuration cannot be loaded.
    """
    manager = ConfigManager()
    try:
        manager.ensure_exists()
        effective = manager.load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    yaml_text = yaml.safe_dump(effective.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("env")
def config_env() -> None:
    """Print the effective configuration as WHISK__ environment variables."""
    try:
        effective = ConfigManager().load()
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    for key, value in flatten_for_env(effective).items():
        click.echo(f"{key}={value}")


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="YAML literal to assign to KEY.")
def config_set(key: str, value: str) -> None:
    """Store VALUE under the dotted KEY, e.g. ``whisk config set ui.tick_ms --value 100``.

    Raises:
        click.ClickException: If the key or value is rejected.
    """
    manager = ConfigManager()
    try:
        manager.ensure_exists()
        before = manager.read_text()
        manager.set_value(key, value)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    changes = _config_diff(before, manager.read_text())
    if not changes:
        console.print("[yellow]No changes applied; value already up to date.[/yellow]")
        return
    console.print(Syntax("\n".join(changes), "diff", word_wrap=False))
    console.print(f"[green]Updated {key.strip()}.[/green]")


@config.command("edit")
def config_edit() -> None:
    """Edit the configuration file in $EDITOR and validate the result."""
    manager = ConfigManager()
    try:
        manager.ensure_exists()
        original = manager.read_text()
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    edited = click.edit(original, extension=".yaml")
    if edited is None:
        console.print("[yellow]Edit cancelled; no changes applied.[/yellow]")
        return
    if edited == original:
        console.print("[yellow]No changes detected.[/yellow]")
        return

    try:
        manager.replace_text(edited)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    console.print("[green]Configuration updated successfully.[/green]")


def _config_diff(before: str, after: str) -> list[str]:
    """Return a unified diff of two config texts, or nothing if only the stamp moved."""
    lines = [
        line
        for line in difflib.unified_diff(
            before.splitlines(),
            after.splitlines(),
            fromfile="config.yaml (before)",
            tofile="config.yaml (after)",
            lineterm="",
        )
        if "# Last updated:" not in line
    ]
    edited = [
        line
        for line in lines
        if line.startswith(("+", "-")) and not line.startswith(("+++", "---"))
    ]
    return lines if edited else []


def main() -> None:
    """Invoke the Click CLI as the console script entry point."""
    cli()


if __name__ == "__main__":
    main()
