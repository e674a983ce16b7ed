"""CLI tests for the non-interactive commands."""

from __future__ import annotations

import json
import os
from pathlib import Path

from click.testing import CliRunner

from whisk.cli import cli


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


def _db_path(tmp_path: Path) -> Path:
    return tmp_path / "home" / ".config" / "whisk" / "db.json"


def _project_dir(tmp_path: Path, name: str) -> Path:
    directory = tmp_path / "work" / name
    directory.mkdir(parents=True)
    return directory


def test_cli_help_displays_commands() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "whisk keeps a list of your project directories" in result.output
    for command in ("add", "list", "rm", "ui", "config"):
        assert command in result.output


def test_add_then_list_json(tmp_path: Path) -> None:
    """`whisk add` persists a record that `whisk list --json` reports.

    Args:
        tmp_path: Temporary directory provided by pytest.
    """
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    directory = _project_dir(tmp_path, "rocket")

    added = runner.invoke(cli, ["add", str(directory), "--json"], env=env)

    assert added.exit_code == 0, added.output
    project = json.loads(added.output)["project"]
    assert project["name"] == "rocket"
    assert project["directory"] == str(directory.resolve())
    assert project["index"] == 0
    assert _db_path(tmp_path).exists()

    listed = runner.invoke(cli, ["list", "--json"], env=env)

    assert listed.exit_code == 0
    payload = json.loads(listed.output)
    assert [entry["id"] for entry in payload["projects"]] == [project["id"]]


def test_add_with_explicit_name(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    directory = _project_dir(tmp_path, "rocket")

    result = runner.invoke(cli, ["add", str(directory), "--name", "Launch"], env=env)

    assert result.exit_code == 0
    assert "Added Launch" in result.output


def test_list_empty_store(tmp_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(cli, ["list"], env=_env_with_home(tmp_path))

    assert result.exit_code == 0
    assert "No projects stored yet" in result.output
    assert json.loads(_db_path(tmp_path).read_text(encoding="utf-8")) == []


def test_list_table_shows_names(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    runner.invoke(cli, ["add", str(_project_dir(tmp_path, "alpha"))], env=env)

    result = runner.invoke(cli, ["list"], env=env)

    assert result.exit_code == 0
    assert "alpha" in result.output


def test_rm_removes_by_index(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    for name in ("alpha", "beta"):
        runner.invoke(cli, ["add", str(_project_dir(tmp_path, name))], env=env)

    result = runner.invoke(cli, ["rm", "0"], env=env)

    assert result.exit_code == 0
    names = [entry["name"] for entry in json.loads(_db_path(tmp_path).read_text("utf-8"))]
    assert names == ["beta"]


def test_rm_out_of_range_json_error(tmp_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(cli, ["rm", "5", "--json"], env=_env_with_home(tmp_path))

    assert result.exit_code == 1
    payload = json.loads(result.output)
    assert payload["error"]["code"] == "index_out_of_range"
    assert payload["error"]["details"] == {"index": 5, "length": 0}


def test_rm_out_of_range_plain_error(tmp_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(cli, ["rm", "1"], env=_env_with_home(tmp_path))

    assert result.exit_code == 1
    assert "out of range" in result.output


def test_corrupt_document_is_reported(tmp_path: Path) -> None:
    runner = CliRunner()
    db = _db_path(tmp_path)
    db.parent.mkdir(parents=True)
    db.write_text("{oops", encoding="utf-8")

    result = runner.invoke(cli, ["list"], env=_env_with_home(tmp_path))

    assert result.exit_code == 1
    assert "Invalid project document" in result.output


def test_db_option_overrides_store_path(tmp_path: Path) -> None:
    runner = CliRunner()
    other = tmp_path / "elsewhere" / "projects.json"

    result = runner.invoke(
        cli,
        ["--db", str(other), "add", str(_project_dir(tmp_path, "alpha"))],
        env=_env_with_home(tmp_path),
    )

    assert result.exit_code == 0
    assert other.exists()
    assert not _db_path(tmp_path).exists()


def test_ui_requires_a_terminal(tmp_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(cli, [], env=_env_with_home(tmp_path))

    assert result.exit_code == 1
    assert "needs a terminal" in result.output


def test_unparseable_picker_command_is_a_config_error(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    env["WHISK__PICKER__COMMAND"] = "xplr '"

    result = runner.invoke(cli, ["list"], env=env)

    assert result.exit_code == 1
    assert "cannot parse picker command" in result.output
