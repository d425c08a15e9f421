"""CLI integration tests for group, file, patch, and overview commands."""

from __future__ import annotations

import json
import os
from pathlib import Path

from click.testing import CliRunner

from tabgroups.cli import cli
from tabgroups.patching import DEFAULT_BACKUP_NAME, DEFAULT_RESOURCE_CANDIDATES, SCRIPT_ELEMENT_ID

PRISTINE = "<!DOCTYPE html>\n<html><head></head><body></body></html>\n"


def _env_with_home(tmp_path: Path, *, host: Path | None = None) -> dict[str, str]:
    """Return environment variables pointing HOME to a temp directory.

    Args:
        tmp_path: Temporary directory provided by pytest.
        host: Optional fake host installation to configure.

    Returns:
        dict[str, str]: Environment mapping with HOME set.
    """
    env = {key: value for key, value in os.environ.items() if not key.startswith("TABGROUPS__")}
    env["HOME"] = str(tmp_path / "home")
    if host is not None:
        env["TABGROUPS__HOST__INSTALL_DIR"] = str(host)
    return env


def _state(tmp_path: Path) -> dict:
    path = tmp_path / "home" / ".tabgroups" / "groups.json"
    return json.loads(path.read_text(encoding="utf-8"))


def _host(tmp_path: Path) -> tuple[Path, Path]:
    install_dir = tmp_path / "host"
    resource = install_dir / DEFAULT_RESOURCE_CANDIDATES[0]
    resource.parent.mkdir(parents=True)
    resource.write_text(PRISTINE, encoding="utf-8")
    return install_dir, resource


def _source_file(tmp_path: Path, name: str) -> Path:
    path = tmp_path / "project" / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("print('hi')\n", encoding="utf-8")
    return path.resolve()


def test_group_create_and_list(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    created = runner.invoke(cli, ["group", "create", "Backend"], env=env)
    listed = runner.invoke(cli, ["group", "list"], env=env)

    assert created.exit_code == 0
    assert "Group Backend created" in created.output
    assert listed.exit_code == 0
    assert "Backend" in listed.output
    assert _state(tmp_path)["Backend"]["files"] == []


def test_group_create_duplicate_fails(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    runner.invoke(cli, ["group", "create", "Backend"], env=env)
    result = runner.invoke(cli, ["group", "create", "Backend"], env=env)

    assert result.exit_code != 0
    assert "already exists" in result.output


def test_file_add_moves_between_groups(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    source = _source_file(tmp_path, "a.py")

    first = runner.invoke(cli, ["file", "add", "Backend", str(source), "--create"], env=env)
    second = runner.invoke(cli, ["file", "add", "Frontend", str(source), "--create"], env=env)

    assert first.exit_code == 0
    assert "Added a.py to group Backend" in first.output
    assert second.exit_code == 0
    assert "Moved a.py from group Backend to group Frontend" in second.output
    assert _state(tmp_path) == {
        "Frontend": {
            "color": _state(tmp_path)["Frontend"]["color"],
            "files": [{"name": "a.py", "path": str(source)}],
        }
    }


def test_file_add_to_missing_group_fails(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    source = _source_file(tmp_path, "a.py")

    result = runner.invoke(cli, ["file", "add", "Nope", str(source)], env=env)

    assert result.exit_code != 0
    assert "does not exist" in result.output


def test_file_add_twice_warns(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    source = _source_file(tmp_path, "a.py")

    runner.invoke(cli, ["file", "add", "Backend", str(source), "--create"], env=env)
    result = runner.invoke(cli, ["file", "add", "Backend", str(source)], env=env)

    assert result.exit_code == 0
    assert "already in group" in result.output


def test_file_remove_and_close_delete_emptied_groups(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    first = _source_file(tmp_path, "a.py")
    second = _source_file(tmp_path, "b.py")
    runner.invoke(cli, ["file", "add", "Backend", str(first), "--create"], env=env)
    runner.invoke(cli, ["file", "add", "Frontend", str(second), "--create"], env=env)

    removed = runner.invoke(cli, ["file", "remove", "Backend", "a.py"], env=env)
    closed = runner.invoke(cli, ["file", "close", str(second)], env=env)

    assert removed.exit_code == 0
    assert "Removed a.py from group Backend" in removed.output
    assert closed.exit_code == 0
    assert "Frontend" in closed.output
    assert _state(tmp_path) == {}


def test_group_delete_by_path(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    source = _source_file(tmp_path, "a.py")
    runner.invoke(cli, ["file", "add", "Backend", str(source), "--create"], env=env)

    result = runner.invoke(cli, ["group", "delete", "--path", str(source)], env=env)

    assert result.exit_code == 0
    assert "Group Backend removed" in result.output
    assert _state(tmp_path) == {}


def test_group_delete_requires_exactly_one_selector(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    result = runner.invoke(cli, ["group", "delete"], env=env)

    assert result.exit_code == 2


def test_group_delete_missing_group_fails(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    result = runner.invoke(cli, ["group", "delete", "DoesNotExist"], env=env)

    assert result.exit_code != 0
    assert "does not exist" in result.output


def test_patch_commands_require_host(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    result = runner.invoke(cli, ["patch", "status"], env=env)

    assert result.exit_code != 0
    assert "host.install_dir" in result.output


def test_mutations_patch_configured_host(tmp_path: Path) -> None:
    install_dir, resource = _host(tmp_path)
    runner = CliRunner()
    env = _env_with_home(tmp_path, host=install_dir)
    source = _source_file(tmp_path, "a.py")

    result = runner.invoke(cli, ["file", "add", "Backend", str(source), "--create"], env=env)

    assert result.exit_code == 0
    markup = resource.read_text(encoding="utf-8")
    assert f'id="{SCRIPT_ELEMENT_ID}"' in markup
    assert '"groupName": "Backend"' in markup
    assert resource.with_name(DEFAULT_BACKUP_NAME).read_text(encoding="utf-8") == PRISTINE


def test_patch_apply_status_and_restore(tmp_path: Path) -> None:
    install_dir, resource = _host(tmp_path)
    runner = CliRunner()
    env = _env_with_home(tmp_path, host=install_dir)

    applied = runner.invoke(cli, ["patch", "apply"], env=env)
    status = runner.invoke(cli, ["patch", "status", "--json"], env=env)
    restored = runner.invoke(cli, ["patch", "restore"], env=env)

    assert applied.exit_code == 0
    assert "Saved pristine backup" in applied.output
    assert status.exit_code == 0
    assert '"patched": true' in status.output
    assert restored.exit_code == 0
    assert "Restored" in restored.output
    assert resource.read_text(encoding="utf-8") == PRISTINE


def test_patch_restore_without_backup_fails(tmp_path: Path) -> None:
    install_dir, _ = _host(tmp_path)
    runner = CliRunner()
    env = _env_with_home(tmp_path, host=install_dir)

    result = runner.invoke(cli, ["patch", "restore"], env=env)

    assert result.exit_code != 0
    assert "No backup found" in result.output


def test_watch_once_repairs_host_update(tmp_path: Path) -> None:
    install_dir, resource = _host(tmp_path)
    runner = CliRunner()
    env = _env_with_home(tmp_path, host=install_dir)

    repaired = runner.invoke(cli, ["watch", "--once"], env=env)
    current = runner.invoke(cli, ["watch", "--once"], env=env)

    assert repaired.exit_code == 0
    assert "Patched" in repaired.output
    assert current.exit_code == 0
    assert "up to date" in current.output
    assert f'id="{SCRIPT_ELEMENT_ID}"' in resource.read_text(encoding="utf-8")


def test_overview_writes_page(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    grouped = _source_file(tmp_path, "a.py")
    loose = _source_file(tmp_path, "notes.txt")
    runner.invoke(cli, ["file", "add", "Backend", str(grouped), "--create"], env=env)
    output = tmp_path / "overview.html"

    result = runner.invoke(
        cli,
        ["overview", "--open", str(grouped), "--open", str(loose), "--output", str(output)],
        env=env,
    )

    assert result.exit_code == 0
    page = output.read_text(encoding="utf-8")
    assert "Backend (1)" in page
    assert "notes.txt" in page


def test_patch_apply_binds_only_open_files(tmp_path: Path) -> None:
    install_dir, resource = _host(tmp_path)
    runner = CliRunner()
    env = _env_with_home(tmp_path, host=install_dir)
    opened = _source_file(tmp_path, "opened.py")
    closed = _source_file(tmp_path, "closed.py")
    runner.invoke(cli, ["file", "add", "Backend", str(opened), "--create"], env=env)
    runner.invoke(cli, ["file", "add", "Backend", str(closed)], env=env)

    result = runner.invoke(cli, ["patch", "apply", "--open", str(opened)], env=env)

    assert result.exit_code == 0
    markup = resource.read_text(encoding="utf-8")
    assert '"basename": "opened.py"' in markup
    assert '"basename": "closed.py"' not in markup
