"""CLI tests for the ``config`` command group."""

import os
from pathlib import Path
from typing import Any, Optional

import pytest
from click.testing import CliRunner

from tabgroups.cli import cli
from tabgroups.config import ConfigManager


@pytest.fixture()
def home(tmp_path: Path) -> dict[str, Optional[str]]:
    env: dict[str, Optional[str]] = {
        key: None for key in os.environ if key.startswith("TABGROUPS__")
    }
    env["HOME"] = str(tmp_path)
    return env


def _stored(tmp_path: Path) -> ConfigManager:
    return ConfigManager(tmp_path / ".tabgroups" / "config.yaml", env={})


def test_config_path_points_under_home(tmp_path: Path, home: dict[str, Optional[str]]) -> None:
    result = CliRunner().invoke(cli, ["config", "path"], env=home)

    assert result.exit_code == 0
    assert result.output.strip() == str(tmp_path / ".tabgroups" / "config.yaml")


def test_config_view_json_reports_settings(tmp_path: Path, home: dict[str, Optional[str]]) -> None:
    home["TABGROUPS__COLORS__MAX_LUMINANCE"] = "90"

    result = CliRunner().invoke(cli, ["config", "view", "--json"], env=home)
    file_only = CliRunner().invoke(cli, ["config", "view", "--json", "--no-env"], env=home)

    assert result.exit_code == 0
    assert '"max_luminance": 90.0' in result.output
    assert '"max_luminance": 200.0' in file_only.output
    assert (tmp_path / ".tabgroups" / "config.yaml").exists()


def test_config_set_stores_the_value(tmp_path: Path, home: dict[str, Optional[str]]) -> None:
    runner = CliRunner()

    first = runner.invoke(cli, ["config", "set", "colors.max_luminance", "150"], env=home)
    again = runner.invoke(cli, ["config", "set", "colors.max_luminance", "150"], env=home)

    assert first.exit_code == 0
    assert "colors.max_luminance = 150" in first.output
    assert "already set" in again.output
    assert _stored(tmp_path).load().colors.max_luminance == pytest.approx(150)


def test_config_set_rejects_invalid_value(tmp_path: Path, home: dict[str, Optional[str]]) -> None:
    result = CliRunner().invoke(cli, ["config", "set", "colors.max_luminance", "400"], env=home)

    assert result.exit_code != 0
    assert _stored(tmp_path).load().colors.max_luminance == pytest.approx(200)


def test_config_edit_saves_valid_text(
    tmp_path: Path, home: dict[str, Optional[str]], monkeypatch: pytest.MonkeyPatch
) -> None:
    def _edit(text: str, **_: Any) -> str:
        return text.replace("debounce_seconds: 1.0", "debounce_seconds: 2.5")

    monkeypatch.setattr("tabgroups.cli.click.edit", _edit)

    result = CliRunner().invoke(cli, ["config", "edit"], env=home)

    assert result.exit_code == 0
    assert "Configuration saved." in result.output
    assert _stored(tmp_path).load().watch.debounce_seconds == pytest.approx(2.5)


def test_config_edit_cancelled_keeps_file(
    tmp_path: Path, home: dict[str, Optional[str]], monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr("tabgroups.cli.click.edit", lambda text, **_: None)

    result = CliRunner().invoke(cli, ["config", "edit"], env=home)

    assert result.exit_code == 0
    assert "Edit cancelled." in result.output
    assert _stored(tmp_path).load().watch.debounce_seconds == pytest.approx(1.0)
