"""Tests for configuration layering and the YAML settings file."""

from pathlib import Path

import pytest

from tabgroups.config import ConfigError, ConfigManager, TabGroupsConfig
from tabgroups.config.sources import build_config, environment_layer, set_dotted


@pytest.fixture()
def config_file(tmp_path: Path) -> Path:
    return tmp_path / ".tabgroups" / "config.yaml"


def test_first_load_writes_commented_defaults(config_file: Path) -> None:
    manager = ConfigManager(config_file, env={})

    config = manager.load()

    assert config == TabGroupsConfig()
    text = config_file.read_text(encoding="utf-8")
    assert text.startswith("# tabgroups configuration")
    assert "# Saved:" in text
    assert "install_dir: null" in text


def test_environment_wins_over_file(config_file: Path) -> None:
    ConfigManager(config_file, env={}).set_value("colors.max_luminance", "180")
    ConfigManager(config_file, env={}).set_value("host.install_dir", "/opt/code")
    env = {
        "TABGROUPS__COLORS__MAX_LUMINANCE": "150",
        "TABGROUPS__WATCH__DEBOUNCE_SECONDS": "3",
        "UNRELATED": "1",
    }

    config = ConfigManager(config_file, env=env).load()

    assert config.host.install_dir == "/opt/code"
    assert config.colors.max_luminance == pytest.approx(150)
    assert config.watch.debounce_seconds == pytest.approx(3)


def test_include_env_false_ignores_variables(config_file: Path) -> None:
    manager = ConfigManager(config_file, env={"TABGROUPS__PATCH__HOME_ALIAS": "$HOME"})

    assert manager.load().patch.home_alias == "$HOME"
    assert manager.load(include_env=False).patch.home_alias == "~"


def test_environment_layer_parses_flow_lists() -> None:
    layer = environment_layer({"TABGROUPS__HOST__RELOAD_COMMAND": "[code, --reload-window]"})

    assert layer == {"host": {"reload_command": ["code", "--reload-window"]}}


def test_file_holding_a_list_is_rejected(config_file: Path) -> None:
    config_file.parent.mkdir(parents=True)
    config_file.write_text("- not-a-mapping\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="mapping"):
        ConfigManager(config_file, env={}).load()


def test_build_config_rejects_out_of_range_values() -> None:
    with pytest.raises(ConfigError):
        build_config({"colors": {"max_luminance": 400}})


def test_build_config_rejects_unknown_fields() -> None:
    with pytest.raises(ConfigError):
        build_config({"host": {"install_path": "/opt/code"}})


def test_later_layers_only_replace_the_fields_they_name() -> None:
    config = build_config(
        {"patch": {"home_alias": "HOME", "reload_on_change": True}},
        {"patch": {"home_alias": "~~"}},
    )

    assert config.patch.home_alias == "~~"
    assert config.patch.reload_on_change is True


def test_set_value_reports_whether_the_file_changed(config_file: Path) -> None:
    manager = ConfigManager(config_file, env={})

    assert manager.set_value("patch.reload_on_change", "true") is True
    assert manager.set_value("patch.reload_on_change", "true") is False
    assert manager.load().patch.reload_on_change is True


def test_set_value_leaves_file_untouched_when_invalid(config_file: Path) -> None:
    manager = ConfigManager(config_file, env={})
    manager.set_value("colors.max_luminance", "120")
    before = config_file.read_text(encoding="utf-8")

    with pytest.raises(ConfigError):
        manager.set_value("colors.max_luminance", "400")

    assert config_file.read_text(encoding="utf-8") == before


def test_set_dotted_refuses_to_descend_into_values() -> None:
    data = {"patch": {"home_alias": "~"}}

    with pytest.raises(ConfigError, match="not a section"):
        set_dotted(data, "patch.home_alias.extra", 1)
    with pytest.raises(ConfigError):
        set_dotted(data, " . ", 1)


def test_replace_validates_before_writing(config_file: Path) -> None:
    manager = ConfigManager(config_file, env={})
    text = manager.read_text()

    assert manager.replace(text) is False
    assert manager.replace(text.replace("home_alias: '~'", "home_alias: HOME")) is True
    assert manager.load().patch.home_alias == "HOME"
    with pytest.raises(ConfigError):
        manager.replace("watch:\n  debounce_seconds: 0\n")
    assert manager.load().patch.home_alias == "HOME"
