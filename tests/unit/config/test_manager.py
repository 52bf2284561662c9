"""Tests for ConfigManager"""
import pytest
import toml

from studiobridge.broker.errors import ConfigError
from studiobridge.config.manager import ConfigManager


def test_defaults_without_files():
    config = ConfigManager.get_config()
    assert config.bridge.port == 3001


def test_user_config_is_loaded(isolated_config):
    isolated_config.write_text('[bridge]\nport = 4000\ncommand_timeout = 5.0\n')

    config = ConfigManager.get_config()

    assert config.bridge.port == 4000
    assert config.bridge.command_timeout == 5.0
    assert config.bridge.heartbeat_timeout == 10.0


def test_project_config_overrides_user_config(isolated_config, tmp_path, monkeypatch):
    isolated_config.write_text('[bridge]\nport = 4000\nheartbeat_timeout = 3.0\n')
    project_file = tmp_path / ".studiobridge.toml"
    project_file.write_text('[bridge]\nport = 4100\n')
    monkeypatch.setattr(ConfigManager, "_find_project_config", classmethod(lambda cls: project_file))

    config = ConfigManager.get_config()

    assert config.bridge.port == 4100
    assert config.bridge.heartbeat_timeout == 3.0


def test_env_port_overrides_files(isolated_config, monkeypatch):
    isolated_config.write_text('[bridge]\nport = 4000\n')
    monkeypatch.setenv("STUDIO_BRIDGE_PORT", "5005")

    assert ConfigManager.get_config().bridge.port == 5005


@pytest.mark.parametrize("value", ["abc", "0", "70000", "-3"])
def test_invalid_env_port_is_ignored(monkeypatch, value):
    monkeypatch.setenv("STUDIO_BRIDGE_PORT", value)
    assert ConfigManager.get_config().bridge.port == 3001


def test_invalid_values_raise_config_error(isolated_config):
    isolated_config.write_text('[bridge]\nport = 0\n')

    with pytest.raises(ConfigError):
        ConfigManager.get_config()


def test_unparseable_file_raises_config_error(isolated_config):
    isolated_config.write_text('[bridge\nport = ')

    with pytest.raises(ConfigError):
        ConfigManager.get_config()


def test_set_value_persists(isolated_config):
    ConfigManager.set_value("bridge.port", 4242)

    assert ConfigManager.get_value("bridge.port") == 4242
    assert toml.load(isolated_config)["bridge"]["port"] == 4242


def test_set_value_rejects_invalid(isolated_config):
    with pytest.raises(ConfigError):
        ConfigManager.set_value("bridge.port", 99999)
    assert not isolated_config.exists()


def test_get_value_missing_key_returns_default():
    assert ConfigManager.get_value("bridge.nope", default="x") == "x"


def test_deep_merge():
    merged = ConfigManager._deep_merge(
        {"bridge": {"port": 1, "host": "a"}},
        {"bridge": {"port": 2}},
    )
    assert merged == {"bridge": {"port": 2, "host": "a"}}
