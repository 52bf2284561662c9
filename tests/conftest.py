"""Pytest configuration and fixtures."""

import asyncio

import pytest

from studiobridge.config.manager import ConfigManager
from studiobridge.output import formatter


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep every test away from the real user config and environment."""
    config_file = tmp_path / "user_config" / "config.toml"
    config_file.parent.mkdir()
    monkeypatch.setattr("studiobridge.config.schema.get_config_file", lambda: config_file)
    monkeypatch.setattr(ConfigManager, "_find_project_config", classmethod(lambda cls: None))
    monkeypatch.delenv("STUDIO_BRIDGE_PORT", raising=False)
    ConfigManager.reset()
    formatter._formatter = None
    yield config_file
    ConfigManager.reset()


@pytest.fixture
def event_loop_for_futures():
    """A private loop for sync tests that need futures to hand out."""
    loop = asyncio.new_event_loop()
    yield loop
    loop.close()
