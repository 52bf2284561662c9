"""Tests for configuration schema."""
import pytest
from pydantic import ValidationError

from studiobridge.config.schema import BridgeConfig, StudioBridgeConfig


def test_bridge_config_defaults():
    """Test BridgeConfig has correct defaults."""
    config = BridgeConfig()

    assert config.host == "127.0.0.1"
    assert config.port == 3001
    assert config.command_timeout == 30.0
    assert config.heartbeat_timeout == 10.0
    assert config.max_body_bytes == 10 * 1024 * 1024
    assert config.base_url == "http://127.0.0.1:3001"


@pytest.mark.parametrize("port", [0, -1, 65536])
def test_bridge_config_rejects_bad_port(port):
    with pytest.raises(ValidationError):
        BridgeConfig(port=port)


def test_bridge_config_rejects_non_positive_timeouts():
    with pytest.raises(ValidationError):
        BridgeConfig(command_timeout=0)
    with pytest.raises(ValidationError):
        BridgeConfig(heartbeat_timeout=-5)


def test_root_config_includes_bridge():
    config = StudioBridgeConfig.default()
    assert config.bridge.port == 3001
