"""Configuration schema using Pydantic."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

from studiobridge.config.defaults import (
    DEFAULT_COMMAND_TIMEOUT,
    DEFAULT_HEARTBEAT_TIMEOUT,
    DEFAULT_HOST,
    DEFAULT_LOG_LEVEL,
    DEFAULT_MAX_BODY_BYTES,
    DEFAULT_PORT,
)


class BridgeConfig(BaseModel):
    """HTTP bridge and command broker settings.

    Timeouts are read once when the broker is built.
    """

    host: str = DEFAULT_HOST
    port: int = Field(default=DEFAULT_PORT, gt=0, lt=65536)
    command_timeout: float = Field(default=DEFAULT_COMMAND_TIMEOUT, gt=0)  # seconds
    heartbeat_timeout: float = Field(default=DEFAULT_HEARTBEAT_TIMEOUT, gt=0)  # seconds
    max_body_bytes: int = Field(default=DEFAULT_MAX_BODY_BYTES, gt=0)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = DEFAULT_LOG_LEVEL

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"


class StudioBridgeConfig(BaseModel):
    """Root configuration model."""

    bridge: BridgeConfig = Field(default_factory=BridgeConfig)

    @classmethod
    def default(cls) -> "StudioBridgeConfig":
        """Create default configuration."""
        return cls()


def get_config_dir() -> Path:
    """Get the configuration directory path."""
    config_dir = Path.home() / ".config" / "studiobridge"
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_config_file() -> Path:
    """Get the main configuration file path."""
    return get_config_dir() / "config.toml"
