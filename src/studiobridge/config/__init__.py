"""Configuration management."""

from studiobridge.config.manager import ConfigManager
from studiobridge.config.schema import BridgeConfig, StudioBridgeConfig

__all__ = ["BridgeConfig", "ConfigManager", "StudioBridgeConfig"]
