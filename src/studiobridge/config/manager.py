"""Configuration manager for loading and merging configs."""

import logging
import os
from pathlib import Path
from typing import Any

import toml
from pydantic import ValidationError

from studiobridge.broker.errors import ConfigError
from studiobridge.config import schema
from studiobridge.config.defaults import PORT_ENV_VAR, PROJECT_CONFIG_NAME
from studiobridge.config.schema import StudioBridgeConfig

logger = logging.getLogger(__name__)


class ConfigManager:
    """Manages configuration loading, merging, and access."""

    _config: StudioBridgeConfig | None = None

    @classmethod
    def get_config(cls) -> StudioBridgeConfig:
        """Get the current configuration, loading if necessary."""
        if cls._config is None:
            cls._config = cls.load_config()
        return cls._config

    @classmethod
    def load_config(cls) -> StudioBridgeConfig:
        """Load configuration from all sources.

        Priority (highest to lowest):
        1. STUDIO_BRIDGE_PORT environment variable (port only)
        2. Project-level config (.studiobridge.toml in cwd or parents)
        3. User config (~/.config/studiobridge/config.toml)
        4. Default config
        """
        config_dict: dict[str, Any] = {}

        user_config_file = schema.get_config_file()
        if user_config_file.exists():
            config_dict = cls._deep_merge(config_dict, cls._read_toml(user_config_file))

        project_config_file = cls._find_project_config()
        if project_config_file and project_config_file.exists():
            config_dict = cls._deep_merge(config_dict, cls._read_toml(project_config_file))

        port = cls._port_from_env()
        if port is not None:
            config_dict = cls._deep_merge(config_dict, {"bridge": {"port": port}})

        if not config_dict:
            return StudioBridgeConfig.default()
        try:
            return StudioBridgeConfig.model_validate(config_dict)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e

    @classmethod
    def reset(cls) -> None:
        """Drop the cached configuration."""
        cls._config = None

    @classmethod
    def _read_toml(cls, path: Path) -> dict[str, Any]:
        try:
            return toml.load(path)
        except toml.TomlDecodeError as e:
            raise ConfigError(f"Cannot parse {path}: {e}") from e

    @classmethod
    def _port_from_env(cls) -> int | None:
        """Port override from the environment, ignored when not a valid port."""
        raw = os.environ.get(PORT_ENV_VAR)
        if not raw:
            return None
        try:
            port = int(raw)
        except ValueError:
            logger.warning("Ignoring %s=%r: not an integer", PORT_ENV_VAR, raw)
            return None
        if not 0 < port < 65536:
            logger.warning("Ignoring %s=%r: out of range", PORT_ENV_VAR, raw)
            return None
        return port

    @classmethod
    def _find_project_config(cls) -> Path | None:
        """Find project-level config file by searching up from cwd."""
        cwd = Path.cwd()
        for parent in [cwd, *cwd.parents]:
            config_file = parent / PROJECT_CONFIG_NAME
            if config_file.exists():
                return config_file
            # Stop at home directory
            if parent == Path.home():
                break
        return None

    @classmethod
    def _deep_merge(
        cls, base: dict[str, Any], override: dict[str, Any]
    ) -> dict[str, Any]:
        """Deep merge two dictionaries, with override taking precedence."""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = cls._deep_merge(result[key], value)
            else:
                result[key] = value
        return result

    @classmethod
    def save_user_config(cls, config: StudioBridgeConfig) -> None:
        """Save configuration to user config file."""
        config_file = schema.get_config_file()
        config_dict = config.model_dump(exclude_none=True)
        with open(config_file, "w") as f:
            toml.dump(config_dict, f)

    @classmethod
    def set_value(cls, key_path: str, value: Any) -> None:
        """Set a configuration value by dot-separated path.

        Example: set_value("bridge.port", 4000)
        """
        config = cls.get_config()
        config_dict = config.model_dump()

        keys = key_path.split(".")
        current = config_dict
        for key in keys[:-1]:
            if key not in current:
                current[key] = {}
            current = current[key]
        current[keys[-1]] = value

        try:
            cls._config = StudioBridgeConfig.model_validate(config_dict)
        except ValidationError as e:
            raise ConfigError(f"Invalid value for {key_path}: {e}") from e
        cls.save_user_config(cls._config)

    @classmethod
    def get_value(cls, key_path: str, default: Any = None) -> Any:
        """Get a configuration value by dot-separated path."""
        config = cls.get_config()
        config_dict = config.model_dump()

        keys = key_path.split(".")
        current = config_dict
        for key in keys:
            if isinstance(current, dict) and key in current:
                current = current[key]
            else:
                return default
        return current
