"""
Configuration manager.

Loads the application configuration from a JSON or YAML file, expands
environment variables, applies ``EC2LAUNCH_*`` overrides and validates the
result into typed pydantic models.
"""
import json
import logging
import os
import threading
from pathlib import Path
from typing import Any, Dict, Optional, Type, TypeVar, cast

import yaml
from pydantic import ValidationError as PydanticValidationError

from ec2launch.config.env_expansion import expand_env_vars
from ec2launch.config.schemas import (
    AppConfig,
    AWSConfig,
    KeyPairConfig,
    LoggingConfig,
    NamingConfig,
    PlacementConfig,
    SSHConfig,
)
from ec2launch.domain.exceptions import ConfigurationError

T = TypeVar("T")
logger = logging.getLogger(__name__)

CONFIG_FILE_ENV = "EC2LAUNCH_CONFIG"

# Environment variable -> dotted configuration key
ENV_OVERRIDES = {
    "EC2LAUNCH_REGION": "aws.region",
    "EC2LAUNCH_ENDPOINT_URL": "aws.endpoint_url",
    "EC2LAUNCH_LOG_LEVEL": "logging.level",
    "EC2LAUNCH_NAMING_PREFIX": "naming.prefix",
}


class ConfigurationManager:
    """Typed access to the application configuration."""

    def __init__(self, config_file: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None):
        """
        Initialize configuration manager.

        Args:
            config_file: Optional path to a JSON or YAML configuration file.
                Falls back to ``$EC2LAUNCH_CONFIG`` when not given.
            overrides: Optional dotted-key overrides applied last

        Raises:
            ConfigurationError: If the file cannot be read or fails validation
        """
        self.config_file = config_file or os.environ.get(CONFIG_FILE_ENV)
        raw = self._load_file(self.config_file) if self.config_file else {}
        raw = expand_env_vars(raw)
        for env_name, key in ENV_OVERRIDES.items():
            if os.environ.get(env_name):
                _set_dotted(raw, key, os.environ[env_name])
        for key, value in (overrides or {}).items():
            _set_dotted(raw, key, value)
        self.raw_config = raw

        try:
            self._app_config = AppConfig(**raw)
        except PydanticValidationError as e:
            raise ConfigurationError(
                f"Invalid configuration: {e}",
                missing_fields=[".".join(str(p) for p in err["loc"]) for err in e.errors()],
            ) from e

        logger.debug(f"Configuration loaded from {self.config_file or 'defaults'}")

    @staticmethod
    def _load_file(path: str) -> Dict[str, Any]:
        file_path = Path(path)
        if not file_path.is_file():
            raise ConfigurationError(f"Configuration file not found: {path}")
        try:
            with file_path.open("r", encoding="utf-8") as handle:
                if file_path.suffix in (".yaml", ".yml"):
                    data = yaml.safe_load(handle)
                else:
                    data = json.load(handle)
        except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Failed to read configuration file {path}: {str(e)}") from e
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration file {path} must contain a mapping")
        return data

    @property
    def app_config(self) -> AppConfig:
        return self._app_config

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get raw configuration value by key.

        Args:
            key: Configuration key (dot notation for nested keys)
            default: Default value if key not found

        Returns:
            Configuration value
        """
        value: Any = self.raw_config
        for part in key.split("."):
            if isinstance(value, dict) and part in value:
                value = value[part]
            else:
                return default
        return value

    def get_typed(self, config_class: Type[T]) -> T:
        """
        Get typed configuration object.

        Args:
            config_class: Configuration class

        Returns:
            Typed configuration object

        Raises:
            ConfigurationError: If the class is not part of the configuration
        """
        config_mapping = {
            AppConfig: self._app_config,
            AWSConfig: self._app_config.aws,
            NamingConfig: self._app_config.naming,
            PlacementConfig: self._app_config.placement,
            KeyPairConfig: self._app_config.key_pair,
            SSHConfig: self._app_config.ssh,
            LoggingConfig: self._app_config.logging,
        }
        if config_class in config_mapping:
            return cast(T, config_mapping[config_class])
        raise ConfigurationError(f"Unknown configuration class: {config_class.__name__}")


def _set_dotted(config: Dict[str, Any], key: str, value: Any) -> None:
    parts = key.split(".")
    target = config
    for part in parts[:-1]:
        target = target.setdefault(part, {})
    target[parts[-1]] = value


_manager: Optional[ConfigurationManager] = None
_manager_lock = threading.Lock()


def get_config_manager(config_file: Optional[str] = None) -> ConfigurationManager:
    """
    Get the shared configuration manager, creating it on first use.

    Passing ``config_file`` always loads a fresh manager and makes it the
    shared one.
    """
    global _manager
    with _manager_lock:
        if _manager is None or config_file is not None:
            _manager = ConfigurationManager(config_file)
        return _manager


def reset_config_manager() -> None:
    """Forget the shared configuration manager (used by tests)."""
    global _manager
    with _manager_lock:
        _manager = None
