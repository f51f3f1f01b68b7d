"""Configuration package."""

from .manager import ConfigurationManager, get_config_manager, reset_config_manager
from .schemas import (
    DEFAULT_HARDWARE_WITH_PLACEMENT_GROUPS,
    AppConfig,
    AWSConfig,
    KeyPairConfig,
    LoggingConfig,
    NamingConfig,
    PlacementConfig,
    SSHConfig,
)

__all__ = [
    "DEFAULT_HARDWARE_WITH_PLACEMENT_GROUPS",
    "AppConfig",
    "AWSConfig",
    "ConfigurationManager",
    "KeyPairConfig",
    "LoggingConfig",
    "NamingConfig",
    "PlacementConfig",
    "SSHConfig",
    "get_config_manager",
    "reset_config_manager",
]
