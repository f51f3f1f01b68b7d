"""Application bootstrap."""
from typing import Any, Dict, Optional

from ec2launch.config.manager import ConfigurationManager
from ec2launch.config.schemas import AppConfig, LoggingConfig
from ec2launch.helpers.logger import get_logger, setup_logging
from ec2launch.infrastructure.di.container import DIContainer, get_container
from ec2launch.infrastructure.di.services import register_all_services
from ec2launch.providers.aws.strategy import AWSEC2RunOptionsStrategy
from ec2launch.ssh.module import SSHClientFactory


class Application:
    """Configuration, logging and a populated container, created on first use."""

    def __init__(self, config_path: Optional[str] = None,
                 overrides: Optional[Dict[str, Any]] = None,
                 container: Optional[DIContainer] = None):
        self.config_path = config_path
        self.overrides = overrides
        self._container = container
        self._config_manager: Optional[ConfigurationManager] = None
        self._initialized = False
        self.logger = get_logger(__name__)

    def initialize(self) -> "Application":
        """Load configuration, set up logging and register services.

        Raises:
            ConfigurationError: If the configuration is invalid
        """
        if self._initialized:
            return self

        self._config_manager = ConfigurationManager(self.config_path, self.overrides)
        setup_logging(self._config_manager.get_typed(LoggingConfig))

        if self._container is None:
            self._container = get_container()
        register_all_services(self._config_manager.app_config, self._container)

        self._initialized = True
        self.logger.info(f"Application initialized with region {self.config.aws.region}")
        return self

    @property
    def config(self) -> AppConfig:
        self.initialize()
        return self._config_manager.app_config

    @property
    def container(self) -> DIContainer:
        self.initialize()
        return self._container

    def get_resolver(self) -> AWSEC2RunOptionsStrategy:
        return self.container.get(AWSEC2RunOptionsStrategy)

    def get_ssh_client_factory(self) -> SSHClientFactory:
        return self.container.get(SSHClientFactory)


def create_application(config_path: Optional[str] = None,
                       overrides: Optional[Dict[str, Any]] = None) -> Application:
    return Application(config_path, overrides).initialize()
