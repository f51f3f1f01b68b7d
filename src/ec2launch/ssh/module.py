"""SSH client factory and its container registrations."""
from typing import Callable, Optional

import paramiko

from ec2launch.config.schemas import SSHConfig
from ec2launch.helpers.logger import get_logger
from ec2launch.infrastructure.di.container import DIContainer
from ec2launch.infrastructure.di.decorators import injectable
from ec2launch.ssh.auth import AuthMethods, default_auth_methods
from ec2launch.ssh.client import SSHClient
from ec2launch.ssh.credentials import HostAndPort, LoginCredentials

logger = get_logger(__name__)


@injectable
class SSHClientFactory:
    """
    Creates SSH clients sharing one configuration and set of auth methods.

    Both are taken from the container when registered, so an application
    can replace the defaults by registering its own ``SSHConfig`` or
    ``AuthMethods``.
    """

    def __init__(self, config: Optional[SSHConfig] = None, auth_methods: Optional[AuthMethods] = None,
                 client_factory: Callable[[], paramiko.SSHClient] = paramiko.SSHClient):
        self.config = config or SSHConfig()
        self.auth_methods = auth_methods if auth_methods is not None else default_auth_methods()
        self._client_factory = client_factory

    def create(self, host_and_port: HostAndPort, credentials: LoginCredentials) -> SSHClient:
        """Return an unconnected client; ``connect`` or a ``with`` block opens it."""
        return SSHClient(
            host_and_port,
            credentials,
            config=self.config,
            auth_methods=self.auth_methods,
            client_factory=self._client_factory,
        )


def register_ssh_services(container: DIContainer, config: Optional[SSHConfig] = None) -> None:
    """Register the SSH client factory with default config and auth methods.

    Config and auth methods that are already registered are kept.
    """
    if not container.has(SSHConfig):
        container.register_instance(SSHConfig, config or SSHConfig())
    if not container.has(AuthMethods):
        container.register_singleton(AuthMethods, lambda c: default_auth_methods())
    container.register_singleton(SSHClientFactory)
    logger.debug("Registered SSH services")
