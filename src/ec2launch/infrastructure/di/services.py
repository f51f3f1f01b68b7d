"""Service registration for the whole application."""
from typing import Optional

from ec2launch.config.schemas import AppConfig
from ec2launch.infrastructure.di.container import DIContainer, get_container


def register_all_services(config: AppConfig, container: Optional[DIContainer] = None) -> DIContainer:
    """
    Register all services in the dependency injection container.

    Args:
        config: Validated application configuration
        container: Optional container instance, the global container when None

    Returns:
        Configured container
    """
    # Imported here so the container package does not depend on the providers
    from ec2launch.providers.aws.registration import register_aws_services
    from ec2launch.ssh.module import register_ssh_services

    if container is None:
        container = get_container()

    register_aws_services(container, config)
    register_ssh_services(container, config.ssh)
    return container
