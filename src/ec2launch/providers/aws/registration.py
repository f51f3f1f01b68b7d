"""AWS service registrations for dependency injection."""
from ec2launch.config.schemas import AppConfig, AWSConfig, KeyPairConfig, NamingConfig, PlacementConfig
from ec2launch.domain.naming import GroupNamingConvention
from ec2launch.helpers.logger import get_logger
from ec2launch.infrastructure.aws.aws_client import AWSClient
from ec2launch.infrastructure.di.container import DIContainer
from ec2launch.providers.aws.functions import (
    CreatePlacementGroupIfNeeded,
    CreateSecurityGroupIfNeeded,
    CreateUniqueKeyPair,
    ImportOrReturnExistingKeyPair,
)
from ec2launch.providers.aws.registries import CredentialsStore, PlacementGroupMap, SecurityGroupMap
from ec2launch.providers.aws.strategy import AWSEC2RunOptionsStrategy, EC2RunOptionsStrategy

logger = get_logger(__name__)


def register_aws_services(container: DIContainer, config: AppConfig) -> None:
    """Register the EC2 collaborators, the shared registries and the launch option strategies."""

    container.register_instance(AppConfig, config)
    container.register_instance(AWSConfig, config.aws)
    container.register_instance(NamingConfig, config.naming)
    container.register_instance(PlacementConfig, config.placement)
    container.register_instance(KeyPairConfig, config.key_pair)

    container.register_singleton(AWSClient, lambda c: AWSClient(config=c.get(AWSConfig)))
    container.register_singleton(
        GroupNamingConvention,
        lambda c: GroupNamingConvention(
            prefix=c.get(NamingConfig).prefix,
            delimiter=c.get(NamingConfig).delimiter,
        ),
    )

    # Side-effecting EC2 operations
    container.register_singleton(CreatePlacementGroupIfNeeded)
    container.register_singleton(CreateSecurityGroupIfNeeded)
    container.register_singleton(CreateUniqueKeyPair)
    container.register_singleton(ImportOrReturnExistingKeyPair)

    # Registries shared by every launch in the process
    container.register_singleton(CredentialsStore)
    container.register_singleton(
        PlacementGroupMap,
        lambda c: PlacementGroupMap(loader=c.get(CreatePlacementGroupIfNeeded)),
    )
    container.register_singleton(
        SecurityGroupMap,
        lambda c: SecurityGroupMap(loader=c.get(CreateSecurityGroupIfNeeded)),
    )

    container.register_singleton(EC2RunOptionsStrategy)
    container.register_singleton(AWSEC2RunOptionsStrategy)

    logger.debug(f"Registered AWS services for default region {config.aws.region}")
