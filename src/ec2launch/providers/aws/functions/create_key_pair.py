"""Unique key pair creation."""
from typing import Any, Optional

from botocore.exceptions import ClientError

from ec2launch.config.schemas import KeyPairConfig
from ec2launch.domain.naming import GroupNamingConvention
from ec2launch.domain.value_objects import KeyPair, RegionAndName
from ec2launch.helpers.logger import get_logger
from ec2launch.infrastructure.aws.aws_client import AWSClient, convert_client_error, error_code
from ec2launch.infrastructure.di.decorators import injectable
from ec2launch.infrastructure.exceptions import KeyPairError


@injectable
class CreateUniqueKeyPair:
    """Create a new key pair with a unique name for a group and keep its private key."""

    def __init__(self, aws_client: AWSClient, naming: Optional[GroupNamingConvention] = None,
                 config: Optional[KeyPairConfig] = None, logger: Any = None):
        self.aws_client = aws_client
        self.naming = naming or GroupNamingConvention()
        self.config = config or KeyPairConfig()
        self._logger = logger or get_logger(__name__)

    def __call__(self, region_and_group: RegionAndName) -> KeyPair:
        region, group = region_and_group.region, region_and_group.name
        ec2 = self.aws_client.ec2(region)
        for attempt in range(1, self.config.max_create_attempts + 1):
            key_name = self.naming.unique_name_for_group(group)
            try:
                response = ec2.create_key_pair(KeyName=key_name)
            except ClientError as e:
                if error_code(e) == "InvalidKeyPair.Duplicate":
                    self._logger.debug(f"Key pair {key_name} exists, attempt {attempt}")
                    continue
                raise convert_client_error(e, f"create key pair {key_name}", KeyPairError)
            self._logger.info(f"Created key pair {key_name} in {region}")
            return KeyPair(
                region=region,
                key_name=response["KeyName"],
                fingerprint=response.get("KeyFingerprint"),
                key_material=response.get("KeyMaterial"),
            )
        raise KeyPairError(
            f"Could not find an unused key pair name for group {group} in {region} "
            f"after {self.config.max_create_attempts} attempts"
        )
