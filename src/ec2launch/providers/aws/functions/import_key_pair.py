"""Key pair import."""
from typing import Any, Optional

from botocore.exceptions import ClientError

from ec2launch.domain.naming import GroupNamingConvention
from ec2launch.domain.value_objects import KeyPair, RegionNameAndPublicKeyMaterial
from ec2launch.helpers.logger import get_logger
from ec2launch.infrastructure.aws.aws_client import AWSClient, convert_client_error, error_code
from ec2launch.infrastructure.di.decorators import injectable
from ec2launch.infrastructure.exceptions import KeyPairError


@injectable
class ImportOrReturnExistingKeyPair:
    """
    Import a public key as the shared key pair of a group.

    If the group's key pair already exists it is returned as is; the imported
    pair never carries private key material.
    """

    def __init__(self, aws_client: AWSClient, naming: Optional[GroupNamingConvention] = None,
                 logger: Any = None):
        self.aws_client = aws_client
        self.naming = naming or GroupNamingConvention()
        self._logger = logger or get_logger(__name__)

    def __call__(self, request: RegionNameAndPublicKeyMaterial) -> KeyPair:
        key_name = self.naming.shared_name_for_group(request.name)
        ec2 = self.aws_client.ec2(request.region)
        try:
            response = ec2.import_key_pair(
                KeyName=key_name,
                PublicKeyMaterial=request.public_key_material.encode("utf-8"),
            )
            self._logger.info(f"Imported key pair {key_name} in {request.region}")
            return KeyPair(region=request.region, key_name=response["KeyName"],
                           fingerprint=response.get("KeyFingerprint"))
        except ClientError as e:
            if error_code(e) != "InvalidKeyPair.Duplicate":
                raise convert_client_error(e, f"import key pair {key_name}", KeyPairError)

        self._logger.debug(f"Key pair {key_name} already exists in {request.region}, reusing it")
        try:
            existing = ec2.describe_key_pairs(KeyNames=[key_name])["KeyPairs"][0]
        except ClientError as e:
            raise convert_client_error(e, f"describe key pair {key_name}", KeyPairError)
        return KeyPair(region=request.region, key_name=existing["KeyName"],
                       fingerprint=existing.get("KeyFingerprint"))
