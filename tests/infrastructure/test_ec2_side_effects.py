"""Tests for the EC2 side effects performed during resolution, against moto."""
from unittest.mock import Mock

import paramiko
import pytest
from botocore.exceptions import ClientError

from ec2launch.config.schemas import KeyPairConfig, PlacementConfig
from ec2launch.domain.naming import GroupNamingConvention
from ec2launch.domain.value_objects import RegionAndName, RegionNameAndIngressRules, RegionNameAndPublicKeyMaterial
from ec2launch.infrastructure.aws.aws_client import AWSClient
from ec2launch.infrastructure.exceptions import (
    KeyPairError,
    PlacementGroupError,
    PlacementGroupUnavailableError,
    RateLimitError,
)
from ec2launch.providers.aws.functions import (
    CreatePlacementGroupIfNeeded,
    CreateSecurityGroupIfNeeded,
    CreateUniqueKeyPair,
    ImportOrReturnExistingKeyPair,
)

REGION = "us-east-1"


@pytest.fixture(scope="module")
def public_key():
    key = paramiko.RSAKey.generate(2048)
    return f"{key.get_name()} {key.get_base64()} test@ec2launch"


def client_error(code):
    return ClientError({"Error": {"Code": code, "Message": code}}, "Operation")


def mocked_aws_client(ec2):
    aws_client = Mock(spec=AWSClient)
    aws_client.ec2.return_value = ec2
    return aws_client


@pytest.mark.aws
class TestCreatePlacementGroupIfNeeded:

    def test_creates_group(self, aws_client, placement_groups):
        create = CreatePlacementGroupIfNeeded(aws_client, PlacementConfig(strategy="spread"), sleep=Mock())

        assert create(RegionAndName(region=REGION, name="jclouds#web#us-east-1")) == "jclouds#web#us-east-1"

        placement_groups.create_placement_group.assert_called_once_with(
            GroupName="jclouds#web#us-east-1", Strategy="spread"
        )
        placement_groups.describe_placement_groups.assert_called_once_with(GroupNames=["jclouds#web#us-east-1"])

    def test_existing_group_counts_as_created(self):
        ec2 = Mock()
        ec2.create_placement_group.side_effect = client_error("InvalidPlacementGroup.Duplicate")
        ec2.describe_placement_groups.return_value = {"PlacementGroups": [{"State": "available"}]}
        create = CreatePlacementGroupIfNeeded(mocked_aws_client(ec2))

        assert create(RegionAndName(region=REGION, name="pg")) == "pg"

    def test_waits_until_available(self):
        ec2 = Mock()
        ec2.describe_placement_groups.side_effect = [
            {"PlacementGroups": [{"State": "pending"}]},
            {"PlacementGroups": [{"State": "available"}]},
        ]
        sleep = Mock()
        create = CreatePlacementGroupIfNeeded(mocked_aws_client(ec2), PlacementConfig(wait_interval_seconds=3),
                                              sleep=sleep)

        create(RegionAndName(region=REGION, name="pg"))

        sleep.assert_called_once_with(3)
        ec2.create_placement_group.assert_called_once_with(GroupName="pg", Strategy="cluster")

    def test_gives_up_after_timeout(self):
        ec2 = Mock()
        ec2.describe_placement_groups.return_value = {"PlacementGroups": [{"State": "pending"}]}
        create = CreatePlacementGroupIfNeeded(mocked_aws_client(ec2), PlacementConfig(wait_timeout_seconds=0.01),
                                              sleep=Mock())

        with pytest.raises(PlacementGroupUnavailableError):
            create(RegionAndName(region=REGION, name="pg"))

    def test_other_errors_are_converted(self):
        ec2 = Mock()
        ec2.create_placement_group.side_effect = client_error("InvalidParameterValue")
        create = CreatePlacementGroupIfNeeded(mocked_aws_client(ec2))

        with pytest.raises(PlacementGroupError) as exc_info:
            create(RegionAndName(region=REGION, name="pg"))
        assert exc_info.value.error_code == "InvalidParameterValue"

    def test_throttling_is_a_rate_limit_error(self):
        ec2 = Mock()
        ec2.create_placement_group.side_effect = client_error("RequestLimitExceeded")
        create = CreatePlacementGroupIfNeeded(mocked_aws_client(ec2))

        with pytest.raises(RateLimitError):
            create(RegionAndName(region=REGION, name="pg"))


@pytest.mark.aws
class TestImportOrReturnExistingKeyPair:

    def test_imports_under_the_group_name(self, aws_client, ec2, public_key):
        import_key_pair = ImportOrReturnExistingKeyPair(aws_client)

        pair = import_key_pair(RegionNameAndPublicKeyMaterial(region=REGION, name="web",
                                                              public_key_material=public_key))

        assert pair.key_name == "jclouds#web"
        assert pair.key_material is None
        assert ec2.describe_key_pairs(KeyNames=["jclouds#web"])["KeyPairs"][0]["KeyName"] == "jclouds#web"

    def test_existing_key_pair_is_returned(self, aws_client, ec2, public_key):
        ec2.import_key_pair(KeyName="jclouds#web", PublicKeyMaterial=public_key.encode())
        import_key_pair = ImportOrReturnExistingKeyPair(aws_client)

        pair = import_key_pair(RegionNameAndPublicKeyMaterial(region=REGION, name="web",
                                                              public_key_material=public_key))

        assert pair.key_name == "jclouds#web"
        assert len(ec2.describe_key_pairs()["KeyPairs"]) == 1

    def test_invalid_key_material(self):
        ec2 = Mock()
        ec2.import_key_pair.side_effect = client_error("InvalidKey.Format")
        import_key_pair = ImportOrReturnExistingKeyPair(mocked_aws_client(ec2))

        with pytest.raises(KeyPairError) as exc_info:
            import_key_pair(RegionNameAndPublicKeyMaterial(region=REGION, name="web",
                                                           public_key_material="not a key"))
        assert exc_info.value.error_code == "InvalidKey.Format"
        ec2.describe_key_pairs.assert_not_called()


@pytest.mark.aws
class TestCreateUniqueKeyPair:

    def test_creates_a_key_pair_with_private_key(self, aws_client, ec2):
        pair = CreateUniqueKeyPair(aws_client)(RegionAndName(region=REGION, name="web"))

        assert pair.key_name.startswith("jclouds#web-")
        assert pair.key_material
        assert ec2.describe_key_pairs(KeyNames=[pair.key_name])["KeyPairs"]

    def test_retries_taken_names(self, aws_client, ec2):
        ec2.create_key_pair(KeyName="jclouds#web-1")
        naming = Mock(spec=GroupNamingConvention)
        naming.unique_name_for_group.side_effect = ["jclouds#web-1", "jclouds#web-1", "jclouds#web-2"]

        pair = CreateUniqueKeyPair(aws_client, naming=naming)(RegionAndName(region=REGION, name="web"))

        assert pair.key_name == "jclouds#web-2"
        assert naming.unique_name_for_group.call_count == 3

    def test_gives_up_after_max_attempts(self, aws_client, ec2):
        ec2.create_key_pair(KeyName="jclouds#web-1")
        naming = Mock(spec=GroupNamingConvention)
        naming.unique_name_for_group.return_value = "jclouds#web-1"
        create = CreateUniqueKeyPair(aws_client, naming=naming, config=KeyPairConfig(max_create_attempts=2))

        with pytest.raises(KeyPairError):
            create(RegionAndName(region=REGION, name="web"))
        assert naming.unique_name_for_group.call_count == 2


@pytest.mark.aws
class TestCreateSecurityGroupIfNeeded:

    @staticmethod
    def permissions(ec2, name):
        return ec2.describe_security_groups(GroupNames=[name])["SecurityGroups"][0]["IpPermissions"]

    def test_creates_group_with_ports_and_self_access(self, aws_client, ec2):
        create = CreateSecurityGroupIfNeeded(aws_client)

        name = create(RegionNameAndIngressRules(region=REGION, name="jclouds#web", ports=(22, 8080),
                                                authorize_self=True))

        assert name == "jclouds#web"
        permissions = self.permissions(ec2, "jclouds#web")
        ports = sorted(p["FromPort"] for p in permissions if p["IpProtocol"] == "tcp")
        assert ports == [22, 8080]
        self_rules = [p for p in permissions if p["IpProtocol"] == "-1"]
        assert len(self_rules) == 1
        assert self_rules[0]["UserIdGroupPairs"]

    def test_existing_group_and_rules_are_tolerated(self, aws_client, ec2):
        create = CreateSecurityGroupIfNeeded(aws_client)
        request = RegionNameAndIngressRules(region=REGION, name="jclouds#web", ports=(22,))

        create(request)
        assert create(request) == "jclouds#web"

        assert len(ec2.describe_security_groups(GroupNames=["jclouds#web"])["SecurityGroups"]) == 1
        assert [p["FromPort"] for p in self.permissions(ec2, "jclouds#web")] == [22]
