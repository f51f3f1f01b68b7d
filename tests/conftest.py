import os
from unittest.mock import Mock, patch

import boto3
import pytest
from moto import mock_aws

from ec2launch.config.manager import reset_config_manager
from ec2launch.config.schemas import AWSConfig
from ec2launch.domain.naming import GroupNamingConvention
from ec2launch.domain.template_options import AWSEC2TemplateOptions
from ec2launch.domain.value_objects import Hardware, KeyPair, Template
from ec2launch.infrastructure.aws.aws_client import AWSClient
from ec2launch.infrastructure.di.container import reset_container
from ec2launch.providers.aws.functions import CreateUniqueKeyPair, ImportOrReturnExistingKeyPair
from ec2launch.providers.aws.registries import CredentialsStore, PlacementGroupMap, SecurityGroupMap
from ec2launch.providers.aws.strategy import AWSEC2RunOptionsStrategy


@pytest.fixture(autouse=True)
def aws_credentials(monkeypatch):
    """Mocked AWS Credentials for moto."""
    monkeypatch.setenv('AWS_ACCESS_KEY_ID', 'testing')
    monkeypatch.setenv('AWS_SECRET_ACCESS_KEY', 'testing')
    monkeypatch.setenv('AWS_SECURITY_TOKEN', 'testing')
    monkeypatch.setenv('AWS_SESSION_TOKEN', 'testing')
    monkeypatch.setenv('AWS_DEFAULT_REGION', 'us-east-1')
    for name in list(os.environ):
        if name.startswith('EC2LAUNCH_'):
            monkeypatch.delenv(name)


@pytest.fixture(autouse=True)
def clean_globals():
    """Start every test with an empty global container and config manager."""
    reset_container()
    reset_config_manager()
    yield
    reset_container()
    reset_config_manager()


@pytest.fixture
def aws_client():
    """AWS client backed by moto."""
    with mock_aws():
        yield AWSClient(AWSConfig(region='us-east-1'))


@pytest.fixture
def ec2(aws_client):
    """Raw EC2 client sharing the moto backend of ``aws_client``."""
    return boto3.client('ec2', region_name='us-east-1')


@pytest.fixture
def placement_groups(aws_client):
    """Stub the placement group calls of the moto-backed EC2 client, which moto does not implement.

    Yields the client; its ``create_placement_group`` and
    ``describe_placement_groups`` are mocks reporting the group available.
    """
    client = aws_client.ec2('us-east-1')
    with patch.object(client, 'create_placement_group', return_value={}), \
            patch.object(client, 'describe_placement_groups',
                         return_value={'PlacementGroups': [{'State': 'available'}]}):
        yield client


@pytest.fixture
def collaborators():
    """Mocked collaborators of the launch option strategies."""
    make_key_pair = Mock(spec=CreateUniqueKeyPair)
    make_key_pair.side_effect = lambda key: KeyPair(
        region=key.region, key_name=f"jclouds#{key.name}-0a1b2c3d", key_material="GENERATED PRIVATE KEY"
    )
    import_key_pair = Mock(spec=ImportOrReturnExistingKeyPair)
    import_key_pair.side_effect = lambda request: KeyPair(
        region=request.region, key_name=f"jclouds#{request.name}", fingerprint="1f:51:ae"
    )
    placement_loader = Mock(side_effect=lambda key: key.name)
    security_group_loader = Mock(side_effect=lambda key: key.name)
    return {
        'make_key_pair': make_key_pair,
        'import_key_pair': import_key_pair,
        'credentials_store': CredentialsStore(),
        'placement_loader': placement_loader,
        'placement_group_map': PlacementGroupMap(placement_loader),
        'security_group_loader': security_group_loader,
        'security_group_map': SecurityGroupMap(security_group_loader),
        'logger': Mock(),
    }


@pytest.fixture
def strategy(collaborators):
    """AWS launch option strategy wired to mocked collaborators."""
    return AWSEC2RunOptionsStrategy(
        make_key_pair=collaborators['make_key_pair'],
        credentials_store=collaborators['credentials_store'],
        security_group_map=collaborators['security_group_map'],
        naming=GroupNamingConvention(),
        placement_group_map=collaborators['placement_group_map'],
        import_key_pair=collaborators['import_key_pair'],
        logger=collaborators['logger'],
    )


def make_template(hardware_id='c4.large', **options):
    return Template(hardware=Hardware(id=hardware_id), options=AWSEC2TemplateOptions(**options))


@pytest.fixture
def template_factory():
    """Build templates with AWS options; keyword arguments become template options."""
    return make_template
