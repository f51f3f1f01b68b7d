"""Tests for application bootstrap."""
import logging

import pytest

from ec2launch.bootstrap import Application, create_application
from ec2launch.domain.exceptions import ConfigurationError
from ec2launch.infrastructure.di.container import get_container
from ec2launch.providers.aws.strategy import AWSEC2RunOptionsStrategy
from ec2launch.ssh import SSHClientFactory


@pytest.mark.unit
class TestApplication:

    @pytest.fixture(autouse=True)
    def restore_root_logger(self):
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        yield
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_initialize_wires_the_global_container(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            "aws:\n  region: eu-north-1\n"
            "placement:\n  hardware_with_placement_groups: [m5.large]\n"
            "ssh:\n  banner_timeout: 30\n"
        )

        app = create_application(str(config_file), {"logging.level": "WARNING"})

        assert app.container is get_container()
        assert app.config.aws.region == "eu-north-1"
        assert app.get_resolver().hardware_with_placement_groups == frozenset({"m5.large"})
        assert isinstance(app.get_resolver(), AWSEC2RunOptionsStrategy)
        assert app.get_ssh_client_factory().config.banner_timeout == 30
        assert isinstance(app.get_ssh_client_factory(), SSHClientFactory)
        assert logging.getLogger().level == logging.WARNING

    def test_initialize_is_idempotent(self):
        app = Application()

        assert app.initialize() is app.initialize()
        assert app.get_resolver() is app.get_resolver()

    def test_invalid_configuration(self):
        with pytest.raises(ConfigurationError):
            create_application(overrides={"aws.retry_mode": "sometimes"})
