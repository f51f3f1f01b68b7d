"""Tests for the SSH client factory and its container wiring."""
import io
import socket
from unittest.mock import MagicMock, Mock

import paramiko
import pytest
from pydantic import ValidationError as PydanticValidationError

from ec2launch.config.schemas import SSHConfig
from ec2launch.domain.value_objects import KeyPair
from ec2launch.infrastructure.di.container import DIContainer
from ec2launch.infrastructure.exceptions import SSHError
from ec2launch.ssh import (
    AuthMethodFactory,
    AuthMethods,
    HostAndPort,
    LoginCredentials,
    PasswordAuthMethod,
    PublicKeyAuthMethod,
    SSHClient,
    SSHClientFactory,
    register_ssh_services,
)
from ec2launch.ssh.auth import load_private_key


@pytest.fixture(scope="module")
def private_key_pem():
    key = paramiko.RSAKey.generate(2048)
    buffer = io.StringIO()
    key.write_private_key(buffer)
    return buffer.getvalue()


@pytest.fixture
def paramiko_client():
    return MagicMock(spec=paramiko.SSHClient)


class StubAuthMethod(AuthMethodFactory):
    name = "stub"

    def applies_to(self, credentials):
        return True

    def connect_kwargs(self, credentials):
        return {"gss_auth": True}


@pytest.mark.unit
class TestSSHModule:
    """Container wiring of the SSH client factory."""

    def test_factory_creates_clients(self):
        container = DIContainer()
        register_ssh_services(container)

        factory = container.get(SSHClientFactory)
        client = factory.create(HostAndPort(host="localhost", port=22),
                                LoginCredentials(user="username", password="password"))

        assert isinstance(client, SSHClient)
        assert client.host_and_port == HostAndPort(host="localhost")
        assert client.config == SSHConfig()

    def test_configuration_binding(self):
        container = DIContainer()
        container.register_instance(SSHConfig, SSHConfig(banner_timeout=42))
        register_ssh_services(container)

        assert container.get(SSHClientFactory).config.banner_timeout == 42

    def test_auth_methods_binding(self):
        container = DIContainer()
        register_ssh_services(container)
        container.register_instance(AuthMethods, AuthMethods([StubAuthMethod()]))

        auth_methods = container.get(SSHClientFactory).auth_methods

        assert len(auth_methods) == 1
        assert isinstance(auth_methods[0], StubAuthMethod)

    def test_default_auth_methods(self):
        factory = SSHClientFactory()

        assert [type(m) for m in factory.auth_methods] == [PublicKeyAuthMethod, PasswordAuthMethod]


@pytest.mark.unit
class TestSSHClient:
    """Connection handling on top of paramiko."""

    def make_client(self, paramiko_client, credentials=None, config=None, auth_methods=None):
        factory = SSHClientFactory(config=config or SSHConfig(connect_timeout=5),
                                   auth_methods=auth_methods,
                                   client_factory=lambda: paramiko_client)
        return factory.create(HostAndPort(host="10.0.0.5", port=2222),
                              credentials or LoginCredentials(user="ec2-user", password="secret"))

    def test_connect_passes_config_and_password(self, paramiko_client):
        client = self.make_client(paramiko_client)

        client.connect()

        paramiko_client.connect.assert_called_once_with(
            hostname="10.0.0.5", port=2222, username="ec2-user", timeout=5,
            banner_timeout=60.0, auth_timeout=60.0, look_for_keys=False, allow_agent=False,
            password="secret",
        )
        policy = paramiko_client.set_missing_host_key_policy.call_args[0][0]
        assert isinstance(policy, paramiko.AutoAddPolicy)

    def test_connect_with_private_key(self, paramiko_client, private_key_pem):
        client = self.make_client(paramiko_client, LoginCredentials(user="root", private_key=private_key_pem),
                                  config=SSHConfig(host_key_policy="reject"))

        client.connect()

        kwargs = paramiko_client.connect.call_args.kwargs
        assert isinstance(kwargs["pkey"], paramiko.RSAKey)
        assert "password" not in kwargs
        assert isinstance(paramiko_client.set_missing_host_key_policy.call_args[0][0], paramiko.RejectPolicy)

    def test_no_applicable_auth_method(self, paramiko_client):
        client = self.make_client(paramiko_client, auth_methods=AuthMethods([PublicKeyAuthMethod()]))

        with pytest.raises(SSHError):
            client.connect()
        paramiko_client.connect.assert_not_called()

    def test_null_auth_methods_are_skipped(self, paramiko_client):
        client = self.make_client(paramiko_client, auth_methods=AuthMethods([None, PasswordAuthMethod()]))

        client.connect()

        assert paramiko_client.connect.call_args.kwargs["password"] == "secret"

    @pytest.mark.parametrize("error", [
        paramiko.AuthenticationException("denied"),
        paramiko.SSHException("banner"),
        socket.timeout("timed out"),
        ConnectionRefusedError("refused"),
    ])
    def test_connect_failures_become_ssh_errors(self, paramiko_client, error):
        paramiko_client.connect.side_effect = error
        client = self.make_client(paramiko_client)

        with pytest.raises(SSHError):
            client.connect()
        paramiko_client.close.assert_called_once()
        assert not client.is_connected

    def test_exec(self, paramiko_client):
        stdout = Mock()
        stdout.read.return_value = b"up 3 days\n"
        stdout.channel.recv_exit_status.return_value = 0
        stderr = Mock()
        stderr.read.return_value = b""
        paramiko_client.exec_command.return_value = (Mock(), stdout, stderr)
        client = self.make_client(paramiko_client)

        with client:
            response = client.exec("uptime", timeout=10)

        assert response.output == "up 3 days\n"
        assert response.exit_status == 0
        paramiko_client.exec_command.assert_called_once_with("uptime", timeout=10)
        paramiko_client.close.assert_called_once()

    def test_exec_requires_connection(self, paramiko_client):
        with pytest.raises(SSHError):
            self.make_client(paramiko_client).exec("uptime")


@pytest.mark.unit
class TestCredentials:

    def test_credentials_need_a_secret(self):
        with pytest.raises(PydanticValidationError):
            LoginCredentials(user="root")

    def test_from_key_pair(self):
        pair = KeyPair(region="us-east-1", key_name="jclouds#web", key_material="PEM")

        assert LoginCredentials.from_key_pair("ec2-user", pair).private_key == "PEM"
        with pytest.raises(ValueError):
            LoginCredentials.from_key_pair("ec2-user", pair.with_key_material(None))

    def test_repr_hides_secrets(self):
        assert "secret" not in repr(LoginCredentials(user="root", password="secret"))

    def test_invalid_port(self):
        with pytest.raises(PydanticValidationError):
            HostAndPort(host="localhost", port=70000)

    def test_load_private_key_rejects_garbage(self):
        with pytest.raises(SSHError):
            load_private_key("not a key")
