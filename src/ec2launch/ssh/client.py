"""
paramiko-backed SSH client for launched instances.

    client = factory.create(HostAndPort(host="10.0.0.5"), credentials)
    with client:
        response = client.exec("uptime")
"""
import socket
from typing import Any, Callable, Dict, List, NamedTuple, Optional

import paramiko

from ec2launch.config.schemas import SSHConfig
from ec2launch.helpers.logger import get_logger
from ec2launch.infrastructure.exceptions import SSHError
from ec2launch.ssh.auth import AuthMethodFactory
from ec2launch.ssh.credentials import HostAndPort, LoginCredentials

HOST_KEY_POLICIES = {
    "auto_add": paramiko.AutoAddPolicy,
    "reject": paramiko.RejectPolicy,
    "warning": paramiko.WarningPolicy,
}


class ExecResponse(NamedTuple):
    output: str
    error: str
    exit_status: int


class SSHClient:
    """Connection to one host with one set of credentials."""

    def __init__(self, host_and_port: HostAndPort, credentials: LoginCredentials,
                 config: SSHConfig, auth_methods: List[AuthMethodFactory],
                 client_factory: Callable[[], paramiko.SSHClient] = paramiko.SSHClient):
        self.host_and_port = host_and_port
        self.credentials = credentials
        self.config = config
        self.auth_methods = auth_methods
        self._client_factory = client_factory
        self._client: Optional[paramiko.SSHClient] = None
        self._logger = get_logger(__name__)

    @property
    def is_connected(self) -> bool:
        if self._client is None:
            return False
        transport = self._client.get_transport()
        return transport is not None and transport.is_active()

    def connect(self) -> None:
        """Open the connection.

        Raises:
            SSHError: If no authentication method applies, or connecting fails
        """
        kwargs = self._connect_kwargs()
        client = self._client_factory()
        client.set_missing_host_key_policy(HOST_KEY_POLICIES[self.config.host_key_policy]())
        self._logger.debug(f"SSH: connecting to {self.host_and_port} ({self.credentials.user})")
        try:
            client.connect(**kwargs)
        except paramiko.AuthenticationException as e:
            client.close()
            raise SSHError(f"Authentication failed for {self.credentials.user}@{self.host_and_port}",
                           {"host": str(self.host_and_port), "error": str(e)}) from e
        except (paramiko.SSHException, socket.error) as e:
            client.close()
            raise SSHError(f"Could not connect to {self.host_and_port}: {e}",
                           {"host": str(self.host_and_port), "error": str(e)}) from e
        self._client = client
        self._logger.debug(f"SSH: connected to {self.host_and_port}")

    def _connect_kwargs(self) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {
            "hostname": self.host_and_port.host,
            "port": self.host_and_port.port,
            "username": self.credentials.user,
            "timeout": self.config.connect_timeout,
            "banner_timeout": self.config.banner_timeout,
            "auth_timeout": self.config.auth_timeout,
            "look_for_keys": self.config.look_for_keys,
            "allow_agent": self.config.allow_agent,
        }
        applicable = [m for m in self.auth_methods if m is not None and m.applies_to(self.credentials)]
        if not applicable:
            raise SSHError(f"No authentication method applies to {self.credentials!r}",
                           {"methods": [repr(m) for m in self.auth_methods]})
        for method in applicable:
            kwargs.update(method.connect_kwargs(self.credentials))
        return kwargs

    def exec(self, command: str, timeout: Optional[float] = None) -> ExecResponse:
        """Run ``command`` and wait for it to finish."""
        if self._client is None:
            raise SSHError(f"Not connected to {self.host_and_port}")
        self._logger.debug(f"SSH {self.host_and_port}: {command}")
        try:
            _, stdout, stderr = self._client.exec_command(command, timeout=timeout)
            exit_status = stdout.channel.recv_exit_status()
            return ExecResponse(
                output=stdout.read().decode("utf-8", errors="replace"),
                error=stderr.read().decode("utf-8", errors="replace"),
                exit_status=exit_status,
            )
        except (paramiko.SSHException, socket.timeout) as e:
            raise SSHError(f"Command failed on {self.host_and_port}: {e}",
                           {"command": command}) from e

    def disconnect(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> "SSHClient":
        if self._client is None:
            self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.disconnect()

    def __repr__(self) -> str:
        return f"SSHClient({self.credentials.user}@{self.host_and_port})"
