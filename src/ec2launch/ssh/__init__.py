"""SSH access to launched instances."""

from .auth import AuthMethodFactory, AuthMethods, PasswordAuthMethod, PublicKeyAuthMethod, default_auth_methods
from .client import ExecResponse, SSHClient
from .credentials import HostAndPort, LoginCredentials
from .module import SSHClientFactory, register_ssh_services

__all__ = [
    "AuthMethodFactory",
    "AuthMethods",
    "ExecResponse",
    "HostAndPort",
    "LoginCredentials",
    "PasswordAuthMethod",
    "PublicKeyAuthMethod",
    "SSHClient",
    "SSHClientFactory",
    "default_auth_methods",
    "register_ssh_services",
]
