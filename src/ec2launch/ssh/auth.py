"""
Authentication methods offered to the SSH server.

Each method turns login credentials into ``paramiko.SSHClient.connect``
keyword arguments, or declines when the credentials do not carry what it
needs. The factory tries every configured method that applies.
"""
import io
from typing import Any, Dict, Optional

import paramiko

from ec2launch.infrastructure.exceptions import SSHError
from ec2launch.ssh.credentials import LoginCredentials

# Key types tried in order when loading a private key
PRIVATE_KEY_CLASSES = (paramiko.RSAKey, paramiko.ECDSAKey, paramiko.Ed25519Key)


class AuthMethodFactory:
    """Base class of authentication methods."""

    name = "none"

    def applies_to(self, credentials: LoginCredentials) -> bool:
        raise NotImplementedError

    def connect_kwargs(self, credentials: LoginCredentials) -> Dict[str, Any]:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class PasswordAuthMethod(AuthMethodFactory):
    name = "password"

    def applies_to(self, credentials: LoginCredentials) -> bool:
        return credentials.password is not None

    def connect_kwargs(self, credentials: LoginCredentials) -> Dict[str, Any]:
        return {"password": credentials.password}


class PublicKeyAuthMethod(AuthMethodFactory):
    name = "publickey"

    def applies_to(self, credentials: LoginCredentials) -> bool:
        return credentials.private_key is not None

    def connect_kwargs(self, credentials: LoginCredentials) -> Dict[str, Any]:
        return {"pkey": load_private_key(credentials.private_key)}


class AuthMethods(list):
    """Ordered authentication methods, registered in the container as a unit."""


def default_auth_methods() -> AuthMethods:
    return AuthMethods([PublicKeyAuthMethod(), PasswordAuthMethod()])


def load_private_key(material: str, passphrase: Optional[str] = None) -> paramiko.PKey:
    """Parse PEM or OpenSSH private key material.

    Raises:
        SSHError: If no supported key type can read the material
    """
    errors = []
    for key_class in PRIVATE_KEY_CLASSES:
        try:
            return key_class.from_private_key(io.StringIO(material), password=passphrase)
        except (paramiko.SSHException, ValueError) as e:
            errors.append(f"{key_class.__name__}: {e}")
    raise SSHError("Unsupported or invalid private key", {"errors": errors})
