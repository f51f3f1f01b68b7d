"""Where and how to log in to a launched instance."""
from typing import Optional

from pydantic import field_validator, model_validator

from ec2launch.domain.value_objects import KeyPair, ValueObject


class HostAndPort(ValueObject):
    host: str
    port: int = 22

    @field_validator("host")
    @classmethod
    def validate_host(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("host must not be empty")
        return v.strip()

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        if not 0 < v < 65536:
            raise ValueError(f"Invalid port: {v}")
        return v

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


class LoginCredentials(ValueObject):
    """User plus a password and/or a private key."""

    user: str
    password: Optional[str] = None
    private_key: Optional[str] = None

    @model_validator(mode="after")
    def validate_secret(self) -> "LoginCredentials":
        if self.password is None and self.private_key is None:
            raise ValueError("Login credentials need a password or a private key")
        return self

    @classmethod
    def from_key_pair(cls, user: str, pair: KeyPair) -> "LoginCredentials":
        """Credentials for logging in with the private key of a key pair."""
        if pair.key_material is None:
            raise ValueError(f"Key pair {pair.key_name} carries no private key material")
        return cls(user=user, private_key=pair.key_material)

    def __repr__(self) -> str:
        return (f"LoginCredentials(user={self.user!r}, has_password={self.password is not None}, "
                f"has_private_key={self.private_key is not None})")
