"""Configuration schemas."""
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

# Instance types known to accept cluster placement groups
DEFAULT_HARDWARE_WITH_PLACEMENT_GROUPS: List[str] = [
    "c4.large", "c4.xlarge", "c4.2xlarge", "c4.4xlarge", "c4.8xlarge",
    "c3.large", "c3.xlarge", "c3.2xlarge", "c3.4xlarge", "c3.8xlarge",
    "cc2.8xlarge", "cg1.4xlarge", "g2.2xlarge", "cr1.8xlarge",
    "r3.large", "r3.xlarge", "r3.2xlarge", "r3.4xlarge", "r3.8xlarge",
    "hi1.4xlarge", "hs1.8xlarge", "i2.xlarge", "i2.2xlarge", "i2.4xlarge", "i2.8xlarge",
]


class AWSConfig(BaseModel):
    """AWS client configuration."""

    region: str = Field("us-east-1", description="Default AWS region")
    profile: Optional[str] = Field(None, description="Named AWS profile")
    endpoint_url: Optional[str] = Field(None, description="Custom EC2 endpoint")
    max_retry_attempts: int = Field(3, description="botocore retry attempts")
    retry_mode: Literal["legacy", "standard", "adaptive"] = Field("standard", description="botocore retry mode")
    connect_timeout: int = Field(10, description="Connection timeout in seconds")
    read_timeout: int = Field(60, description="Read timeout in seconds")

    @field_validator("max_retry_attempts")
    @classmethod
    def validate_retry_attempts(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Retry attempts cannot be negative")
        return v

    @field_validator("connect_timeout", "read_timeout")
    @classmethod
    def validate_timeout(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("Timeouts must be positive")
        return v


class NamingConfig(BaseModel):
    """Names of resources created for a logical group."""

    prefix: str = Field("jclouds", description="Prefix of shared resource names")
    delimiter: str = Field("#", description="Separator between name parts")

    @field_validator("prefix")
    @classmethod
    def validate_prefix(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Naming prefix cannot be empty")
        return v.strip()


class PlacementConfig(BaseModel):
    """Placement group creation."""

    strategy: Literal["cluster", "spread", "partition"] = Field("cluster", description="Placement strategy")
    hardware_with_placement_groups: List[str] = Field(
        default_factory=lambda: list(DEFAULT_HARDWARE_WITH_PLACEMENT_GROUPS),
        description="Instance types that get a placement group",
    )
    wait_interval_seconds: float = Field(2.0, description="Polling interval while the group becomes available")
    wait_timeout_seconds: float = Field(120.0, description="Maximum wait for the group to become available")

    @field_validator("wait_interval_seconds", "wait_timeout_seconds")
    @classmethod
    def validate_wait(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Wait settings must be positive")
        return v


class KeyPairConfig(BaseModel):
    """Key pair creation."""

    max_create_attempts: int = Field(5, description="Attempts to find an unused unique key name")

    @field_validator("max_create_attempts")
    @classmethod
    def validate_attempts(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("max_create_attempts must be positive")
        return v


class SSHConfig(BaseModel):
    """SSH client configuration."""

    connect_timeout: float = Field(60.0, description="TCP connect timeout in seconds")
    banner_timeout: float = Field(60.0, description="Wait for the SSH banner in seconds")
    auth_timeout: float = Field(60.0, description="Wait for authentication in seconds")
    host_key_policy: Literal["auto_add", "reject", "warning"] = Field("auto_add")
    look_for_keys: bool = Field(False, description="Search ~/.ssh for private keys")
    allow_agent: bool = Field(False, description="Use the SSH agent")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field("INFO", description="Log level")
    destination: Literal["stdout", "file", "both"] = Field("stdout")
    file_path: str = Field("logs/ec2launch.log", description="Log file path")
    max_size_mb: int = Field(10, description="Rotate after this many megabytes")
    backup_count: int = Field(5, description="Rotated files to keep")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid log level: {v}")
        return level


class AppConfig(BaseModel):
    """Application configuration."""

    version: str = Field("1.0.0", description="Configuration version")
    aws: AWSConfig = Field(default_factory=AWSConfig)
    naming: NamingConfig = Field(default_factory=NamingConfig)
    placement: PlacementConfig = Field(default_factory=PlacementConfig)
    key_pair: KeyPairConfig = Field(default_factory=KeyPairConfig)
    ssh: SSHConfig = Field(default_factory=SSHConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
