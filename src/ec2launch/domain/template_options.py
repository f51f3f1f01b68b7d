"""Launch preferences of a template.

Options come in three layers, each adding the settings of a narrower target:

    TemplateOptions        credentials, scripts and ports common to every launch
    EC2TemplateOptions     key pair, security group names, user data, block devices
    AWSEC2TemplateOptions  VPC groups and subnet, placement, IAM profile, tenancy

Options are mutable. They are created by the caller before a launch request
and read by the strategies, which only ever clear ``authorize_public_key``
once the public key has been imported as a key pair.
"""
import ipaddress
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TemplateOptions(BaseModel):
    """Provider-independent launch preferences."""
    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    public_key: Optional[str] = Field(None, description="Public key material to authorize on the instance")
    private_key: Optional[str] = Field(None, description="Private key material to install on the instance")
    login_user: Optional[str] = Field(None, description="User to log in as")
    login_private_key: Optional[str] = Field(None, description="Private key overriding the login credentials")
    run_script: Optional[str] = Field(None, description="Script to run over SSH once the instance is up")
    inbound_ports: List[int] = Field(default_factory=lambda: [22], description="Ports opened in the default group")
    authorize_public_key: bool = Field(True, description="Authorize public_key over SSH after launch")

    @field_validator("inbound_ports")
    @classmethod
    def validate_ports(cls, v: List[int]) -> List[int]:
        for port in v:
            if not 0 < port < 65536:
                raise ValueError(f"Invalid inbound port: {port}")
        return v

    def dont_authorize_public_key(self) -> "TemplateOptions":
        """Skip post-launch authorization of the public key."""
        self.authorize_public_key = False
        return self

    def override_login_private_key(self, private_key: str) -> "TemplateOptions":
        """Log in with ``private_key`` instead of the key pair's generated material."""
        self.login_private_key = private_key
        return self


class BlockDeviceMapping(BaseModel):
    """A block device attached at launch."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    device_name: str
    volume_size: Optional[int] = None
    volume_type: Optional[str] = None
    virtual_name: Optional[str] = None
    delete_on_termination: bool = True

    def to_boto3(self) -> Dict[str, Any]:
        mapping: Dict[str, Any] = {"DeviceName": self.device_name}
        if self.virtual_name:
            mapping["VirtualName"] = self.virtual_name
            return mapping
        ebs: Dict[str, Any] = {"DeleteOnTermination": self.delete_on_termination}
        if self.volume_size is not None:
            ebs["VolumeSize"] = self.volume_size
        if self.volume_type:
            ebs["VolumeType"] = self.volume_type
        mapping["Ebs"] = ebs
        return mapping


class EC2TemplateOptions(TemplateOptions):
    """Launch preferences understood by any EC2-compatible endpoint."""

    groups: List[str] = Field(default_factory=list, description="Security group names")
    key_pair: Optional[str] = Field(None, description="Existing key pair to launch with")
    no_key_pair: bool = Field(False, description="Do not create a key pair automatically")
    user_data: Optional[bytes] = Field(None, description="Raw user data")
    block_device_mappings: List[BlockDeviceMapping] = Field(default_factory=list)

    @property
    def should_automatically_create_key_pair(self) -> bool:
        return not self.no_key_pair


Tenancy = Literal["default", "dedicated", "host"]


class AWSEC2TemplateOptions(EC2TemplateOptions):
    """Launch preferences specific to Amazon EC2."""

    group_ids: List[str] = Field(default_factory=list, description="VPC security group IDs")
    subnet_id: Optional[str] = None
    placement_group: Optional[str] = Field(None, description="Existing placement group to launch into")
    no_placement_group: bool = Field(False, description="Do not create a placement group automatically")
    monitoring_enabled: bool = Field(False, description="Enable detailed CloudWatch monitoring")
    iam_instance_profile_arn: Optional[str] = None
    iam_instance_profile_name: Optional[str] = None
    private_ip_address: Optional[str] = None
    tenancy: Optional[Tenancy] = None
    dedicated_host_id: Optional[str] = None

    @field_validator("group_ids")
    @classmethod
    def validate_group_ids(cls, v: List[str]) -> List[str]:
        for group_id in v:
            if not group_id.startswith("sg-"):
                raise ValueError(f"Invalid security group ID format: {group_id}")
        return v

    @field_validator("subnet_id")
    @classmethod
    def validate_subnet_id(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.startswith("subnet-"):
            raise ValueError(f"Invalid subnet ID format: {v}")
        return v

    @field_validator("iam_instance_profile_arn")
    @classmethod
    def validate_profile_arn(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.startswith("arn:"):
            raise ValueError(f"Invalid instance profile ARN: {v}")
        return v

    @field_validator("private_ip_address")
    @classmethod
    def validate_private_ip(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            ipaddress.IPv4Address(v)
        return v

    @property
    def should_automatically_create_placement_group(self) -> bool:
        return not self.no_placement_group
