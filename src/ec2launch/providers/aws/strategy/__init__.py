"""Launch option strategies."""

from .aws_strategy import (
    AWSEC2RunOptionsStrategy,
    doesnt_need_ssh_after_importing_public_key,
    has_login_credential,
    has_public_key_material,
)
from .ec2_strategy import EC2RunOptionsStrategy

__all__ = [
    "AWSEC2RunOptionsStrategy",
    "EC2RunOptionsStrategy",
    "doesnt_need_ssh_after_importing_public_key",
    "has_login_credential",
    "has_public_key_material",
]
