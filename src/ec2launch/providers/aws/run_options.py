"""
RunInstances options.

Strategies fill a ``RunInstancesOptions`` (or its AWS subtype) field by field
and the caller renders it into ``ec2_client.run_instances`` keyword
arguments with ``to_boto3``. Fields left unset are omitted from the call.
"""
from typing import Any, Dict, Iterable, List, Optional

from ec2launch.domain.template_options import BlockDeviceMapping, TemplateOptions


class RunInstancesOptions:
    """Options accepted by any EC2-compatible RunInstances endpoint."""

    def __init__(self):
        self.instance_type: Optional[str] = None
        self.key_name: Optional[str] = None
        self.security_groups: List[str] = []
        self.user_data: Optional[bytes] = None
        self.block_device_mappings: List[BlockDeviceMapping] = []
        # options the launch was resolved with; see the strategies' resolve()
        self.template_options: Optional[TemplateOptions] = None

    def as_type(self, instance_type: str) -> "RunInstancesOptions":
        self.instance_type = instance_type
        return self

    def with_key_name(self, key_name: str) -> "RunInstancesOptions":
        self.key_name = key_name
        return self

    def with_security_groups(self, groups: Iterable[str]) -> "RunInstancesOptions":
        for group in groups:
            if group not in self.security_groups:
                self.security_groups.append(group)
        return self

    def with_user_data(self, user_data: bytes) -> "RunInstancesOptions":
        if len(user_data) > 16 * 1024:
            raise ValueError("User data is limited to 16KB")
        self.user_data = user_data
        return self

    def with_block_device_mappings(self, mappings: Iterable[BlockDeviceMapping]) -> "RunInstancesOptions":
        self.block_device_mappings.extend(mappings)
        return self

    def to_boto3(self) -> Dict[str, Any]:
        """Render the options as ``run_instances`` keyword arguments."""
        params: Dict[str, Any] = {}
        if self.instance_type:
            params["InstanceType"] = self.instance_type
        if self.key_name:
            params["KeyName"] = self.key_name
        if self.security_groups:
            params["SecurityGroups"] = list(self.security_groups)
        if self.user_data is not None:
            # botocore base64-encodes RunInstances user data
            params["UserData"] = self.user_data
        if self.block_device_mappings:
            params["BlockDeviceMappings"] = [m.to_boto3() for m in self.block_device_mappings]
        return params

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_boto3()!r})"


class AWSRunInstancesOptions(RunInstancesOptions):
    """RunInstances options specific to Amazon EC2."""

    def __init__(self):
        super().__init__()
        self.security_group_ids: List[str] = []
        self.subnet_id: Optional[str] = None
        self.placement_group: Optional[str] = None
        self.monitoring_enabled: bool = False
        self.iam_instance_profile_arn: Optional[str] = None
        self.iam_instance_profile_name: Optional[str] = None
        self.private_ip_address: Optional[str] = None
        self.tenancy: Optional[str] = None
        self.dedicated_host_id: Optional[str] = None

    def in_placement_group(self, name: str) -> "AWSRunInstancesOptions":
        self.placement_group = name
        return self

    def enable_monitoring(self) -> "AWSRunInstancesOptions":
        self.monitoring_enabled = True
        return self

    def with_security_group_ids(self, group_ids: Iterable[str]) -> "AWSRunInstancesOptions":
        for group_id in group_ids:
            if group_id not in self.security_group_ids:
                self.security_group_ids.append(group_id)
        return self

    def with_subnet_id(self, subnet_id: str) -> "AWSRunInstancesOptions":
        self.subnet_id = subnet_id
        return self

    def with_iam_instance_profile_arn(self, arn: str) -> "AWSRunInstancesOptions":
        self.iam_instance_profile_arn = arn
        return self

    def with_iam_instance_profile_name(self, name: str) -> "AWSRunInstancesOptions":
        self.iam_instance_profile_name = name
        return self

    def with_private_ip_address(self, address: str) -> "AWSRunInstancesOptions":
        self.private_ip_address = address
        return self

    def with_tenancy(self, tenancy: str) -> "AWSRunInstancesOptions":
        self.tenancy = tenancy
        return self

    def with_dedicated_host_id(self, host_id: str) -> "AWSRunInstancesOptions":
        self.dedicated_host_id = host_id
        return self

    def to_boto3(self) -> Dict[str, Any]:
        params = super().to_boto3()
        if self.security_group_ids:
            params["SecurityGroupIds"] = list(self.security_group_ids)
        if self.subnet_id:
            params["SubnetId"] = self.subnet_id

        placement: Dict[str, str] = {}
        if self.placement_group:
            placement["GroupName"] = self.placement_group
        if self.tenancy:
            placement["Tenancy"] = self.tenancy
        if self.dedicated_host_id:
            placement["HostId"] = self.dedicated_host_id
        if placement:
            params["Placement"] = placement

        if self.monitoring_enabled:
            params["Monitoring"] = {"Enabled": True}

        profile: Dict[str, str] = {}
        if self.iam_instance_profile_arn:
            profile["Arn"] = self.iam_instance_profile_arn
        if self.iam_instance_profile_name:
            profile["Name"] = self.iam_instance_profile_name
        if profile:
            params["IamInstanceProfile"] = profile

        if self.private_ip_address:
            params["PrivateIpAddress"] = self.private_ip_address
        return params
