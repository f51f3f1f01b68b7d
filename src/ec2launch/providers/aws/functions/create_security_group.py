"""Security group creation."""
from typing import Any, Dict, List

from botocore.exceptions import ClientError

from ec2launch.domain.value_objects import RegionNameAndIngressRules
from ec2launch.helpers.logger import get_logger
from ec2launch.infrastructure.aws.aws_client import AWSClient, convert_client_error, error_code
from ec2launch.infrastructure.di.decorators import injectable
from ec2launch.infrastructure.exceptions import SecurityGroupError


@injectable
class CreateSecurityGroupIfNeeded:
    """
    Create a group's security group and open its inbound ports.

    Ports are opened to 0.0.0.0/0. With ``authorize_self`` members of the
    group may also reach each other on any port. Existing groups and
    existing rules are left in place.
    """

    def __init__(self, aws_client: AWSClient, logger: Any = None):
        self.aws_client = aws_client
        self._logger = logger or get_logger(__name__)

    def __call__(self, request: RegionNameAndIngressRules) -> str:
        ec2 = self.aws_client.ec2(request.region)
        group_id = self._create_or_find(ec2, request)
        for permission in self._permissions(request, group_id):
            try:
                ec2.authorize_security_group_ingress(GroupId=group_id, IpPermissions=[permission])
            except ClientError as e:
                if error_code(e) != "InvalidPermission.Duplicate":
                    raise convert_client_error(e, f"authorize security group {request.name}", SecurityGroupError)
        return request.name

    def _create_or_find(self, ec2: Any, request: RegionNameAndIngressRules) -> str:
        try:
            response = ec2.create_security_group(GroupName=request.name, Description=request.name)
            self._logger.info(f"Created security group {request.name} in {request.region}")
            return response["GroupId"]
        except ClientError as e:
            if error_code(e) != "InvalidGroup.Duplicate":
                raise convert_client_error(e, f"create security group {request.name}", SecurityGroupError)
        self._logger.debug(f"Security group {request.name} already exists in {request.region}")
        try:
            groups = ec2.describe_security_groups(GroupNames=[request.name])["SecurityGroups"]
        except ClientError as e:
            raise convert_client_error(e, f"describe security group {request.name}", SecurityGroupError)
        return groups[0]["GroupId"]

    @staticmethod
    def _permissions(request: RegionNameAndIngressRules, group_id: str) -> List[Dict[str, Any]]:
        permissions: List[Dict[str, Any]] = [
            {
                "IpProtocol": "tcp",
                "FromPort": port,
                "ToPort": port,
                "IpRanges": [{"CidrIp": "0.0.0.0/0"}],
            }
            for port in request.ports
        ]
        if request.authorize_self:
            permissions.append({"IpProtocol": "-1", "UserIdGroupPairs": [{"GroupId": group_id}]})
        return permissions
