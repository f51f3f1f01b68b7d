"""Placement group creation."""
import time
from typing import Any, Callable, Optional

from botocore.exceptions import ClientError

from ec2launch.config.schemas import PlacementConfig
from ec2launch.domain.value_objects import RegionAndName
from ec2launch.helpers.logger import get_logger
from ec2launch.infrastructure.aws.aws_client import AWSClient, convert_client_error, error_code
from ec2launch.infrastructure.di.decorators import injectable
from ec2launch.infrastructure.exceptions import PlacementGroupError, PlacementGroupUnavailableError


@injectable
class CreatePlacementGroupIfNeeded:
    """
    Create a placement group and wait until EC2 reports it available.

    Used as the loader of the placement group registry, which guarantees one
    call per region and name. A group that already exists, for instance one
    created by an earlier process, counts as created.
    """

    def __init__(self, aws_client: AWSClient, config: Optional[PlacementConfig] = None,
                 sleep: Callable[[float], None] = time.sleep, logger: Any = None):
        self.aws_client = aws_client
        self.config = config or PlacementConfig()
        self._sleep = sleep
        self._logger = logger or get_logger(__name__)

    def __call__(self, region_and_name: RegionAndName) -> str:
        region, name = region_and_name.region, region_and_name.name
        ec2 = self.aws_client.ec2(region)
        self._logger.debug(f"Creating placement group {name} in {region}")
        try:
            ec2.create_placement_group(GroupName=name, Strategy=self.config.strategy)
            self._logger.info(f"Created placement group {name} in {region}")
        except ClientError as e:
            if error_code(e) != "InvalidPlacementGroup.Duplicate":
                raise convert_client_error(e, f"create placement group {name}", PlacementGroupError)
            self._logger.debug(f"Placement group {name} already exists in {region}")

        self._wait_until_available(ec2, region, name)
        return name

    def _wait_until_available(self, ec2: Any, region: str, name: str) -> None:
        deadline = time.monotonic() + self.config.wait_timeout_seconds
        while True:
            try:
                response = ec2.describe_placement_groups(GroupNames=[name])
            except ClientError as e:
                raise convert_client_error(e, f"describe placement group {name}", PlacementGroupError)
            groups = response.get("PlacementGroups", [])
            state = groups[0].get("State") if groups else None
            if state == "available":
                return
            if time.monotonic() >= deadline:
                raise PlacementGroupUnavailableError(
                    f"Placement group {name} in {region} not available after "
                    f"{self.config.wait_timeout_seconds}s (state: {state})"
                )
            self._logger.debug(f"Placement group {name} is {state}, waiting")
            self._sleep(self.config.wait_interval_seconds)
