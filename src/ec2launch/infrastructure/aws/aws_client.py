import logging
import threading
from typing import Any, Dict, Optional, Type

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from ec2launch.config.schemas import AWSConfig
from ec2launch.infrastructure.exceptions import (
    AWSError,
    AuthorizationError,
    RateLimitError,
)

logger = logging.getLogger(__name__)

_THROTTLING_CODES = {"Throttling", "ThrottlingException", "RequestLimitExceeded"}
_AUTHORIZATION_CODES = {"UnauthorizedOperation", "AuthFailure", "AccessDenied", "AccessDeniedException"}


class AWSClient:
    """
    Centralized AWS client management.

    Launch requests name their region, so EC2 clients are created per region
    on first use and shared afterwards. boto3 clients are thread-safe; the
    session is only used under a lock.
    """

    def __init__(self, config: Optional[AWSConfig] = None, session: Optional[boto3.session.Session] = None):
        """
        Initialize AWS client with configuration.

        Args:
            config: AWS configuration, defaults when None
            session: Optional pre-built boto3 session
        """
        self.aws_config = config or AWSConfig()
        self.region_name = self.aws_config.region
        self.config = Config(
            retries={
                'max_attempts': self.aws_config.max_retry_attempts,
                'mode': self.aws_config.retry_mode
            },
            connect_timeout=self.aws_config.connect_timeout,
            read_timeout=self.aws_config.read_timeout
        )
        self._session = session or boto3.session.Session(profile_name=self.aws_config.profile)
        self._ec2_clients: Dict[str, Any] = {}
        self._lock = threading.Lock()

    @property
    def ec2_client(self) -> Any:
        """EC2 client for the default region."""
        return self.ec2(self.region_name)

    def ec2(self, region: str) -> Any:
        """Get the EC2 client for ``region``."""
        with self._lock:
            client = self._ec2_clients.get(region)
            if client is None:
                kwargs: Dict[str, Any] = {'region_name': region, 'config': self.config}
                if self.aws_config.endpoint_url:
                    kwargs['endpoint_url'] = self.aws_config.endpoint_url
                client = self._session.client('ec2', **kwargs)
                self._ec2_clients[region] = client
                logger.debug(f"Created EC2 client for region {region}")
            return client


def error_code(error: ClientError) -> str:
    """Return the AWS error code carried by a botocore ClientError."""
    return error.response.get('Error', {}).get('Code', 'Unknown')


def convert_client_error(error: ClientError, operation: str,
                         default: Type[AWSError] = AWSError) -> AWSError:
    """
    Convert a botocore ClientError into the matching infrastructure exception.

    Args:
        error: The original ClientError
        operation: Human readable name of the failed operation
        default: Exception class used when the code has no specific mapping

    Returns:
        The converted exception, ready to be raised
    """
    code = error_code(error)
    message = error.response.get('Error', {}).get('Message', str(error))
    if code in _THROTTLING_CODES:
        error_class: Type[AWSError] = RateLimitError
    elif code in _AUTHORIZATION_CODES:
        error_class = AuthorizationError
    else:
        error_class = default
    return error_class(f"Failed to {operation}: {message}", details=error.response, error_code=code)
