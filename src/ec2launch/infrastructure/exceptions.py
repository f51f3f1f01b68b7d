from typing import Optional, Any


class InfrastructureError(Exception):
    """Base exception for infrastructure-related errors."""
    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.details = details


class AWSError(InfrastructureError):
    """Raised when AWS operations fail."""
    def __init__(self, message: str, details: Optional[Any] = None, error_code: Optional[str] = None):
        super().__init__(message, details)
        self.error_code = error_code


class AuthorizationError(AWSError):
    """Raised when the caller is not allowed to perform an AWS operation."""
    pass


class RateLimitError(AWSError):
    """Raised when AWS throttles a request."""
    pass


class KeyPairError(AWSError):
    """Raised when a key pair cannot be created or imported."""
    pass


class SecurityGroupError(AWSError):
    """Raised when a security group cannot be created or authorized."""
    pass


class PlacementGroupError(AWSError):
    """Raised when a placement group cannot be created."""
    pass


class PlacementGroupUnavailableError(PlacementGroupError):
    """Raised when a placement group does not become available in time."""
    pass


class SSHError(InfrastructureError):
    """Raised when an SSH connection or command fails."""
    pass
