"""AWS infrastructure: boto3 client management and error translation."""

from .aws_client import AWSClient, convert_client_error, error_code

__all__ = ["AWSClient", "convert_client_error", "error_code"]
