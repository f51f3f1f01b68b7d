# src/ec2launch/domain/exceptions.py
from typing import Any, List, Optional


class DomainException(Exception):
    """Base exception for all domain-specific errors."""
    pass


class ValidationError(DomainException):
    """Raised when domain validation fails."""
    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.details = details


class ConfigurationError(DomainException):
    """Raised when there's an issue with configuration."""
    def __init__(self, message: str, missing_fields: Optional[List[str]] = None):
        super().__init__(message)
        self.missing_fields = missing_fields or []


class TemplateValidationError(ValidationError):
    """Raised when a launch template cannot be resolved."""
    def __init__(self, field: str, message: str):
        super().__init__(f"Invalid template {field}: {message}", {field: message})
        self.field = field
