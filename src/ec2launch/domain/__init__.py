"""Domain model: value objects, template options and naming."""

from .exceptions import ConfigurationError, DomainException, TemplateValidationError, ValidationError
from .naming import GroupNamingConvention
from .template_options import (
    AWSEC2TemplateOptions,
    BlockDeviceMapping,
    EC2TemplateOptions,
    TemplateOptions,
)
from .value_objects import (
    Hardware,
    KeyPair,
    RegionAndName,
    RegionNameAndIngressRules,
    RegionNameAndPublicKeyMaterial,
    Template,
)

__all__ = [
    "AWSEC2TemplateOptions",
    "BlockDeviceMapping",
    "ConfigurationError",
    "DomainException",
    "EC2TemplateOptions",
    "GroupNamingConvention",
    "Hardware",
    "KeyPair",
    "RegionAndName",
    "RegionNameAndIngressRules",
    "RegionNameAndPublicKeyMaterial",
    "Template",
    "TemplateOptions",
    "TemplateValidationError",
    "ValidationError",
]
