"""EC2 side effects performed while resolving launch options."""

from .create_key_pair import CreateUniqueKeyPair
from .create_placement_group import CreatePlacementGroupIfNeeded
from .create_security_group import CreateSecurityGroupIfNeeded
from .import_key_pair import ImportOrReturnExistingKeyPair

__all__ = [
    "CreatePlacementGroupIfNeeded",
    "CreateSecurityGroupIfNeeded",
    "CreateUniqueKeyPair",
    "ImportOrReturnExistingKeyPair",
]
