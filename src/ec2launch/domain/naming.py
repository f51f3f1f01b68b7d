"""Naming convention for resources created on behalf of a logical group."""
import secrets
from typing import Optional


class GroupNamingConvention:
    """
    Derives provider resource names from a logical group name.

    Shared names are deterministic, so every launch for the same group reuses
    the same key pair, security group or placement group. Unique names add a
    random suffix and are used for resources that must not be shared.
    """

    def __init__(self, prefix: str = "jclouds", delimiter: str = "#"):
        if not prefix:
            raise ValueError("Naming prefix must not be empty")
        self.prefix = prefix
        self.delimiter = delimiter

    def shared_name_for_group(self, group: str) -> str:
        return f"{self.prefix}{self.delimiter}{group}"

    def shared_name_for_group_in_region(self, group: str, region: str) -> str:
        return f"{self.prefix}{self.delimiter}{group}{self.delimiter}{region}"

    def unique_name_for_group(self, group: str) -> str:
        return f"{self.shared_name_for_group(group)}-{secrets.token_hex(4)}"

    def group_in_shared_name(self, name: str) -> Optional[str]:
        """Return the group a shared name was derived from, or None."""
        marker = f"{self.prefix}{self.delimiter}"
        if not name.startswith(marker):
            return None
        return name[len(marker):].split(self.delimiter, 1)[0] or None
