"""Value objects shared by the launch option strategies and the EC2 registries."""
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator

from ec2launch.domain.template_options import TemplateOptions


class ValueObject(BaseModel):
    """Base class for immutable value objects compared by value."""
    model_config = ConfigDict(frozen=True, extra="forbid")


class RegionAndName(ValueObject):
    """Key of the shared registries: a region plus a resource or group name."""

    region: str
    name: str

    @field_validator("region", "name")
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("region and name must not be empty")
        return v

    def __str__(self) -> str:
        return f"{self.region}/{self.name}"


class RegionNameAndPublicKeyMaterial(ValueObject):
    """Input of a key import: where to import and what to import."""

    region: str
    name: str
    public_key_material: str

    @property
    def region_and_name(self) -> RegionAndName:
        return RegionAndName(region=self.region, name=self.name)


class RegionNameAndIngressRules(ValueObject):
    """Security group request keyed by region and group name.

    Ports and the self-authorization flag describe how to create the group,
    they are not part of its identity: two requests for the same group name in
    the same region refer to the same group.
    """

    region: str
    name: str
    ports: Tuple[int, ...] = ()
    authorize_self: bool = False

    @property
    def region_and_name(self) -> RegionAndName:
        return RegionAndName(region=self.region, name=self.name)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RegionNameAndIngressRules):
            return False
        return (self.region, self.name) == (other.region, other.name)

    def __hash__(self) -> int:
        return hash((self.region, self.name))


class KeyPair(ValueObject):
    """An EC2 key pair and, when known, the private key material used to log in."""

    region: str
    key_name: str
    fingerprint: Optional[str] = None
    key_material: Optional[str] = None

    def with_key_material(self, key_material: Optional[str]) -> "KeyPair":
        """Return a copy bound to different key material; the name is kept."""
        return self.model_copy(update={"key_material": key_material})

    def __repr__(self) -> str:
        # never print private key material
        return (f"KeyPair(region={self.region!r}, key_name={self.key_name!r}, "
                f"fingerprint={self.fingerprint!r}, has_key_material={self.key_material is not None})")


class Hardware(ValueObject):
    """Hardware choice of a template. ``id`` is the EC2 instance type."""

    id: str
    processors: Optional[int] = None
    ram_mb: Optional[int] = None

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("hardware id must not be empty")
        return v.strip()


class Template(BaseModel):
    """Hardware plus the launch preferences of a single launch request."""
    model_config = ConfigDict(frozen=True)

    hardware: Hardware
    options: TemplateOptions
    image_id: Optional[str] = None

    def with_options_copy(self) -> "Template":
        """Return a template carrying a deep copy of the options."""
        return self.model_copy(update={"options": self.options.model_copy(deep=True)})
