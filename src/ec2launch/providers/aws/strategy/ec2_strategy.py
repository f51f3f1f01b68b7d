"""
Baseline RunInstances options for EC2.

``EC2RunOptionsStrategy`` derives the options every EC2-compatible endpoint
understands: the instance type, a key pair and the security groups. Key pairs
and the group's default security group are created on first use and shared
by every later launch of the same group in the same region.

Provider strategies extend it by overriding three hooks:

    derive_key_pair                    which key pair to launch with
    should_use_user_specified_groups   whether the default security group is skipped
    attach_security_groups             how groups end up on the run options
"""
from typing import Any, Callable, List, Optional, Type

from ec2launch.domain.exceptions import TemplateValidationError
from ec2launch.domain.naming import GroupNamingConvention
from ec2launch.domain.template_options import EC2TemplateOptions, TemplateOptions
from ec2launch.domain.value_objects import KeyPair, RegionAndName, RegionNameAndIngressRules, Template
from ec2launch.helpers.logger import get_logger
from ec2launch.infrastructure.di.decorators import injectable
from ec2launch.providers.aws.functions.create_key_pair import CreateUniqueKeyPair
from ec2launch.providers.aws.registries import CredentialsStore, SecurityGroupMap
from ec2launch.providers.aws.run_options import RunInstancesOptions


@injectable
class EC2RunOptionsStrategy:
    """Create key pair and security groups as needed and return the run options."""

    required_options_type: Type[TemplateOptions] = TemplateOptions

    def __init__(self, make_key_pair: CreateUniqueKeyPair, credentials_store: CredentialsStore,
                 security_group_map: SecurityGroupMap, naming: GroupNamingConvention,
                 options_factory: Optional[Callable[[], RunInstancesOptions]] = None,
                 logger: Any = None):
        """
        Args:
            make_key_pair: Creates a new key pair for a region and group
            credentials_store: Key pairs shared across launches
            security_group_map: Get-or-create registry of security groups
            naming: Naming convention for shared resources
            options_factory: Builds an empty run options object
            logger: Logger, a structlog logger when None
        """
        self.make_key_pair = make_key_pair
        self.credentials_store = credentials_store
        self.security_group_map = security_group_map
        self.naming = naming
        self._options_factory = options_factory or RunInstancesOptions
        self._logger = logger or get_logger(__name__)

    def resolve(self, region: str, group: str, template: Template) -> RunInstancesOptions:
        """
        Derive the RunInstances options of a launch.

        The template's options are copied before resolution, so the caller's
        template is left untouched and can be resolved again. The options the
        launch was resolved with are available as ``template_options`` on the
        result.

        Raises:
            TemplateValidationError: If region, group or template are unusable
        """
        self._validate(region, group, template)
        template = template.with_options_copy()
        self._logger.debug(f"Resolving run options for group {group} in {region} "
                           f"on {template.hardware.id}")
        run_options = self.build_run_options(region, group, template)
        run_options.template_options = template.options
        return run_options

    def _validate(self, region: str, group: str, template: Template) -> None:
        if not region or not region.strip():
            raise TemplateValidationError("region", "must not be empty")
        if not group or not group.strip():
            raise TemplateValidationError("group", "must not be empty")
        if template is None or template.hardware is None:
            raise TemplateValidationError("hardware", "must be set")
        if not isinstance(template.options, self.required_options_type):
            raise TemplateValidationError(
                "options",
                f"expected {self.required_options_type.__name__}, got {type(template.options).__name__}",
            )

    def build_run_options(self, region: str, group: str, template: Template) -> RunInstancesOptions:
        options = template.options
        run_options = self._options_factory().as_type(template.hardware.id)

        key_pair_name = self.derive_key_pair(region, group, options)
        self.attach_security_groups(region, group, template, run_options)
        if key_pair_name is not None:
            run_options.with_key_name(key_pair_name)

        if isinstance(options, EC2TemplateOptions):
            if options.user_data is not None:
                run_options.with_user_data(options.user_data)
            if options.block_device_mappings:
                run_options.with_block_device_mappings(options.block_device_mappings)
        return run_options

    def derive_key_pair(self, region: str, group: str, options: TemplateOptions) -> Optional[str]:
        """
        Return the key pair to launch with, creating one unless told otherwise.

        An explicit key pair wins. Otherwise the group's key pair is reused
        from the credentials store, or created, unless automatic key pair
        creation is disabled.
        """
        key_pair_name = None
        should_create = True
        if isinstance(options, EC2TemplateOptions):
            key_pair_name = options.key_pair
            if key_pair_name is None:
                should_create = options.should_automatically_create_key_pair

        if key_pair_name is None and should_create:
            pair = self.credentials_store.get_or_create(RegionAndName(region=region, name=group),
                                                        self.make_key_pair)
            return pair.key_name

        if key_pair_name is not None and options.login_private_key is not None:
            self.credentials_store.put(
                RegionAndName(region=region, name=key_pair_name),
                KeyPair(region=region, key_name=key_pair_name, key_material=options.login_private_key),
            )
        return key_pair_name

    def should_use_user_specified_groups(self, options: TemplateOptions) -> bool:
        return isinstance(options, EC2TemplateOptions) and len(options.groups) > 0

    def attach_security_groups(self, region: str, group: str, template: Template,
                               run_options: RunInstancesOptions) -> None:
        run_options.with_security_groups(self.security_groups_for(region, group, template.options))

    def security_groups_for(self, region: str, group: str, options: TemplateOptions) -> List[str]:
        """Security group names for a launch: the group's default group and the user's groups."""
        groups: List[str] = []
        if group and not self.should_use_user_specified_groups(options):
            marker_group = self.naming.shared_name_for_group(group)
            self.security_group_map.get(RegionNameAndIngressRules(
                region=region,
                name=marker_group,
                ports=tuple(options.inbound_ports),
                authorize_self=True,
            ))
            groups.append(marker_group)
        if isinstance(options, EC2TemplateOptions):
            for user_group in options.groups:
                if user_group not in groups:
                    groups.append(user_group)
        return groups
