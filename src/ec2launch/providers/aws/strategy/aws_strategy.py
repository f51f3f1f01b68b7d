"""
RunInstances options for Amazon EC2.

On top of the baseline EC2 rules this strategy handles placement groups,
imported key pairs, VPC security groups and subnets, and passes the EC2-only
launch settings (monitoring, IAM instance profile, private IP, tenancy and
dedicated host) through to the run options.
"""
from typing import Any, Callable, FrozenSet, Iterable, Optional

from ec2launch.config.schemas import DEFAULT_HARDWARE_WITH_PLACEMENT_GROUPS, PlacementConfig
from ec2launch.domain.naming import GroupNamingConvention
from ec2launch.domain.template_options import AWSEC2TemplateOptions, TemplateOptions
from ec2launch.domain.value_objects import RegionAndName, RegionNameAndPublicKeyMaterial, Template
from ec2launch.infrastructure.di.decorators import injectable
from ec2launch.providers.aws.functions.create_key_pair import CreateUniqueKeyPair
from ec2launch.providers.aws.functions.import_key_pair import ImportOrReturnExistingKeyPair
from ec2launch.providers.aws.registries import CredentialsStore, PlacementGroupMap, SecurityGroupMap
from ec2launch.providers.aws.run_options import AWSRunInstancesOptions, RunInstancesOptions
from ec2launch.providers.aws.strategy.ec2_strategy import EC2RunOptionsStrategy


def has_public_key_material(options: TemplateOptions) -> bool:
    return options.public_key is not None


def doesnt_need_ssh_after_importing_public_key(options: TemplateOptions) -> bool:
    return options.run_script is None and options.private_key is None


def has_login_credential(options: TemplateOptions) -> bool:
    return options.login_private_key is not None


@injectable
class AWSEC2RunOptionsStrategy(EC2RunOptionsStrategy):
    """Create key pair, placement and security groups as needed and return the run options."""

    required_options_type = AWSEC2TemplateOptions

    def __init__(self, make_key_pair: CreateUniqueKeyPair, credentials_store: CredentialsStore,
                 security_group_map: SecurityGroupMap, naming: GroupNamingConvention,
                 placement_group_map: PlacementGroupMap,
                 import_key_pair: ImportOrReturnExistingKeyPair,
                 placement_config: Optional[PlacementConfig] = None,
                 hardware_with_placement_groups: Optional[Iterable[str]] = None,
                 options_factory: Optional[Callable[[], RunInstancesOptions]] = None,
                 logger: Any = None):
        """
        Args:
            placement_group_map: Get-or-create registry of placement groups
            import_key_pair: Imports a public key as a group's key pair
            placement_config: Source of the placement group allow-list
            hardware_with_placement_groups: Explicit allow-list, overrides placement_config

        The remaining arguments are those of ``EC2RunOptionsStrategy``.
        """
        super().__init__(
            make_key_pair=make_key_pair,
            credentials_store=credentials_store,
            security_group_map=security_group_map,
            naming=naming,
            options_factory=options_factory or AWSRunInstancesOptions,
            logger=logger,
        )
        self.placement_group_map = placement_group_map
        self.import_key_pair = import_key_pair
        if hardware_with_placement_groups is None:
            hardware_with_placement_groups = (
                placement_config.hardware_with_placement_groups
                if placement_config is not None
                else DEFAULT_HARDWARE_WITH_PLACEMENT_GROUPS
            )
        self.hardware_with_placement_groups: FrozenSet[str] = frozenset(hardware_with_placement_groups)

    def build_run_options(self, region: str, group: str, template: Template) -> AWSRunInstancesOptions:
        run_options = super().build_run_options(region, group, template)
        options: AWSEC2TemplateOptions = template.options

        placement_group = None
        if template.hardware.id in self.hardware_with_placement_groups:
            placement_group = self.derive_placement_group(region, group, options)
        if placement_group is not None:
            run_options.in_placement_group(placement_group)

        if options.monitoring_enabled:
            run_options.enable_monitoring()
        if options.iam_instance_profile_arn is not None:
            run_options.with_iam_instance_profile_arn(options.iam_instance_profile_arn)
        if options.iam_instance_profile_name is not None:
            run_options.with_iam_instance_profile_name(options.iam_instance_profile_name)
        if options.private_ip_address is not None:
            run_options.with_private_ip_address(options.private_ip_address)
        if options.tenancy is not None:
            run_options.with_tenancy(options.tenancy)
        if options.dedicated_host_id is not None:
            run_options.with_dedicated_host_id(options.dedicated_host_id)

        return run_options

    def derive_placement_group(self, region: str, group: str, options: TemplateOptions) -> Optional[str]:
        """
        Return the placement group to launch into, creating the group's own if needed.

        A user-specified group is used as is. Otherwise, unless disabled, the
        group gets a placement group named after it and the region, created
        on first use.
        """
        placement_group = None
        should_create = True
        if isinstance(options, AWSEC2TemplateOptions):
            placement_group = options.placement_group
            if placement_group is None:
                should_create = options.should_automatically_create_placement_group

        if placement_group is None and should_create:
            # placement group names must be unique within an account
            placement_group = self.naming.shared_name_for_group_in_region(group, region)
            self.placement_group_map.get(RegionAndName(region=region, name=placement_group))
        return placement_group

    def derive_key_pair(self, region: str, group: str, options: TemplateOptions) -> Optional[str]:
        """
        Import the user's public key as the key pair when that is enough to log in.

        The public key is imported when nothing needs SSH after launch, or when
        the user supplied the private key to log in with. Otherwise the baseline
        creates a temporary key pair.
        """
        if has_public_key_material(options) and (
            doesnt_need_ssh_after_importing_public_key(options) or has_login_credential(options)
        ):
            pair = self.import_key_pair(RegionNameAndPublicKeyMaterial(
                region=region, name=group, public_key_material=options.public_key,
            ))
            options.dont_authorize_public_key()
            if has_login_credential(options):
                pair = pair.with_key_material(options.login_private_key)
            self.credentials_store.put(RegionAndName(region=region, name=group), pair)
            return pair.key_name

        if has_public_key_material(options):
            self._logger.warning("to avoid creating temporary keys in aws-ec2, "
                                 "use template option override_login_private_key(id_rsa)")
        return super().derive_key_pair(region, group, options)

    def should_use_user_specified_groups(self, options: TemplateOptions) -> bool:
        return (
            isinstance(options, AWSEC2TemplateOptions) and len(options.group_ids) > 0
        ) or super().should_use_user_specified_groups(options)

    def attach_security_groups(self, region: str, group: str, template: Template,
                               run_options: RunInstancesOptions) -> None:
        options: AWSEC2TemplateOptions = template.options
        if options.group_ids:
            run_options.with_security_group_ids(options.group_ids)
        elif options.subnet_id is not None:
            run_options.with_subnet_id(options.subnet_id)
        else:
            super().attach_security_groups(region, group, template, run_options)
