"""EC2 launch options - Root Package.

This package derives the options of an EC2 RunInstances call for a launch
request made of a region, a logical group and a template. It creates the
provider-side resources the launch depends on (key pairs, security groups
and placement groups) and wires the SSH client used to reach the launched
instances.

Key Components:
    - domain: Value objects, template options and naming convention
    - config: Configuration schemas and loading
    - infrastructure: AWS client, registries and dependency injection
    - providers.aws: Run options, EC2 side effects and resolution strategies
    - ssh: SSH client factory
    - cli: Command line interface
"""

from ._package import PACKAGE_NAME, __version__

__author__ = "AWS Professional Services"
__package_name__ = PACKAGE_NAME
