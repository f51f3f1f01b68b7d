"""
Main CLI module.

    ec2launch resolve --region us-east-1 --group web --hardware c4.large --options opts.yaml

prints the ``run_instances`` keyword arguments resolved for the launch,
creating the key pair, security group and placement group it needs.
"""
import argparse
import json
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import ValidationError as PydanticValidationError

from ec2launch._package import __version__
from ec2launch.domain.exceptions import DomainException, ValidationError
from ec2launch.domain.template_options import AWSEC2TemplateOptions
from ec2launch.domain.value_objects import Hardware, Template
from ec2launch.helpers.logger import get_logger
from ec2launch.infrastructure.exceptions import InfrastructureError
from ec2launch.cli.formatters import format_output


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog=os.path.basename(sys.argv[0]),
        description="Resolve EC2 RunInstances options for a group of instances",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s resolve --region us-east-1 --group web --hardware c4.large
  %(prog)s --format yaml resolve --region eu-west-1 --group db --hardware m5.large --options opts.yaml
        """
    )

    # Global options
    parser.add_argument('--config', help='Configuration file path')
    parser.add_argument('--log-level', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        help='Override the configured logging level')
    parser.add_argument('--format', choices=['json', 'yaml'], default='json', help='Output format')
    parser.add_argument('--output', help='Output file (default: stdout)')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    resolve = subparsers.add_parser('resolve', help='Resolve run options for a launch')
    resolve.add_argument('--region', help='Target region (default: configured region)')
    resolve.add_argument('--group', required=True, help='Logical group of the instances')
    resolve.add_argument('--hardware', required=True, help='Instance type, e.g. c4.large')
    resolve.add_argument('--image-id', help='AMI to include as ImageId')
    resolve.add_argument('--options', help='JSON or YAML file with template options')

    return parser.parse_args(argv)


def load_template_options(path: Optional[str]) -> AWSEC2TemplateOptions:
    """
    Read template options from a JSON or YAML file.

    Raises:
        ValidationError: If the file cannot be read or holds invalid options
    """
    if path is None:
        return AWSEC2TemplateOptions()
    file_path = Path(path)
    try:
        with file_path.open('r', encoding='utf-8') as handle:
            if file_path.suffix in ('.yaml', '.yml'):
                data = yaml.safe_load(handle) or {}
            else:
                data = json.load(handle)
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise ValidationError(f"Failed to read template options {path}: {e}") from e
    try:
        return AWSEC2TemplateOptions(**data)
    except (PydanticValidationError, TypeError) as e:
        raise ValidationError(f"Invalid template options in {path}: {e}") from e


def execute_command(args: argparse.Namespace, app) -> Dict[str, Any]:
    if args.command == 'resolve':
        region = args.region or app.config.aws.region
        try:
            hardware = Hardware(id=args.hardware)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid hardware {args.hardware!r}: {e}") from e
        template = Template(
            hardware=hardware,
            options=load_template_options(args.options),
            image_id=args.image_id,
        )
        run_options = app.get_resolver().resolve(region, args.group, template)
        params = run_options.to_boto3()
        if template.image_id:
            params = {"ImageId": template.image_id, **params}
        return {"region": region, "group": args.group, "run_instances": params}
    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    args = parse_args(argv)
    logger = get_logger(__name__)

    if not args.command:
        print("Error: No command specified. Use --help for usage information.")
        return 1

    overrides = {"logging.level": args.log_level} if args.log_level else None
    try:
        from ec2launch.bootstrap import create_application
        app = create_application(args.config, overrides)
        result = execute_command(args, app)
    except (DomainException, InfrastructureError) as e:
        logger.error(f"{type(e).__name__}: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nOperation cancelled by user.", file=sys.stderr)
        return 130

    formatted_output = format_output(result, args.format)
    if args.output:
        with open(args.output, 'w') as f:
            f.write(formatted_output)
    else:
        print(formatted_output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
