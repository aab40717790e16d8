"""
CLI tool for K3s Ingress.

Generates Kubernetes manifests from an OpenAPI spec.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .errors import K3sIngressError
from .openapi import load_openapi
from .options import find_options_file, load_options_file, merge_options
from .registry import Generator, GeneratorRegistry, build_registry
from .types import Options

logger = logging.getLogger(__name__)


def add_common_arguments(parser: argparse.ArgumentParser) -> None:
    """Add flags shared by every generator."""
    parser.add_argument(
        "--input", "-i",
        required=True,
        help="Path to the OpenAPI spec (YAML or JSON)"
    )
    parser.add_argument(
        "--options",
        default=None,
        help="Path to a YAML options file (default: k3singress.yaml, searched up from cwd); flags override its values"
    )
    parser.add_argument(
        "--output", "-o",
        default=None,
        help="Output file (default: stdout)"
    )
    parser.add_argument(
        "--namespace", "-n",
        default=None,
        help="Namespace for generated resources (default: default)"
    )
    parser.add_argument(
        "--host",
        default=None,
        help="Host the rules match (default: any host)"
    )
    parser.add_argument(
        "--service.name",
        dest="service_name",
        default=None,
        help="Target Service name"
    )
    parser.add_argument(
        "--service.namespace",
        dest="service_namespace",
        default=None,
        help="Target Service namespace (default: default)"
    )
    parser.add_argument(
        "--service.port",
        dest="service_port",
        type=int,
        default=None,
        help="Target Service port (default: 80)"
    )


def options_from_args(generator: Generator, args: argparse.Namespace) -> Options:
    """
    Build options from the options file and CLI flags.

    Args:
        generator: Selected generator
        args: Parsed CLI arguments

    Returns:
        Options (not yet defaulted or validated)
    """
    file_options: Dict[str, Any] = {}
    options_path = args.options or find_options_file()
    if options_path:
        logger.info(f"Loading options from {options_path}")
        file_options = load_options_file(str(options_path))

    overrides: Dict[str, Any] = {
        "namespace": args.namespace,
        "host": args.host,
        "service": {
            "name": args.service_name,
            "namespace": args.service_namespace,
            "port": args.service_port,
        },
    }
    overrides = merge_options(overrides, generator.options_from_args(args))

    return Options.from_dict(merge_options(file_options, overrides))


def cmd_generate(args: argparse.Namespace, registry: GeneratorRegistry) -> None:
    """Run a generator."""
    generator = registry.get(args.generator)
    if generator is None:
        print(f"Error: unknown generator {args.generator}", file=sys.stderr)
        sys.exit(1)

    try:
        options = options_from_args(generator, args)
        spec = load_openapi(args.input)
        output = generator.generate(options, spec)
    except (K3sIngressError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(output)
        logger.info(f"Wrote manifests to {output_path}")
    else:
        sys.stdout.write(output)


def cmd_list(args: argparse.Namespace, registry: GeneratorRegistry) -> None:
    """List registered generators."""
    print("Generators:")
    print("-" * 60)
    for generator in registry:
        print(f"  {generator.name:<12} {generator.short_description}")


def build_parser(registry: GeneratorRegistry) -> argparse.ArgumentParser:
    """Build the argument parser with one subcommand per generator."""
    parser = argparse.ArgumentParser(
        description="K3s Ingress CLI - Generate Kubernetes manifests from an OpenAPI spec"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable info logging"
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    for generator in registry:
        gen_parser = subparsers.add_parser(
            generator.name,
            help=generator.short_description,
            description=generator.long_description,
        )
        add_common_arguments(gen_parser)
        generator.add_arguments(gen_parser)
        gen_parser.set_defaults(generator=generator.name)

    subparsers.add_parser("list", help="List available generators")

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """CLI entry point."""
    registry = build_registry()
    parser = build_parser(registry)
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if args.command == "list":
        cmd_list(args, registry)
    elif args.command in registry:
        cmd_generate(args, registry)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
