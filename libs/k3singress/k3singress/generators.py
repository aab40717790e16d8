"""
Kubernetes Ingress generators for K3s Ingress.

Turns the paths of an OpenAPI spec into networking.k8s.io/v1 Ingress
resources, either one Ingress covering the whole service or one Ingress
per path.
"""

import argparse
import logging
import re
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Sequence, Set, Tuple

import yaml

from .errors import InvalidInputError, SerializationError, ValidationError
from .openapi import ApiSpec
from .options import apply_spec_extensions, fill_defaults_and_validate
from .registry import Generator
from .types import IngressResource, Options, PathMatch, PathType, ServiceBackend

logger = logging.getLogger(__name__)

# Matches an OpenAPI path variable such as {petId}, or an empty {}
PATH_VARIABLE_RE = re.compile(r"\{[^{}/]*\}")
PATH_VARIABLE_PATTERN = "([A-z0-9]+)"

_INVALID_NAME_CHARS_RE = re.compile(r"[^a-z0-9-]")
_HYPHEN_RUN_RE = re.compile(r"-{2,}")
_SEPARATOR_RUN_RE = re.compile(r"/{2,}")

DOCUMENT_SEPARATOR = "---\n"


def should_split(options: Options, spec_paths: Iterable[str]) -> bool:
    """
    Decide whether one Ingress per path is required.

    Args:
        options: Generation options
        spec_paths: Path templates from the OpenAPI spec

    Returns:
        True if split is forced or any path is disabled
    """
    if options.path.split:
        return True

    # A single Ingress can't leave out one path
    return any(options.is_path_disabled(path) for path in spec_paths)


def resource_name_from_path(path: str) -> str:
    """
    Derive an Ingress name fragment from a path template.

    "/pets/{petId}/photos" becomes "pets-petid-photos"; "" and "/" become
    "root".
    """
    if not path or path == "/":
        return "root"

    segments = [
        segment.replace("{", "").replace("}", "")
        for segment in path.split("/")
        if segment
    ]
    name = _INVALID_NAME_CHARS_RE.sub("-", "-".join(segments).lower())
    name = _HYPHEN_RUN_RE.sub("-", name).strip("-")
    return name or "root"


def _collapse_separators(path: str) -> str:
    return _SEPARATOR_RUN_RE.sub("/", path)


def build_path_match(base_path: str, path: str, split: bool) -> PathMatch:
    """
    Build the Ingress match path and path type for a path template.

    Args:
        base_path: Base path all service endpoints live under
        path: OpenAPI path template
        split: Whether the match is for a per-path Ingress

    Returns:
        PathMatch with doubled separators collapsed
    """
    literal_type = PathType.EXACT if split else PathType.PREFIX

    if PATH_VARIABLE_RE.search(path):
        # Regex patterns can't be matched exactly
        pattern = PATH_VARIABLE_RE.sub(PATH_VARIABLE_PATTERN, path)
        return PathMatch(_collapse_separators(f"{base_path}/{pattern}"), PathType.PREFIX)

    if path == "/":
        return PathMatch(_collapse_separators(f"{base_path}$"), literal_type)

    return PathMatch(_collapse_separators(f"{base_path}/{path}"), literal_type)


def new_ingress_resource(
    name: str,
    namespace: str,
    paths: Sequence[PathMatch],
    backend: ServiceBackend,
    host: str = "",
    ingress_class: str = "",
) -> IngressResource:
    """
    Assemble an Ingress resource.

    Args:
        name: Ingress name
        namespace: Ingress namespace
        paths: Match paths, one HTTP path entry each
        backend: Service all paths route to
        host: Rule host, wildcard if empty
        ingress_class: Ingress class, cluster default if empty

    Returns:
        IngressResource

    Raises:
        InvalidInputError: If name, backend service name or paths are empty
    """
    if not name:
        raise InvalidInputError("ingress name must not be empty")
    if not backend.name:
        raise InvalidInputError(f"ingress {name}: backend service name must not be empty")
    if not paths:
        raise InvalidInputError(f"ingress {name}: at least one path is required")

    return IngressResource(
        name=name,
        namespace=namespace,
        paths=tuple(paths),
        backend=backend,
        host=host,
        ingress_class=ingress_class,
    )


def _backend(options: Options) -> ServiceBackend:
    return ServiceBackend(name=options.service.name, port=options.service.port)


def generate_consolidated_ingress(options: Options, spec: ApiSpec) -> IngressResource:
    """
    Generate a single Ingress covering every path of the OpenAPI spec.

    Each spec path becomes a Prefix rule. A spec without paths gets one
    rule on the base path.
    """
    matches: List[PathMatch] = []
    for path in spec.paths:
        match = build_path_match(options.path.base, path, split=False)
        if match not in matches:
            matches.append(match)

    if not matches:
        matches.append(PathMatch(options.path.base, PathType.PREFIX))

    return new_ingress_resource(
        f"{options.service.name}-ingress",
        options.namespace,
        matches,
        _backend(options),
        options.host,
        options.ingress.ingress_class,
    )


def generate_split_ingresses(options: Options, spec: ApiSpec) -> List[IngressResource]:
    """
    Generate one Ingress per enabled spec path, sorted by name.
    """
    ingresses: List[IngressResource] = []

    for path in spec.paths:
        if options.is_path_disabled(path):
            logger.debug(f"Skipping disabled path {path}")
            continue

        name = f"{options.service.name}-{resource_name_from_path(path)}"
        ingresses.append(
            new_ingress_resource(
                name,
                options.namespace,
                [build_path_match(options.path.base, path, split=True)],
                _backend(options),
                options.host,
                options.ingress.ingress_class,
            )
        )

    # Spec path order is not stable across tools; name order is
    ingresses.sort(key=lambda ingress: (ingress.name, ingress.paths))
    return _unique_names(ingresses)


def _unique_names(ingresses: List[IngressResource]) -> List[IngressResource]:
    """
    Suffix clashing names with -2, -3, ... and drop exact duplicates.

    Expects ingresses sorted by (name, paths), so suffixes don't depend on
    spec path order.
    """
    taken = {ingress.name for ingress in ingresses}
    seen: Dict[str, Set[Tuple[PathMatch, ...]]] = {}
    unique: List[IngressResource] = []

    for ingress in ingresses:
        matches = seen.setdefault(ingress.name, set())
        if ingress.paths in matches:
            logger.debug(f"Dropping duplicate Ingress {ingress.name}")
            continue

        if matches:
            suffix = len(matches) + 1
            while f"{ingress.name}-{suffix}" in taken:
                suffix += 1
            name = f"{ingress.name}-{suffix}"
            logger.warning(f"Ingress name {ingress.name} is already used, renaming to {name}")
            taken.add(name)
            matches.add(ingress.paths)
            ingress = replace(ingress, name=name)
        else:
            matches.add(ingress.paths)

        unique.append(ingress)

    unique.sort(key=lambda ingress: ingress.name)
    return unique


def serialize_resource(resource: IngressResource) -> str:
    """
    Serialize an Ingress resource to YAML.

    Raises:
        SerializationError: If the resource can't be represented in YAML
    """
    try:
        return yaml.safe_dump(resource.to_dict(), default_flow_style=False)
    except yaml.YAMLError as e:
        raise SerializationError(resource.name, e) from e


def build_output(resources: Iterable[IngressResource]) -> str:
    """
    Join serialized resources into one multi-document YAML string.

    Every document, including the first, is preceded by a separator line.
    """
    documents = []
    for resource in resources:
        documents.append(DOCUMENT_SEPARATOR)
        documents.append(serialize_resource(resource))
    return "".join(documents)


def generate_ingress(options: Options, spec: ApiSpec) -> str:
    """
    Generate Ingress YAML for an OpenAPI spec.

    Args:
        options: Generation options, defaulted and validated here
        spec: Parsed OpenAPI spec

    Returns:
        YAML text, a bare document in consolidated mode or separated
        documents in split mode

    Raises:
        ValidationError: If the options are invalid
        InvalidInputError: If a resource can't be assembled
        SerializationError: If a resource can't be serialized
    """
    try:
        options = fill_defaults_and_validate(options)
    except ValidationError as e:
        raise ValidationError("failed to validate options", e.errors) from e

    options = apply_spec_extensions(options, spec)

    if should_split(options, spec.paths):
        ingresses = generate_split_ingresses(options, spec)
        if not ingresses:
            logger.warning("All paths are disabled, no Ingress generated")
        logger.info(f"Generated {len(ingresses)} Ingress resources (split)")
        return build_output(ingresses)

    ingress = generate_consolidated_ingress(options, spec)
    logger.info(f"Generated Ingress {ingress.name} with {len(ingress.paths)} paths")
    return serialize_resource(ingress)


class IngressGenerator(Generator):
    """Generic networking.k8s.io/v1 Ingress generator."""

    name = "ingress"
    short_description = "generates a generic ingress definition for your service"

    def add_arguments(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument(
            "--path.base",
            dest="path_base",
            default=None,
            help="a base path for Service endpoints (default: /)"
        )
        parser.add_argument(
            "--path.split",
            dest="path_split",
            action="store_true",
            default=None,
            help="generate a separate Ingress for each path"
        )
        parser.add_argument(
            "--ingress.class",
            dest="ingress_class",
            default=None,
            help="Ingress class name; if omitted, a default Ingress class should be defined"
        )

    def options_from_args(self, args: argparse.Namespace) -> Dict[str, Any]:
        return {
            "path": {
                "base": getattr(args, "path_base", None),
                "split": getattr(args, "path_split", None),
            },
            "ingress": {"class": getattr(args, "ingress_class", None)},
        }

    def generate(self, options: Options, spec: ApiSpec) -> str:
        return generate_ingress(options, spec)
