"""
K3s Ingress - Generate Kubernetes Ingress manifests from OpenAPI specs.

Each path of an OpenAPI v3 spec is routed to a single backend Service,
either through one Ingress or through one Ingress per path.
"""

from .types import (
    PathType,
    PathOptions,
    ServiceOptions,
    IngressOptions,
    PathSubOptions,
    Options,
    ServiceBackend,
    PathMatch,
    IngressResource,
)
from .errors import (
    K3sIngressError,
    ValidationError,
    InvalidInputError,
    SerializationError,
    SpecLoadError,
)
from .openapi import ApiSpec, load_openapi, parse_openapi
from .options import fill_defaults_and_validate, load_options_file
from .generators import (
    should_split,
    resource_name_from_path,
    build_path_match,
    new_ingress_resource,
    build_output,
    generate_ingress,
    IngressGenerator,
)
from .registry import Generator, GeneratorRegistry, build_registry

__version__ = "0.1.0"
__all__ = [
    # Types
    "PathType",
    "PathOptions",
    "ServiceOptions",
    "IngressOptions",
    "PathSubOptions",
    "Options",
    "ServiceBackend",
    "PathMatch",
    "IngressResource",
    # Errors
    "K3sIngressError",
    "ValidationError",
    "InvalidInputError",
    "SerializationError",
    "SpecLoadError",
    # OpenAPI and options
    "ApiSpec",
    "load_openapi",
    "parse_openapi",
    "fill_defaults_and_validate",
    "load_options_file",
    # Generators
    "should_split",
    "resource_name_from_path",
    "build_path_match",
    "new_ingress_resource",
    "build_output",
    "generate_ingress",
    "IngressGenerator",
    # Registry
    "Generator",
    "GeneratorRegistry",
    "build_registry",
]
