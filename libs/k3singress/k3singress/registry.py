"""
Generator registry for K3s Ingress.

Generators are registered explicitly on a registry instance owned by the
caller; there is no module-level table.
"""

import argparse
from typing import Any, Dict, Iterator, List, Optional

from .openapi import ApiSpec
from .types import Options


class Generator:
    """Base class for manifest generators."""

    name: str = ""
    short_description: str = ""

    @property
    def long_description(self) -> str:
        return self.short_description

    def add_arguments(self, parser: argparse.ArgumentParser) -> None:
        """Add generator-specific CLI flags."""

    def options_from_args(self, args: argparse.Namespace) -> Dict[str, Any]:
        """Map parsed generator flags to an options override dict."""
        return {}

    def generate(self, options: Options, spec: ApiSpec) -> str:
        raise NotImplementedError


class GeneratorRegistry:
    """Registry of generators keyed by name"""

    def __init__(self) -> None:
        self._generators: Dict[str, Generator] = {}

    def register(self, generator: Generator) -> None:
        """Register a generator"""
        if not generator.name:
            raise ValueError("generator name must not be empty")
        if generator.name in self._generators:
            raise ValueError(f"generator {generator.name} is already registered")
        self._generators[generator.name] = generator

    def get(self, name: str) -> Optional[Generator]:
        """Get generator by name"""
        return self._generators.get(name)

    def list_names(self) -> List[str]:
        """List all generator names"""
        return sorted(self._generators)

    def __contains__(self, name: object) -> bool:
        return name in self._generators

    def __iter__(self) -> Iterator[Generator]:
        return iter(self._generators[name] for name in self.list_names())

    def __len__(self) -> int:
        return len(self._generators)


def build_registry() -> GeneratorRegistry:
    """Create a registry holding the built-in generators."""
    from .generators import IngressGenerator

    registry = GeneratorRegistry()
    registry.register(IngressGenerator())
    return registry
