"""Tests for the k3singress generator registry."""

import pytest

from k3singress.generators import IngressGenerator
from k3singress.registry import Generator, GeneratorRegistry, build_registry


class EchoGenerator(Generator):
    name = "echo"
    short_description = "echoes the spec title"

    def generate(self, options, spec):
        return spec.title


class TestGeneratorRegistry:
    def test_register_and_get(self):
        registry = GeneratorRegistry()
        generator = EchoGenerator()
        registry.register(generator)

        assert registry.get("echo") is generator
        assert "echo" in registry
        assert len(registry) == 1

    def test_get_unknown(self):
        assert GeneratorRegistry().get("missing") is None

    def test_duplicate_rejected(self):
        registry = GeneratorRegistry()
        registry.register(EchoGenerator())

        with pytest.raises(ValueError):
            registry.register(EchoGenerator())

    def test_unnamed_rejected(self):
        with pytest.raises(ValueError):
            GeneratorRegistry().register(Generator())

    def test_list_names_sorted(self):
        registry = GeneratorRegistry()
        registry.register(IngressGenerator())
        registry.register(EchoGenerator())

        assert registry.list_names() == ["echo", "ingress"]
        assert [g.name for g in registry] == ["echo", "ingress"]

    def test_registries_are_independent(self):
        first = GeneratorRegistry()
        first.register(EchoGenerator())

        assert "echo" not in GeneratorRegistry()


class TestGenerator:
    def test_long_description_defaults_to_short(self):
        assert EchoGenerator().long_description == "echoes the spec title"

    def test_base_generate_not_implemented(self):
        with pytest.raises(NotImplementedError):
            Generator().generate(None, None)


class TestBuildRegistry:
    def test_ingress_registered(self):
        registry = build_registry()

        assert registry.list_names() == ["ingress"]
        assert isinstance(registry.get("ingress"), IngressGenerator)

    def test_fresh_registry_each_call(self):
        assert build_registry() is not build_registry()
