"""Tests for the k3singress CLI."""

import pytest
import yaml

from k3singress.cli import build_parser, main, options_from_args
from k3singress.registry import build_registry


@pytest.fixture
def spec_file(tmp_path):
    """Create temporary OpenAPI spec file."""
    spec = {
        "openapi": "3.0.0",
        "info": {"title": "Petstore", "version": "1.0.0"},
        "paths": {
            "/pets": {"get": {}},
            "/pets/{petId}": {"get": {}},
        },
    }
    file_path = tmp_path / "openapi.yaml"
    file_path.write_text(yaml.dump(spec, sort_keys=False))
    return str(file_path)


@pytest.fixture
def options_file(tmp_path):
    """Create temporary options file."""
    file_path = tmp_path / "options.yaml"
    file_path.write_text(yaml.dump({
        "namespace": "apps",
        "service": {"name": "petstore", "port": 8080},
        "path": {"base": "/api"},
    }))
    return str(file_path)


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    """Keep options file discovery away from the real working tree."""
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def registry():
    return build_registry()


class TestOptionsFromArgs:
    def test_flags_only(self, registry, spec_file):
        args = build_parser(registry).parse_args([
            "ingress", "-i", spec_file,
            "--service.name", "petstore",
            "--service.port", "9090",
            "--path.base", "/v1",
            "--path.split",
            "--ingress.class", "nginx",
            "--host", "pets.example.com",
        ])
        options = options_from_args(registry.get("ingress"), args)

        assert options.service.name == "petstore"
        assert options.service.port == 9090
        assert options.path.base == "/v1"
        assert options.path.split is True
        assert options.ingress.ingress_class == "nginx"
        assert options.host == "pets.example.com"

    def test_flags_override_file(self, registry, spec_file, options_file):
        args = build_parser(registry).parse_args([
            "ingress", "-i", spec_file,
            "--options", options_file,
            "--namespace", "web",
        ])
        options = options_from_args(registry.get("ingress"), args)

        assert options.namespace == "web"
        assert options.service.name == "petstore"
        assert options.service.port == 8080
        assert options.path.base == "/api"
        assert options.path.split is False


class TestMain:
    def test_generate_to_stdout(self, spec_file, capsys):
        main(["ingress", "-i", spec_file, "--service.name", "petstore"])

        doc = yaml.safe_load(capsys.readouterr().out)
        assert doc["metadata"]["name"] == "petstore-ingress"
        paths = doc["spec"]["rules"][0]["http"]["paths"]
        assert [p["path"] for p in paths] == ["/pets", "/pets/([A-z0-9]+)"]

    def test_generate_split_to_file(self, spec_file, tmp_path):
        output = tmp_path / "out" / "ingress.yaml"

        main([
            "ingress", "-i", spec_file,
            "--service.name", "petstore",
            "--path.split",
            "-o", str(output),
        ])

        documents = list(yaml.safe_load_all(output.read_text()))
        assert [d["metadata"]["name"] for d in documents] == [
            "petstore-pets",
            "petstore-pets-petid",
        ]

    def test_invalid_options_exit(self, spec_file, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["ingress", "-i", spec_file])

        assert exc_info.value.code == 1
        assert "Error: failed to validate options" in capsys.readouterr().err

    def test_missing_spec_exit(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["ingress", "-i", "/nonexistent/openapi.yaml", "--service.name", "petstore"])

        assert exc_info.value.code == 1
        assert "Error:" in capsys.readouterr().err

    def test_discovers_options_file(self, spec_file, options_file, tmp_path, capsys):
        (tmp_path / "k3singress.yaml").write_text((tmp_path / "options.yaml").read_text())

        main(["ingress", "-i", spec_file])

        doc = yaml.safe_load(capsys.readouterr().out)
        assert doc["metadata"]["namespace"] == "apps"
        assert doc["spec"]["rules"][0]["http"]["paths"][0]["path"] == "/api/pets"

    @pytest.mark.parametrize(
        "content",
        ["paths:\n  /pets: true\n", "paths:\n  - /pets\n", "path: /api\n"],
    )
    def test_malformed_options_file_exit(self, spec_file, tmp_path, capsys, content):
        file_path = tmp_path / "options.yaml"
        file_path.write_text(content)

        with pytest.raises(SystemExit) as exc_info:
            main(["ingress", "-i", spec_file, "--options", str(file_path), "--service.name", "petstore"])

        assert exc_info.value.code == 1
        assert "must be a mapping" in capsys.readouterr().err

    def test_missing_options_file_exit(self, spec_file, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["ingress", "-i", spec_file, "--options", "/nonexistent/options.yaml"])

        assert exc_info.value.code == 1
        assert "options file not found" in capsys.readouterr().err

    def test_list(self, capsys):
        main(["list"])

        out = capsys.readouterr().out
        assert "ingress" in out
        assert "generates a generic ingress definition" in out

    def test_no_command_prints_help(self, capsys):
        main([])
        assert "usage:" in capsys.readouterr().out
