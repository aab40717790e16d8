"""
OpenAPI v3 document loading for k3singress.

Only the envelope is checked: the version, and that paths is an object
keyed by path templates. Operations and schemas are left untouched.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

import jsonschema
import yaml

from .errors import SpecLoadError


@dataclass
class ApiSpec:
    """A parsed OpenAPI document."""
    openapi: str
    title: str = ""
    version: str = ""
    paths: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ApiSpec":
        info = data.get("info") or {}
        # Path items keep document order; top-level x- extensions are not paths
        paths = {
            path: item or {}
            for path, item in (data.get("paths") or {}).items()
            if path.startswith("/")
        }
        return cls(
            openapi=data["openapi"],
            title=info.get("title", ""),
            version=str(info.get("version", "")),
            paths=paths,
        )

    def path_extension(self, path: str, key: str) -> Any:
        """Get a vendor extension value from a path item."""
        return self.paths.get(path, {}).get(key)


def get_schema_path() -> Path:
    """Get path to the OpenAPI envelope schema."""
    return Path(__file__).parent / "schemas" / "openapi-schema.json"


def validate_openapi(data: Any) -> List[str]:
    """
    Validate an OpenAPI document envelope.

    Returns list of validation errors (empty if valid).
    """
    with open(get_schema_path()) as f:
        schema = json.load(f)

    validator = jsonschema.Draft7Validator(schema)
    errors = []
    for error in validator.iter_errors(data):
        path = ".".join(str(p) for p in error.absolute_path)
        errors.append(f"{path}: {error.message}" if path else error.message)
    return errors


def parse_openapi(data: Any, source: str = "<memory>") -> ApiSpec:
    """
    Parse an already-decoded OpenAPI document.

    Args:
        data: Decoded document
        source: Where the document came from, for error messages

    Returns:
        Parsed ApiSpec

    Raises:
        SpecLoadError: If the document is not OpenAPI v3
    """
    errors = validate_openapi(data)
    if errors:
        raise SpecLoadError(source, "; ".join(errors))
    return ApiSpec.from_dict(data)


def load_openapi(path: str) -> ApiSpec:
    """
    Load an OpenAPI document from a YAML or JSON file.

    Args:
        path: Path to the document

    Returns:
        Parsed ApiSpec

    Raises:
        SpecLoadError: If the file is missing, unreadable or invalid
    """
    spec_path = Path(path)
    if not spec_path.exists():
        raise SpecLoadError(path, "file not found")

    # JSON is a subset of YAML, so safe_load covers both
    try:
        with open(spec_path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise SpecLoadError(path, str(e)) from e

    return parse_openapi(data, path)
