"""
Options loading, defaulting and validation for k3singress.
"""

import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Optional

import jsonschema
import yaml

from .errors import ValidationError
from .openapi import ApiSpec
from .types import Options, PathSubOptions

logger = logging.getLogger(__name__)

EXTENSION_KEY = "x-k3singress"
OPTIONS_FILENAME = "k3singress.yaml"


def get_schema_path() -> Path:
    """Get path to the options JSON schema file."""
    return Path(__file__).parent / "schemas" / "options-schema.json"


def load_schema() -> Dict[str, Any]:
    """Load the JSON schema for options."""
    with open(get_schema_path()) as f:
        return json.load(f)


def find_options_file() -> Optional[Path]:
    """
    Find k3singress.yaml by searching up from current directory.

    Returns:
        Path to k3singress.yaml or None if not found
    """
    current = Path.cwd()
    for parent in [current] + list(current.parents):
        candidate = parent / OPTIONS_FILENAME
        if candidate.exists():
            return candidate
    return None


def load_options_file(path: str) -> Dict[str, Any]:
    """
    Load an options file.

    Args:
        path: Path to a YAML options file

    Returns:
        Parsed YAML content as dict

    Raises:
        FileNotFoundError: If the file does not exist
        ValidationError: If the file is not a YAML mapping
    """
    options_path = Path(path)
    if not options_path.exists():
        raise FileNotFoundError(f"options file not found at {path}")

    with open(options_path) as f:
        data = yaml.safe_load(f)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError(f"options file {path} must contain a mapping")
    return data


def merge_options(
    base: Optional[Dict[str, Any]],
    overrides: Optional[Dict[str, Any]],
) -> Dict[str, Any]:
    """
    Deep-merge two options dicts.

    None values in overrides are skipped so that unset CLI flags leave
    values from the options file alone.
    """
    merged: Dict[str, Any] = dict(base or {})
    for key, value in (overrides or {}).items():
        if value is None:
            continue
        if isinstance(value, dict):
            current = merged.get(key)
            if isinstance(current, dict):
                merged[key] = merge_options(current, value)
                continue
            # Sections of unset flags leave base values, valid or not, alone
            nested = merge_options({}, value)
            if nested:
                merged[key] = nested
        else:
            merged[key] = value
    return merged


def validate_options(options: Options) -> List[str]:
    """
    Validate options against the JSON schema.

    Returns list of validation errors (empty if valid).
    """
    validator = jsonschema.Draft7Validator(load_schema())
    errors = []
    for error in sorted(validator.iter_errors(options.to_dict()), key=lambda e: list(e.absolute_path)):
        path = ".".join(str(p) for p in error.absolute_path)
        errors.append(f"{path}: {error.message}" if path else error.message)
    return errors


def fill_defaults(options: Options) -> Options:
    """Return a copy with empty values replaced by their defaults."""
    return replace(
        options,
        namespace=options.namespace or "default",
        path=replace(options.path, base=options.path.base or "/"),
        service=replace(
            options.service,
            namespace=options.service.namespace or "default",
            port=80 if options.service.port is None else options.service.port,
        ),
    )


def fill_defaults_and_validate(options: Options) -> Options:
    """
    Default and validate options.

    Returns:
        Defaulted Options

    Raises:
        ValidationError: If the options are invalid
    """
    options = fill_defaults(options)
    errors = validate_options(options)
    if errors:
        raise ValidationError("invalid options", errors)
    return options


def apply_spec_extensions(options: Options, spec: ApiSpec) -> Options:
    """
    Disable paths marked with ``x-k3singress: {disabled: true}`` in the OpenAPI spec.

    Paths already present in the options keep their explicit setting.
    """
    paths = dict(options.paths)
    for path in spec.paths:
        if path in paths:
            continue
        extension = spec.path_extension(path, EXTENSION_KEY)
        if isinstance(extension, dict) and extension.get("disabled"):
            logger.debug(f"Path {path} disabled by {EXTENSION_KEY} extension")
            paths[path] = PathSubOptions(disabled=True)
    return replace(options, paths=paths)
