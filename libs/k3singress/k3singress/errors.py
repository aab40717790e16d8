"""
Exceptions raised by k3singress.

Every failure aborts the whole generation call; nothing here is retried.
"""

from typing import List, Optional


class K3sIngressError(Exception):
    """Base exception for all k3singress errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(K3sIngressError):
    """Options are incomplete or invalid."""

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        self.errors = errors or []
        if self.errors:
            message = f"{message}:\n" + "\n".join(f"  {e}" for e in self.errors)
        super().__init__(message)


class InvalidInputError(K3sIngressError):
    """A resource was assembled from an empty name or backend."""


class SerializationError(K3sIngressError):
    """A resource could not be encoded to YAML."""

    def __init__(self, resource_name: str, cause: Optional[Exception] = None):
        self.resource_name = resource_name
        self.cause = cause
        message = f"unable to marshal ingress resource '{resource_name}'"
        if cause:
            message += f": {cause}"
        super().__init__(message)


class SpecLoadError(K3sIngressError):
    """An OpenAPI document could not be loaded or is not OpenAPI v3."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Failed to load OpenAPI spec from '{source}': {reason}")
