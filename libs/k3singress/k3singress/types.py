"""
Type definitions for K3s Ingress.

Options mirror the generator flags and the optional options file; the
resource types describe the networking.k8s.io/v1 Ingress objects we emit.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, NamedTuple, Optional, Tuple

from .errors import ValidationError

INGRESS_API_VERSION = "networking.k8s.io/v1"
INGRESS_KIND = "Ingress"


def _mapping(data: Any, section: str) -> Dict:
    """Return data as a dict, treating None as empty."""
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError(f"{section}: must be a mapping, got {type(data).__name__}")
    return data


def _get(data: Dict, key: str, default: Any) -> Any:
    """Get a value, treating an explicit None as absent."""
    value = data.get(key)
    return default if value is None else value


class PathType(str, Enum):
    """Ingress path matching type."""
    PREFIX = "Prefix"
    EXACT = "Exact"


@dataclass(frozen=True)
class PathOptions:
    """Base path and split behaviour."""
    base: str = "/"
    split: bool = False

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> "PathOptions":
        data = _mapping(data, "path")
        return cls(
            base=_get(data, "base", "/"),
            split=_get(data, "split", False),
        )


@dataclass(frozen=True)
class ServiceOptions:
    """The Kubernetes Service traffic is routed to."""
    name: str = ""
    namespace: str = "default"
    port: int = 80

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> "ServiceOptions":
        data = _mapping(data, "service")
        return cls(
            name=_get(data, "name", ""),
            namespace=_get(data, "namespace", "default"),
            port=_get(data, "port", 80),
        )


@dataclass(frozen=True)
class IngressOptions:
    """Ingress controller settings."""
    ingress_class: str = ""  # empty means the cluster default class

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> "IngressOptions":
        data = _mapping(data, "ingress")
        return cls(ingress_class=_get(data, "class", ""))


@dataclass(frozen=True)
class PathSubOptions:
    """Per-path overrides."""
    disabled: bool = False

    @classmethod
    def from_dict(cls, data: Optional[Dict], path: str = "") -> "PathSubOptions":
        data = _mapping(data, f"paths.{path}" if path else "paths")
        return cls(disabled=_get(data, "disabled", False))


@dataclass(frozen=True)
class Options:
    """Complete options for one generation run."""
    namespace: str = "default"
    host: str = ""
    path: PathOptions = field(default_factory=PathOptions)
    service: ServiceOptions = field(default_factory=ServiceOptions)
    ingress: IngressOptions = field(default_factory=IngressOptions)
    paths: Dict[str, PathSubOptions] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> "Options":
        data = _mapping(data, "options")
        paths = {
            path: PathSubOptions.from_dict(sub, path)
            for path, sub in _mapping(data.get("paths"), "paths").items()
        }
        return cls(
            namespace=_get(data, "namespace", "default"),
            host=_get(data, "host", ""),
            path=PathOptions.from_dict(data.get("path")),
            service=ServiceOptions.from_dict(data.get("service")),
            ingress=IngressOptions.from_dict(data.get("ingress")),
            paths=paths,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "namespace": self.namespace,
            "host": self.host,
            "path": {"base": self.path.base, "split": self.path.split},
            "service": {
                "name": self.service.name,
                "namespace": self.service.namespace,
                "port": self.service.port,
            },
            "ingress": {"class": self.ingress.ingress_class},
            "paths": {
                path: {"disabled": sub.disabled} for path, sub in self.paths.items()
            },
        }

    def is_path_disabled(self, path: str) -> bool:
        """Check whether a spec path has been switched off."""
        sub = self.paths.get(path)
        return bool(sub and sub.disabled)


@dataclass(frozen=True)
class ServiceBackend:
    """Backend service an Ingress path routes to."""
    name: str
    port: int


class PathMatch(NamedTuple):
    """A match path and how it is matched."""
    path: str
    path_type: PathType


@dataclass(frozen=True)
class IngressResource:
    """A single Ingress object, ready to be serialized."""
    name: str
    namespace: str
    paths: Tuple[PathMatch, ...]
    backend: ServiceBackend
    host: str = ""
    ingress_class: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Render as a Kubernetes manifest dict."""
        http_rule: Dict[str, Any] = {
            "http": {
                "paths": [
                    {
                        "path": match.path,
                        "pathType": match.path_type.value,
                        "backend": {
                            "service": {
                                "name": self.backend.name,
                                "port": {"number": self.backend.port},
                            },
                        },
                    }
                    for match in self.paths
                ],
            },
        }

        # Wildcard rule when no host is set
        if self.host:
            http_rule["host"] = self.host

        spec: Dict[str, Any] = {"rules": [http_rule]}
        if self.ingress_class:
            spec["ingressClassName"] = self.ingress_class

        return {
            "apiVersion": INGRESS_API_VERSION,
            "kind": INGRESS_KIND,
            "metadata": {
                "name": self.name,
                "namespace": self.namespace,
            },
            "spec": spec,
        }
